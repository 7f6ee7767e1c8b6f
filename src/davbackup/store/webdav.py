"""WebDAV remote file store over httpx.

Maps the RemoteFileStore capability set onto WebDAV verbs:
- exists: PROPFIND (Depth: 0)
- create_directory: MKCOL, one segment at a time when recursive
- get_directory_contents: PROPFIND (Depth: 1)
- move_file: MOVE with an absolute Destination
- delete_file: DELETE
- put_file_contents: PUT (streamed, no body size limit)
- get_file_contents: GET
"""

from __future__ import annotations

import posixpath
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Union
from urllib.parse import quote, unquote, urlsplit

import httpx

from davbackup.config import WebDavConfig
from davbackup.exceptions import NotInitializedError, RemoteNotFoundError, RemoteStoreError
from davbackup.logger import Logger, create_logger

from .base import Content, FileStat, GetOptions, PutOptions, WriteResult, as_byte_stream

DAV_NS = "{DAV:}"

PROPFIND_BODY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<d:propfind xmlns:d="DAV:"><d:prop>'
    "<d:resourcetype/><d:getlastmodified/><d:getcontentlength/><d:getetag/>"
    "</d:prop></d:propfind>"
)


def _clean_path(path: str) -> str:
    path = posixpath.normpath("/" + path.strip())
    return "/" + path.strip("/")


class WebDavFileStore:
    """RemoteFileStore backed by a WebDAV server.

    Example:
        config = WebDavConfig(url="https://dav.example.com/dav", username="me", password="pw")
        async with WebDavFileStore(config) as store:
            await store.put_file_contents("/backups/data.json", b"{}")

    Args:
        config: Connection settings
        logger: Optional logger instance
        transport: Optional httpx transport, replaces the network (tests)
    """

    def __init__(
        self,
        config: WebDavConfig,
        logger: Optional[Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.logger = logger or create_logger(name="davbackup-store")
        self._base_path = unquote(urlsplit(config.url).path).rstrip("/")

        auth = None
        if config.username:
            auth = httpx.BasicAuth(config.username, config.password or "")

        client_kwargs: Dict[str, object] = {
            "auth": auth,
            "timeout": httpx.Timeout(config.timeout),
            "verify": config.verify_ssl,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        elif config.proxy:
            client_kwargs["proxy"] = config.proxy

        self._client = httpx.AsyncClient(**client_kwargs)

        self.logger.debug(
            "WebDavFileStore initialized",
            url=config.url,
            user=config.username or "-",
            proxy=config.proxy or "-",
        )

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def url_for(self, path: str) -> str:
        """Absolute URL of a store path."""
        return f"{self.config.url}{quote(_clean_path(path))}"

    def _path_from_href(self, href: str) -> str:
        href_path = unquote(urlsplit(href).path)
        base = self._base_path
        if base and (href_path == base or href_path.startswith(base + "/")):
            href_path = href_path[len(base):]
        return _clean_path(href_path)

    async def _request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[object] = None,
    ) -> httpx.Response:
        if self.closed:
            raise NotInitializedError("WebDAV client is closed")

        try:
            response = await self._client.request(
                method, self.url_for(path), headers=headers, content=content
            )
        except httpx.HTTPError as e:
            self.logger.error("WebDAV request failed", method=method, path=path, error=str(e))
            raise RemoteStoreError(
                f"{method} {path} failed: {e}", details={"method": method, "path": path}
            ) from e

        self.logger.debug(
            "WebDAV request", method=method, path=path, status=response.status_code
        )
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
        if response.is_success:
            return
        details = {"method": method, "path": path}
        if response.status_code == 404:
            raise RemoteNotFoundError(
                f"{method} {path}: not found", status_code=404, details=details
            )
        raise RemoteStoreError(
            f"{method} {path}: HTTP {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
            details=details,
        )

    async def _propfind(self, path: str, depth: str) -> httpx.Response:
        return await self._request(
            "PROPFIND",
            path,
            headers={"Depth": depth, "Content-Type": "application/xml; charset=utf-8"},
            content=PROPFIND_BODY,
        )

    async def exists(self, path: str) -> bool:
        response = await self._propfind(path, "0")
        if response.status_code == 404:
            return False
        self._raise_for_status(response, "PROPFIND", path)
        return True

    async def create_directory(self, path: str, recursive: bool = False) -> None:
        path = _clean_path(path)
        if not recursive:
            response = await self._request("MKCOL", path)
            self._raise_for_status(response, "MKCOL", path)
            return

        current = ""
        for segment in path.strip("/").split("/"):
            if not segment:
                continue
            current = f"{current}/{segment}"
            if await self.exists(current):
                continue
            response = await self._request("MKCOL", current)
            # 405: created concurrently by someone else
            if response.status_code == 405:
                continue
            self._raise_for_status(response, "MKCOL", current)
            self.logger.debug("Created collection", path=current)

    async def get_directory_contents(self, path: str) -> List[FileStat]:
        path = _clean_path(path)
        response = await self._propfind(path, "1")
        self._raise_for_status(response, "PROPFIND", path)
        return [
            stat for stat in self._parse_multistatus(response.content) if stat.filename != path
        ]

    def _parse_multistatus(self, body: bytes) -> List[FileStat]:
        try:
            root = ET.fromstring(body)
        except ET.ParseError as e:
            raise RemoteStoreError(f"Malformed PROPFIND response: {e}") from e

        entries = []
        for response in root.iter(f"{DAV_NS}response"):
            href = response.findtext(f"{DAV_NS}href")
            if not href:
                continue

            props: Dict[str, Optional[str]] = {}
            is_collection = False
            for propstat in response.iter(f"{DAV_NS}propstat"):
                status = propstat.findtext(f"{DAV_NS}status") or ""
                if " 200 " not in f"{status} ":
                    continue
                prop = propstat.find(f"{DAV_NS}prop")
                if prop is None:
                    continue
                resourcetype = prop.find(f"{DAV_NS}resourcetype")
                if resourcetype is not None and resourcetype.find(f"{DAV_NS}collection") is not None:
                    is_collection = True
                props["lastmod"] = prop.findtext(f"{DAV_NS}getlastmodified") or props.get("lastmod")
                props["size"] = prop.findtext(f"{DAV_NS}getcontentlength") or props.get("size")
                props["etag"] = prop.findtext(f"{DAV_NS}getetag") or props.get("etag")

            filename = self._path_from_href(href)
            size = props.get("size")
            entries.append(
                FileStat(
                    basename=posixpath.basename(filename),
                    filename=filename,
                    type="directory" if is_collection else "file",
                    lastmod=props.get("lastmod"),
                    size=int(size) if size and size.isdigit() else None,
                    etag=props.get("etag"),
                )
            )
        return entries

    async def move_file(self, source: str, destination: str) -> None:
        response = await self._request(
            "MOVE",
            source,
            headers={"Destination": self.url_for(destination), "Overwrite": "T"},
        )
        self._raise_for_status(response, "MOVE", source)

    async def delete_file(self, path: str) -> None:
        response = await self._request("DELETE", path)
        self._raise_for_status(response, "DELETE", path)

    async def put_file_contents(
        self, path: str, content: Content, options: Optional[PutOptions] = None
    ) -> WriteResult:
        options = options or PutOptions()
        headers: Dict[str, str] = {}
        if not options.overwrite:
            headers["If-None-Match"] = "*"
        if options.content_length is not None:
            headers["Content-Length"] = str(options.content_length)
        if options.content_type:
            headers["Content-Type"] = options.content_type

        response = await self._request("PUT", path, headers=headers, content=as_byte_stream(content))
        self._raise_for_status(response, "PUT", path)
        return WriteResult(
            path=_clean_path(path),
            status_code=response.status_code,
            etag=response.headers.get("etag"),
        )

    async def get_file_contents(
        self, path: str, options: Optional[GetOptions] = None
    ) -> Union[bytes, str]:
        options = options or GetOptions()
        response = await self._request("GET", path)
        self._raise_for_status(response, "GET", path)
        if options.format == "text":
            return response.content.decode(options.encoding)
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "WebDavFileStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
