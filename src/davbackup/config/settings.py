"""Typed settings for the WebDAV connection and the rotation policy

Both models can be built directly or from environment-style mappings with a
configurable prefix:

    config = WebDavConfig.from_env(prefix="DAVBACKUP")
    policy = RotationPolicy.from_env(prefix="DAVBACKUP")
"""

from __future__ import annotations

from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from davbackup.exceptions import ConfigurationError

from .env_loader import EnvLoader

DEFAULT_MAX_VERSIONS = 10
DEFAULT_UTC_OFFSET_HOURS = 8
DEFAULT_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_TRUE_VALUES = ("true", "1", "yes")


def _normalize_prefix(prefix: str) -> str:
    return prefix.upper().replace("-", "_").rstrip("_")


def _parse_number(env: Mapping[str, str], key: str, default: str, cast=int):
    raw = env.get(key, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid value for {key}: {raw!r}",
            details={"key": key, "value": raw},
        ) from e


class WebDavConfig(BaseModel):
    """Connection settings for a WebDAV server

    Attributes:
        url: Server base URL (e.g., "https://dav.example.com/remote.php/dav/files/me")
        username: Basic auth user, None for anonymous access
        password: Basic auth password
        remote_path: Directory that holds the backups, always absolute
        proxy: Optional proxy URL used for both http and https
        timeout: Request timeout in seconds, None for no timeout
        verify_ssl: Whether to verify TLS certificates
    """

    url: str = Field(description="WebDAV server base URL")
    username: Optional[str] = Field(default=None, description="Basic auth user")
    password: Optional[str] = Field(default=None, description="Basic auth password")
    remote_path: str = Field(default="/backups", description="Remote backup directory")
    proxy: Optional[str] = Field(default=None, description="Proxy URL")
    timeout: Optional[float] = Field(default=None, gt=0, description="Request timeout (s)")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("remote_path")
    @classmethod
    def validate_remote_path(cls, v: str) -> str:
        v = "/" + v.strip().strip("/")
        return v

    @classmethod
    def from_env(
        cls,
        prefix: str = "DAVBACKUP",
        env: Optional[Mapping[str, str]] = None,
    ) -> "WebDavConfig":
        """Create WebDavConfig from environment variables

        Environment variables:
            {PREFIX}_WEBDAV_URL: Server URL (required)
            {PREFIX}_WEBDAV_USER: Username
            {PREFIX}_WEBDAV_PASS: Password
            {PREFIX}_WEBDAV_PATH: Remote directory (default: /backups)
            {PREFIX}_WEBDAV_PROXY: Proxy URL
            {PREFIX}_WEBDAV_TIMEOUT: Timeout in seconds (default: none)
            {PREFIX}_WEBDAV_VERIFY_SSL: TLS verification (default: "true")

        Args:
            prefix: Environment variable prefix
            env: Mapping to read from (default: EnvLoader().load())

        Raises:
            ConfigurationError: If the URL is missing or a value is invalid
        """
        if env is None:
            env = EnvLoader().load()

        prefix = _normalize_prefix(prefix)

        url = env.get(f"{prefix}_WEBDAV_URL")
        if not url:
            raise ConfigurationError(
                f"Missing required environment variable: {prefix}_WEBDAV_URL"
            )

        timeout_raw = env.get(f"{prefix}_WEBDAV_TIMEOUT")
        timeout = (
            _parse_number(env, f"{prefix}_WEBDAV_TIMEOUT", timeout_raw, float)
            if timeout_raw
            else None
        )

        try:
            return cls(
                url=url,
                username=env.get(f"{prefix}_WEBDAV_USER") or None,
                password=env.get(f"{prefix}_WEBDAV_PASS") or None,
                remote_path=env.get(f"{prefix}_WEBDAV_PATH", "/backups"),
                proxy=env.get(f"{prefix}_WEBDAV_PROXY") or None,
                timeout=timeout,
                verify_ssl=env.get(f"{prefix}_WEBDAV_VERIFY_SSL", "true").lower() in _TRUE_VALUES,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid WebDAV configuration: {e}") from e


class RotationPolicy(BaseModel):
    """How many archived variants survive and how archive suffixes are stamped"""

    max_versions: int = Field(
        default=DEFAULT_MAX_VERSIONS,
        ge=1,
        description="Variants kept per base filename after pruning",
    )
    utc_offset_hours: int = Field(
        default=DEFAULT_UTC_OFFSET_HOURS,
        ge=-14,
        le=14,
        description="Fixed offset applied to UTC when stamping archive names",
    )
    timestamp_format: str = Field(
        default=DEFAULT_TIMESTAMP_FORMAT,
        description="strftime format of the archive suffix",
    )

    @field_validator("timestamp_format")
    @classmethod
    def validate_timestamp_format(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError("timestamp_format must be non-empty and contain no '/'")
        return v

    @classmethod
    def from_env(
        cls,
        prefix: str = "DAVBACKUP",
        env: Optional[Mapping[str, str]] = None,
    ) -> "RotationPolicy":
        """Create RotationPolicy from environment variables

        Environment variables:
            {PREFIX}_MAX_VERSIONS: Retained variants (default: 10)
            {PREFIX}_UTC_OFFSET_HOURS: Suffix clock offset (default: 8)
        """
        if env is None:
            env = EnvLoader().load()

        prefix = _normalize_prefix(prefix)

        try:
            return cls(
                max_versions=_parse_number(
                    env, f"{prefix}_MAX_VERSIONS", str(DEFAULT_MAX_VERSIONS)
                ),
                utc_offset_hours=_parse_number(
                    env, f"{prefix}_UTC_OFFSET_HOURS", str(DEFAULT_UTC_OFFSET_HOURS)
                ),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid rotation policy: {e}") from e
