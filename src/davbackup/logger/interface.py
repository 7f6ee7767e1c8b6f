"""
Logger interface for davbackup.

Every component accepts an optional Logger and reports context as keyword
arguments, e.g. ``logger.error("Delete failed", path=path, error=str(e))``.
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract base class for the logging interface."""

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: The message to log
            **kwargs: Additional key-value pairs to include in the log
        """

    @abstractmethod
    def get_session_id(self) -> str:
        """Get the identifier shared by every entry this logger writes."""
