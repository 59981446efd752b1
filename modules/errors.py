"""Exception hierarchy for slot allocation, ingestion and publishing."""

from __future__ import annotations

from typing import Optional


class StorageError(Exception):
    """Base class for every failure the command line reports."""


class UsageError(StorageError):
    """Raised when the tool is invoked without the required arguments."""


class FilesystemError(StorageError):
    """Raised when slot directories cannot be listed or created."""


class FetchError(StorageError):
    """Raised when the remote image cannot be retrieved."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RedirectLoopError(FetchError):
    """Raised when a redirect chain exceeds the configured hop limit."""


class DecodeError(StorageError):
    """Raised when downloaded bytes cannot be decoded as an image."""


class WriteError(StorageError):
    """Raised when a local file cannot be written, renamed or removed."""


class PublishError(StorageError):
    """Raised when a version-control step fails."""

    def __init__(self, message: str, step: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.step = step
        self.returncode = returncode
