"""Error types raised by the update engine.

Each error carries the exit code the CLI should use when it reaches the
command boundary.
"""
from __future__ import annotations

from typing import ClassVar, Optional

from constants import ExitCodes


class UpdateError(Exception):
    """Base exception for update resolution failures."""

    code: ClassVar[ExitCodes] = ExitCodes.FILE_ERROR

    def __init__(self, message: str, *, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class MalformedVersion(UpdateError, ValueError):
    """A version string does not match ``major.minor.patch[qualifier]``."""

    code = ExitCodes.VERSION_ERROR

    def __init__(self, text: object, message: Optional[str] = None):
        super().__init__(message or f"Malformed version: {text!r}")
        self.text = text


class RepositoryUnreachable(UpdateError):
    """The artifact repository could not be reached or answered non-200."""

    code = ExitCodes.CONNECTION_ERROR

    def __init__(self, url: str, *, status_code: Optional[int] = None, details: Optional[str] = None):
        message = f"Repository unreachable: {url}"
        if status_code is not None:
            message = f"{message} returned HTTP {status_code}"
        super().__init__(message, details=details)
        self.url = url
        self.status_code = status_code


class MetadataParseError(UpdateError):
    """A version index document could not be parsed."""

    code = ExitCodes.METADATA_ERROR

    def __init__(self, url: str, details: Optional[str] = None):
        super().__init__(f"Could not parse repository metadata: {url}", details=details)
        self.url = url


class InstallFailure(UpdateError):
    """The platform installer failed to start or exited non-zero."""

    code = ExitCodes.INSTALL_ERROR

    def __init__(self, message: str, *, exit_code: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.exit_code = exit_code
