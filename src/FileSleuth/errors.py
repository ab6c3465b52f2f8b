"""Exception hierarchy shared across signature detection and archive handling.

Listing and extraction walk through several layers: the claimed filename, the
in-process libarchive reader, and finally external archiver programs.  This
module groups the failure modes into a tidy hierarchy so caller code can react
to high-level categories (for example, "the library could not read it" vs.
"the system tool ran but failed") while still having access to specialised
subclasses carrying the diagnostic context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

__all__ = [
    "FileSleuthError",
    "ConfigError",
    "ArchiveError",
    "UnsupportedFormatError",
    "NotAnArchiveError",
    "DestinationInvalidError",
    "SourceMissingError",
    "SourceIsDirectoryError",
    "SourceTooLargeError",
    "ExtensionMismatchError",
    "LibraryPanicError",
    "UnsafeMemberError",
    "MemberNotFoundError",
    "ToolError",
    "ToolNotFoundError",
    "ToolSilentFailureError",
    "ToolReportedFailureError",
    "ToolTimeoutError",
]

PathLike = Union[str, Path]


class FileSleuthError(RuntimeError):
    """Base exception for identification, listing, or extraction failures."""


class ConfigError(FileSleuthError):
    """Raised when settings or environment overrides are invalid."""


class ArchiveError(FileSleuthError):
    """Failure while reading an archive, annotated with the source and format."""

    def __init__(
        self,
        message: str,
        *,
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source = Path(source) if source is not None else None
        self.fmt = fmt

    def __str__(self) -> str:
        context = []
        if self.fmt:
            context.append(f"format={self.fmt}")
        if self.source is not None:
            context.append(f"source={self.source}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class UnsupportedFormatError(ArchiveError):
    """Raised when a filename extension maps to no known archive handler."""


class NotAnArchiveError(ArchiveError):
    """Raised when the content cannot be walked as a container at all."""


class DestinationInvalidError(ArchiveError):
    """Raised when the extraction target is missing or is not a directory."""


class SourceMissingError(ArchiveError):
    """Raised when the archive source path does not exist."""


class SourceIsDirectoryError(SourceMissingError):
    """Raised when the archive source path points at a directory."""


class SourceTooLargeError(ArchiveError):
    """Raised when a source exceeds the configured extraction size cap."""

    def __init__(
        self,
        message: str,
        *,
        size: int,
        limit: int,
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, fmt=fmt)
        self.size = size
        self.limit = limit


class ExtensionMismatchError(ArchiveError):
    """Raised when the content contradicts the claimed filename extension.

    Callers recover from this locally by retrying once under
    :attr:`corrected_ext`.
    """

    def __init__(
        self,
        message: str,
        *,
        corrected_ext: str,
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, fmt=fmt)
        self.corrected_ext = corrected_ext


class LibraryPanicError(ArchiveError):
    """Unexpected exception raised from inside the in-process archive library."""


class UnsafeMemberError(ArchiveError):
    """Raised when a member path is absolute or escapes the destination."""

    def __init__(
        self,
        message: str,
        *,
        member: str,
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, fmt=fmt)
        self.member = member


class MemberNotFoundError(ArchiveError):
    """Raised when none of the requested extraction targets exist in the archive."""


class ToolError(ArchiveError):
    """Base class for failures of an external archiver program."""

    def __init__(
        self,
        message: str,
        *,
        program: str,
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, fmt=fmt)
        self.program = program


class ToolNotFoundError(ToolError):
    """Raised when the external program is absent from the execution path."""


class ToolSilentFailureError(ToolError):
    """Raised when a program exits cleanly but writes nothing at all."""


class ToolReportedFailureError(ToolError):
    """Raised on a non-zero exit or diagnostics written to stderr."""

    def __init__(
        self,
        message: str,
        *,
        program: str,
        exit_code: Optional[int] = None,
        diagnostic: str = "",
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message, program=program, source=source, fmt=fmt)
        self.exit_code = exit_code
        self.diagnostic = diagnostic


class ToolTimeoutError(ToolError):
    """Raised when a program exceeds its deadline and is killed."""

    def __init__(
        self,
        message: str,
        *,
        program: str,
        timeout: float,
        source: Optional[PathLike] = None,
        fmt: Optional[str] = None,
    ) -> None:
        super().__init__(message, program=program, source=source, fmt=fmt)
        self.timeout = timeout
