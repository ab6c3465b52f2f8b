# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.ArchiveContent.tools",
#   "purpose": "Run external archiver programs and parse their listings",
#   "sections": [
#     {"id": "exit-statuses", "name": "Exit Status Tables", "anchor": "EXIT", "kind": "constants"},
#     {"id": "run-tool", "name": "run_tool", "anchor": "function-run-tool", "kind": "function"},
#     {"id": "parsers", "name": "Listing Parsers", "anchor": "PARSE", "kind": "helpers"},
#     {"id": "readers", "name": "SystemArchiveReader Implementations", "anchor": "READ", "kind": "api"},
#     {"id": "dispatch", "name": "reader_for / extractor_for", "anchor": "DISP", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""System archiver fallbacks.

Responsibilities
----------------
- Locate archiver programs on ``PATH`` and run them with captured output and
  a deadline, converting every failure mode into a :class:`ToolError`
  subclass.
- Parse the fixed-column listings printed by ``arj`` and ``lha`` and the
  one-name-per-line listings of ``unrar lb`` and ``zipinfo -1``.
- Offer one :class:`SystemArchiveReader` implementation per program.

Design Notes
------------
- Parsers are pure functions over decoded text so they can be exercised with
  captured sample output and no programs installed.
- Program output is decoded as UTF-8 when valid and as code page 437
  otherwise, matching how member names are repaired elsewhere.
- ``stdin`` is always closed so an interactive prompt fails fast instead of
  waiting for the deadline.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Protocol, Sequence

from ..errors import (
    ToolNotFoundError,
    ToolReportedFailureError,
    ToolSilentFailureError,
    ToolTimeoutError,
    UnsupportedFormatError,
)
from ..settings import FileSleuthSettings, get_settings
from .naming import repair_filename

__all__ = [
    "EXIT_STATUSES",
    "ToolResult",
    "describe_exit",
    "run_tool",
    "is_arj_item",
    "parse_arj_listing",
    "parse_lha_listing",
    "parse_lines",
    "SystemArchiveReader",
    "ArjReader",
    "LhaReader",
    "RarReader",
    "ZipReader",
    "reader_for",
    "extractor_for",
]

LOGGER = logging.getLogger("FileSleuth.ArchiveContent.tools")

# --- Exit status tables (EXIT) ---

_ARJ_EXITS = {
    0: "success",
    1: "warning",
    2: "fatal error",
    3: "crc error (header, file or bad password)",
    4: "arj-security error",
    5: "disk full or write error",
    6: "cannot open archive or file",
    7: "user error, bad command line parameters",
    8: "not enough memory",
    9: "not an arj archive",
    10: "MS-DOS XMS memory error",
    11: "user control break",
    12: "too many chapters (over 250)",
}

_UNRAR_EXITS = {
    0: "success",
    1: "success with warning",
    2: "fatal error",
    3: "invalid checksum, data damage",
    4: "attempt to modify a locked archive",
    5: "write error",
    6: "file open error",
    7: "wrong command line option",
    8: "not enough memory",
    9: "file create error",
    10: "no files matching the specified mask and options were found",
    11: "incorrect password",
    255: "user stopped the process with control-C",
}

_UNZIP_EXITS = {
    0: "success",
    1: "success with warning",
    2: "generic error in the zipfile format",
    3: "severe error in zipfile format",
    4: "unable to allocate memory for buffers",
    5: "unable to allocate memory or tty to read decryption password",
    6: "unable to allocate memory during decompression to disk",
    7: "unable to allocate memory during in-memory decompression",
    8: "unused",
    9: "the specified zip file was not found",
    10: "invalid command arguments",
    11: "no matching files were found",
    12: "possible zip-bomb detected, aborting",
    50: "the disk is full during extraction",
    51: "the end of the zip archive was encountered prematurely",
    80: "user stopped the process with control-C",
    81: "unsupported compression methods or unsupported decryption",
    82: "no files were found due to bad decryption password",
}

EXIT_STATUSES: Mapping[str, Mapping[int, str]] = MappingProxyType(
    {
        "arj": MappingProxyType(_ARJ_EXITS),
        "unrar": MappingProxyType(_UNRAR_EXITS),
        "unzip": MappingProxyType(_UNZIP_EXITS),
        "zipinfo": MappingProxyType(_UNZIP_EXITS),
    }
)


def describe_exit(program: str, code: int) -> str:
    """Return the documented meaning of ``program`` exiting with ``code``."""
    table = EXIT_STATUSES.get(program, {})
    return table.get(code, f"exit status {code}")


# --- Running programs ---


@dataclass(frozen=True)
class ToolResult:
    """Decoded output of a completed program run."""

    program: str
    args: Sequence[str]
    returncode: int
    stdout: str
    stderr: str


def _decode(raw: Optional[bytes]) -> str:
    if not raw:
        return ""
    return repair_filename(raw)


def run_tool(
    tool: str,
    args: Sequence[str],
    *,
    source: Path,
    fmt: str,
    expect_output: bool = True,
    partial_ok: bool = False,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
    settings: Optional[FileSleuthSettings] = None,
) -> ToolResult:
    """Run the archiver ``tool`` with ``args`` and return its decoded output.

    Args:
        tool: Key of the program in :class:`~FileSleuth.settings.ToolPaths`,
            for example ``"unzip"``.
        args: Command-line arguments following the program name.
        source: Archive being processed, recorded on raised errors.
        fmt: Extension the archive is being treated as.
        expect_output: Treat an empty stdout and stderr as a silent failure.
        partial_ok: Accept a non-zero exit when stdout still holds output.
        cwd: Working directory for the program.
        timeout: Deadline in seconds; defaults to ``tool_timeout_sec``.
        settings: Settings override, mainly for tests.

    Raises:
        ToolNotFoundError: If the program cannot be found on ``PATH``.
        ToolTimeoutError: If the deadline expires.
        ToolReportedFailureError: On a non-zero exit or stderr-only output.
        ToolSilentFailureError: If nothing at all was written.
    """

    cfg = settings or get_settings()
    program = getattr(cfg.tools, tool)
    deadline = cfg.tool_timeout_sec if timeout is None else float(timeout)
    resolved = shutil.which(program)
    if resolved is None:
        raise ToolNotFoundError(
            f"{program} is not installed or not on PATH", program=tool, source=source, fmt=fmt
        )

    command = [resolved, *args]
    started = time.monotonic()
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            stdin=subprocess.DEVNULL,
            timeout=deadline,
            check=False,
            cwd=str(cwd) if cwd is not None else None,
        )
    except subprocess.TimeoutExpired as exc:
        raise ToolTimeoutError(
            f"{program} exceeded {deadline}s",
            program=tool,
            timeout=deadline,
            source=source,
            fmt=fmt,
        ) from exc
    except OSError as exc:
        raise ToolReportedFailureError(
            f"Failed to launch {program}: {exc}", program=tool, source=source, fmt=fmt
        ) from exc

    result = ToolResult(
        program=tool,
        args=tuple(args),
        returncode=completed.returncode,
        stdout=_decode(completed.stdout),
        stderr=_decode(completed.stderr).strip(),
    )
    LOGGER.debug(
        "tool finished",
        extra={
            "stage": "tool",
            "tool": tool,
            "returncode": result.returncode,
            "elapsed_ms": round((time.monotonic() - started) * 1000.0, 2),
            "source": str(source),
            "fmt": fmt,
        },
    )

    has_output = bool(result.stdout.strip())
    if result.returncode != 0:
        if partial_ok and has_output:
            LOGGER.warning(
                "%s exited with %s, keeping partial output",
                tool,
                result.returncode,
                extra={"stage": "tool", "source": str(source), "fmt": fmt},
            )
            return result
        meaning = describe_exit(tool, result.returncode)
        raise ToolReportedFailureError(
            f"{program} failed: {meaning}" + (f": {result.stderr}" if result.stderr else ""),
            program=tool,
            exit_code=result.returncode,
            diagnostic=result.stderr or meaning,
            source=source,
            fmt=fmt,
        )
    if result.stderr and not has_output:
        raise ToolReportedFailureError(
            f"{program} reported: {result.stderr}",
            program=tool,
            exit_code=0,
            diagnostic=result.stderr,
            source=source,
            fmt=fmt,
        )
    if expect_output and not has_output:
        raise ToolSilentFailureError(
            f"{program} produced no output", program=tool, source=source, fmt=fmt
        )
    return result


# --- Listing parsers (PARSE) ---

# Column positions of `lha -l` rows, measured from a sample row.
_LHA_SIZE_START = len("[generic]              ")
_LHA_SIZE_WIDTH = len("-------")
_LHA_NAME_START = len("[generic]                   12 100.0% Apr 10 17:03 ")

# `arj v` prefixes each member with a three digit sequence, e.g. "001) ".
_ARJ_NAME_START = len("001) ")


def _rows(text: str) -> Iterator[str]:
    for line in text.splitlines():
        yield line.rstrip("\r")


def parse_lines(text: str) -> List[str]:
    """Return the non-blank lines of a one-name-per-line listing."""
    return [line for line in _rows(text) if line.strip()]


def is_arj_item(line: str) -> bool:
    """True if ``line`` is a member row of an ``arj v`` listing."""
    if len(line) < 6 or line[3] != ")":
        return False
    return line[:3].isdigit()


def parse_arj_listing(text: str) -> List[str]:
    """Return member names from ``arj v`` output."""
    names = [line[_ARJ_NAME_START:] for line in _rows(text) if is_arj_item(line)]
    return [name for name in names if name.strip()]


def parse_lha_listing(text: str) -> List[str]:
    """Return member names from ``lha -l`` output.

    Rows too short to hold a name, rows whose size column is not a number,
    and zero-size rows (directories) are skipped.
    """
    names: List[str] = []
    for line in _rows(text):
        if len(line) < _LHA_NAME_START:
            continue
        size = line[_LHA_SIZE_START : _LHA_SIZE_START + _LHA_SIZE_WIDTH].strip()
        if not size.isdigit() or int(size) == 0:
            continue
        name = line[_LHA_NAME_START:]
        if name.strip():
            names.append(name)
    return names


# --- Readers (READ) ---


class SystemArchiveReader(Protocol):
    """Lists and extracts archives by shelling out to an archiver program."""

    extension: str
    program: str

    def list(self, path: Path) -> List[str]:
        """Return member names of the archive at ``path``."""

    def extract(self, path: Path, targets: Sequence[str], dest: Path) -> None:
        """Extract ``targets`` (all members when empty) into ``dest``."""


class _ReaderBase:
    extension = ""
    program = ""

    def __init__(self, settings: Optional[FileSleuthSettings] = None) -> None:
        self.settings = settings

    def _run(self, tool: str, args: Sequence[str], source: Path, **kwargs) -> ToolResult:
        return run_tool(
            tool, args, source=source, fmt=self.extension, settings=self.settings, **kwargs
        )


class ArjReader(_ReaderBase):
    """``arj`` reader; the program insists on a ``.arj`` filename suffix."""

    extension = ".arj"
    program = "arj"

    @contextlib.contextmanager
    def _with_suffix(self, path: Path) -> Iterator[Path]:
        if path.suffix.lower() == self.extension:
            yield path
            return
        with tempfile.TemporaryDirectory(prefix="filesleuth-arj-") as scratch:
            link = Path(scratch) / (path.name + self.extension)
            os.symlink(path.resolve(), link)
            yield link

    def list(self, path: Path) -> List[str]:
        with self._with_suffix(path) as named:
            result = self._run("arj", ["v", str(named)], path)
        return parse_arj_listing(result.stdout)

    def extract(self, path: Path, targets: Sequence[str], dest: Path) -> None:
        with self._with_suffix(path) as named:
            args = ["x", str(named), *targets, "-y", f"-ht{dest}"]
            self._run("arj", args, path)


class LhaReader(_ReaderBase):
    """``lha`` reader for LHA/LZH archives."""

    extension = ".lha"
    program = "lha"

    def list(self, path: Path) -> List[str]:
        result = self._run("lha", ["-l", str(path)], path)
        return parse_lha_listing(result.stdout)

    def extract(self, path: Path, targets: Sequence[str], dest: Path) -> None:
        # lha prints each extracted name, so an empty stdout means nothing happened
        self._run("lha", [f"-efiw={dest}", str(path), *targets], path)


class RarReader(_ReaderBase):
    """``unrar`` reader; only listing is supported."""

    extension = ".rar"
    program = "unrar"

    def list(self, path: Path) -> List[str]:
        result = self._run("unrar", ["lb", "-ep", "-c-", str(path)], path)
        return parse_lines(result.stdout)

    def extract(self, path: Path, targets: Sequence[str], dest: Path) -> None:
        raise UnsupportedFormatError(
            "RAR extraction through unrar is not supported", source=path, fmt=self.extension
        )


class ZipReader(_ReaderBase):
    """``zipinfo``/``unzip`` reader, used for ZIP methods libarchive cannot expand."""

    extension = ".zip"
    program = "zipinfo"

    def list(self, path: Path) -> List[str]:
        result = self._run("zipinfo", ["-1", str(path)], path, partial_ok=True)
        return parse_lines(result.stdout)

    def extract(self, path: Path, targets: Sequence[str], dest: Path) -> None:
        args = ["-qq", "-DD", "-o", str(path), *targets, "-d", str(dest)]
        self._run("unzip", args, path, expect_output=False)


# --- Dispatch (DISP) ---

_READERS: Dict[str, type] = {
    ".arj": ArjReader,
    ".lha": LhaReader,
    ".lzh": LhaReader,
    ".rar": RarReader,
    ".zip": ZipReader,
}

_EXTRACTORS = frozenset({".arj", ".lha", ".lzh", ".zip"})


def reader_for(
    ext: str, *, source: Optional[Path] = None, settings: Optional[FileSleuthSettings] = None
) -> SystemArchiveReader:
    """Return the listing reader for archive extension ``ext``.

    Raises:
        UnsupportedFormatError: If no system program handles ``ext``.
    """
    key = ext.lower()
    reader_cls = _READERS.get(key)
    if reader_cls is None:
        raise UnsupportedFormatError(
            "No system program lists this format", source=source, fmt=key or None
        )
    return reader_cls(settings)


def extractor_for(
    ext: str, *, source: Optional[Path] = None, settings: Optional[FileSleuthSettings] = None
) -> SystemArchiveReader:
    """Return the extracting reader for ``ext`` (ARJ, LHA or ZIP only).

    Raises:
        UnsupportedFormatError: If no system program extracts ``ext``.
    """
    key = ext.lower()
    if key not in _EXTRACTORS:
        raise UnsupportedFormatError(
            "No system program extracts this format", source=source, fmt=key or None
        )
    return _READERS[key](settings)
