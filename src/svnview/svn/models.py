"""Data models for repository records, diffs, and gateway results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, Optional, Tuple, TypeVar, Union

T = TypeVar("T")

UNAVAILABLE = "[currently not available]"


class LineType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


class ErrorKind(str, Enum):
    NOT_LOADED = "not_loaded"
    TOOL_EXECUTION_FAILED = "tool_execution_failed"
    MALFORMED_OUTPUT = "malformed_output"
    NOT_FOUND = "not_found"
    UNSUPPORTED = "unsupported"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a gateway operation: a value or a classified error."""

    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "") -> "Result[T]":
        return cls(error=error, detail=detail)


# --- Diff records ---


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single tagged line inside a hunk."""

    line_type: LineType
    content: str


@dataclass(frozen=True)
class Hunk:
    """One contiguous changed region of a file."""

    header: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: Tuple[DiffLine, ...] = ()

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class FileDiff:
    """Hunks and line statistics for one file in a diff."""

    path: str
    hunks: Tuple[Hunk, ...] = ()
    more: int = 0  # added lines
    less: int = 0  # removed lines
    binary: bool = False


Diff = Dict[str, FileDiff]


# --- Tree records ---


@dataclass(frozen=True)
class TreeEntry:
    """One node of a directory listing."""

    kind: str  # 'file' | 'dir' | 'invalid'
    name: str
    path: str
    size: Optional[int] = None  # files only
    updated: Optional[str] = None  # UTC, YYYY-MM-DD HH:MM:SS
    message: str = UNAVAILABLE
    revision: Optional[str] = None
    author: Optional[str] = None


@dataclass(frozen=True)
class InfoEntry:
    """The parts of `svn info --xml` the gateway needs."""

    kind: str
    path: str = ""
    url: str = ""
    revision: Optional[str] = None


@dataclass(frozen=True)
class TreeFile:
    path: str
    content: bytes = b""

    @property
    def type(self) -> str:
        return "file"


@dataclass(frozen=True)
class TreeDir:
    path: str
    entries: Tuple[TreeEntry, ...] = ()

    @property
    def type(self) -> str:
        return "dir"


@dataclass(frozen=True)
class TreeInvalid:
    path: str = ""

    @property
    def type(self) -> str:
        return "invalid"


@dataclass(frozen=True)
class TreeOther:
    """A resolved node whose kind is neither file nor dir."""

    path: str
    kind: str

    @property
    def type(self) -> str:
        return self.kind


TreeResult = Union[TreeFile, TreeDir, TreeInvalid, TreeOther]


# --- History records ---


@dataclass(frozen=True)
class ChangedPath:
    """A path touched by a revision, as reported by `svn log -v`."""

    action: str  # A | M | D | R
    path: str
    kind: str = ""
    copyfrom_path: Optional[str] = None
    copyfrom_revision: Optional[str] = None


@dataclass(frozen=True)
class LogEntry:
    """A raw `logentry` record."""

    revision: str
    author: str = ""
    date: str = ""
    message: str = ""
    paths: Tuple[ChangedPath, ...] = ()


@dataclass(frozen=True)
class CommitMetadata:
    hash: str
    author_name: str
    date: Optional[str]
    subject: str
    body: str
    parent: str
    author_email: str = UNAVAILABLE
    paths: Tuple[ChangedPath, ...] = ()


@dataclass(frozen=True)
class Commit:
    metadata: CommitMetadata
    diff: Diff = field(default_factory=dict)
