"""Subversion interface layer: command runner, parsers, gateway, models."""

from svnview.svn.diff_parser import DiffParser
from svnview.svn.gateway import RepositoryGateway, sanitize_revision
from svnview.svn.models import (
    Commit,
    CommitMetadata,
    DiffLine,
    ErrorKind,
    FileDiff,
    Hunk,
    LineType,
    Result,
    TreeDir,
    TreeEntry,
    TreeFile,
    TreeInvalid,
    TreeOther,
)
from svnview.svn.runner import (
    CommandResult,
    CommandRunner,
    SvnError,
    SvnNotInstalledError,
    SvnTimeoutError,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "Commit",
    "CommitMetadata",
    "DiffLine",
    "DiffParser",
    "ErrorKind",
    "FileDiff",
    "Hunk",
    "LineType",
    "RepositoryGateway",
    "Result",
    "SvnError",
    "SvnNotInstalledError",
    "SvnTimeoutError",
    "TreeDir",
    "TreeEntry",
    "TreeFile",
    "TreeInvalid",
    "TreeOther",
    "sanitize_revision",
]
