"""Repository gateway: the read operations exposed over a Subversion repo.

A gateway is bound to one repository location for its whole life. An
unbound gateway answers every operation with ``ErrorKind.NOT_LOADED`` and
never starts a subprocess. Tool failures, timeouts and unparseable output
come back as :class:`Result` errors; nothing below this layer is allowed
to escape as an exception.
"""

from __future__ import annotations

import functools
import re
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar, Union

from loguru import logger

from svnview.svn import xml_parser
from svnview.svn.diff_parser import DiffParser
from svnview.svn.models import (
    Commit,
    CommitMetadata,
    Diff,
    ErrorKind,
    LogEntry,
    Result,
    TreeDir,
    TreeFile,
    TreeInvalid,
    TreeOther,
    TreeResult,
)
from svnview.svn.runner import (
    CommandResult,
    CommandRunner,
    SvnError,
    SvnTimeoutError,
    target,
)
from svnview.svn.stats import annotate

F = TypeVar("F", bound=Callable[..., Result])

Revision = Union[str, int]

_NUMERIC_REVISION_RE = re.compile(r"^\d+$")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def sanitize_revision(revision: Optional[Revision]) -> str:
    """Return *revision* if it is ``HEAD`` or a non-negative integer, else ``HEAD``."""
    value = "HEAD" if revision is None else str(revision).strip()
    if value == "HEAD" or _NUMERIC_REVISION_RE.match(value):
        return value
    logger.warning(f"unexpected revision {value!r}, using HEAD")
    return "HEAD"


def parent_of(revision: Revision) -> str:
    """Previous repository revision, floored at 0. ``HEAD`` has no numeric parent."""
    value = str(revision)
    if not _NUMERIC_REVISION_RE.match(value):
        return value
    return str(max(int(value) - 1, 0))


def _revision_text(revision: Optional[Revision]) -> str:
    if revision is None or revision == "":
        return "HEAD"
    return str(revision)


def normalize_path(path: Optional[str]) -> str:
    """Repository-relative path with a leading ``/`` and no trailing ``/``.

    svn lists the parent directory for a target ending in ``/``, so exactly
    one trailing separator is removed.
    """
    path = path or ""
    if path.endswith("/"):
        path = path[:-1]
    if path and not path.startswith("/"):
        path = "/" + path
    return path


def _requires_repository(method: F) -> F:
    """Short-circuit on an unbound gateway and translate svn faults."""

    @functools.wraps(method)
    def wrapper(self: "RepositoryGateway", *args, **kwargs) -> Result:
        if not self.loaded:
            return Result.failure(ErrorKind.NOT_LOADED, "no repository loaded")
        try:
            return method(self, *args, **kwargs)
        except SvnTimeoutError as exc:
            logger.warning(str(exc))
            return Result.failure(ErrorKind.TIMEOUT, str(exc))
        except SvnError as exc:
            logger.warning(str(exc))
            return Result.failure(ErrorKind.TOOL_EXECUTION_FAILED, str(exc))

    return wrapper  # type: ignore[return-value]


class RepositoryGateway:
    """Read-only view of a Subversion repository driven through the svn CLI.

    Usage::

        opened = RepositoryGateway.open("/srv/svn/project")
        if opened.ok:
            repo = opened.value
            listing = repo.tree(path="/trunk")
    """

    def __init__(
        self,
        location: Optional[str] = None,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self._location = location.rstrip("/") if location else None
        self._runner = runner or CommandRunner()

    @classmethod
    def open(
        cls,
        path: str,
        runner: Optional[CommandRunner] = None,
    ) -> Result["RepositoryGateway"]:
        """Bind a gateway to a repository directory or ``file://`` URI."""
        if path.startswith("file://"):
            return Result.success(cls(path, runner))
        repo_dir = Path(path).expanduser().resolve()
        if not repo_dir.is_dir():
            return Result.failure(ErrorKind.NOT_FOUND, f"Repository not found: {repo_dir}")
        return Result.success(cls(repo_dir.as_uri(), runner))

    @property
    def location(self) -> Optional[str]:
        return self._location

    @property
    def loaded(self) -> bool:
        return bool(self._location)

    def _run(self, args: Sequence[str]) -> CommandResult:
        return self._runner.execute(list(args))

    def _target(self, path: str = "", revision: str = "HEAD") -> str:
        return target(self._location or "", path, revision)

    def _head_revision(self) -> Result[str]:
        """The number ``HEAD`` currently points at, from ``info --xml``."""
        out = self._run(["info", "--xml", self._target()])
        if not out.ok:
            return Result.failure(ErrorKind.TOOL_EXECUTION_FAILED, out.stderr.strip())
        parsed = xml_parser.parse_info(out.stdout)
        if not parsed.ok or parsed.value is None or not parsed.value.revision:
            return Result.failure(ErrorKind.MALFORMED_OUTPUT, "could not read HEAD revision")
        return Result.success(parsed.value.revision)

    # ── raw access ───────────────────────────────────────────────────────────

    @_requires_repository
    def execute(self, args: Sequence[str]) -> Result[CommandResult]:
        """Run an arbitrary svn subcommand; the exit status is left to the caller."""
        return Result.success(self._run(args))

    # ── branches ─────────────────────────────────────────────────────────────

    @_requires_repository
    def branches(self) -> Result[List[str]]:
        """Folders under ``/branches``, in listing order, then ``trunk`` if it exists."""
        names: List[str] = []

        listing = self._run(["ls", self._target("/branches")])
        if listing.ok:
            for line in listing.text.splitlines():
                entry = line.strip()
                if entry.endswith("/"):
                    names.append(entry[:-1])
        else:
            logger.debug("no branches folder")

        trunk = self._run(["info", self._target("/trunk")])
        if trunk.ok and "trunk" not in names:
            names.append("trunk")

        return Result.success(names)

    @_requires_repository
    def has_tree(self, ref: Revision) -> Result[bool]:
        if str(ref).upper() == "HEAD":
            return Result.success(True)
        probe = self._run(["log", "--limit", "1", self._target(revision=str(ref))])
        return Result.success(probe.ok)

    # ── trees and blobs ──────────────────────────────────────────────────────

    @_requires_repository
    def tree(
        self,
        branch: str = "HEAD",
        path: str = "",
        rev: Revision = "HEAD",
    ) -> Result[TreeResult]:
        """Resolve *path* at *rev* to a file, a directory listing, or invalid.

        *branch* is accepted for interface compatibility; the path itself
        selects the branch folder in a Subversion layout.
        """
        path = normalize_path(path)
        revision = _revision_text(rev)

        info = self._run(["info", "--xml", self._target(path, revision)])
        if not info.ok:
            return Result.success(TreeInvalid(path))
        parsed = xml_parser.parse_info(info.stdout)
        if not parsed.ok or parsed.value is None:
            logger.debug(f"info for {path or '/'}@{revision}: {parsed.status.value}")
            return Result.success(TreeInvalid(path))

        kind = parsed.value.kind
        if kind == "file":
            blob = self.show(path, revision)
            if not blob.ok:
                return Result.failure(blob.error or ErrorKind.NOT_FOUND, blob.detail)
            return Result.success(TreeFile(path, blob.value or b""))

        if kind == "dir":
            listing = self._run(["ls", "--xml", self._target(path, revision)])
            if not listing.ok:
                return Result.failure(ErrorKind.TOOL_EXECUTION_FAILED, listing.stderr.strip())
            entries = xml_parser.parse_listing(listing.stdout, path)
            if not entries.ok or entries.value is None:
                return Result.failure(
                    ErrorKind.MALFORMED_OUTPUT,
                    f"could not parse listing of {path or '/'}@{revision}",
                )
            return Result.success(TreeDir(path, entries.value))

        return Result.success(TreeOther(path, kind))

    @_requires_repository
    def show(self, path: str = "", rev: Revision = "HEAD") -> Result[bytes]:
        """Return the raw bytes of the file at *path* as of *rev*."""
        out = self._run(["cat", self._target(normalize_path(path), _revision_text(rev))])
        if not out.ok:
            return Result.failure(ErrorKind.NOT_FOUND, out.stderr.strip())
        return Result.success(out.stdout)

    # ── history ──────────────────────────────────────────────────────────────

    @_requires_repository
    def log(
        self,
        branch: Revision = "HEAD",
        limit: int = 10,
        offset: int = 0,
        filepath: str = "",
    ) -> Result[List[Commit]]:
        """Return up to *limit* commits, newest first, skipping the first *offset*.

        svn has no offset of its own, so ``limit + offset`` entries are
        fetched and the head of the list dropped.
        """
        revision = sanitize_revision(branch)
        limit = max(int(limit), 0)
        offset = max(int(offset), 0)
        if limit == 0:
            return Result.success([])

        out = self._run([
            "log", "--xml", "-v", "--limit", str(limit + offset),
            self._target(normalize_path(filepath), revision),
        ])
        if not out.ok:
            return Result.failure(ErrorKind.TOOL_EXECUTION_FAILED, out.stderr.strip())
        parsed = xml_parser.parse_log_entries(out.stdout)
        if not parsed.ok or parsed.value is None:
            return Result.failure(ErrorKind.MALFORMED_OUTPUT, "could not parse svn log output")

        commits: List[Commit] = []
        for entry in parsed.value[offset:offset + limit]:
            commit = self.show_commit(entry.revision)
            if not commit.ok or commit.value is None:
                return Result.failure(commit.error or ErrorKind.NOT_FOUND, commit.detail)
            commits.append(commit.value)
        return Result.success(commits)

    @_requires_repository
    def show_commit(self, revision: Revision) -> Result[Commit]:
        """Metadata of a single revision with its diff attached."""
        revision = sanitize_revision(revision)
        out = self._run(["log", "--xml", "-v", "--limit", "1", self._target(revision=revision)])
        if not out.ok:
            return Result.failure(ErrorKind.NOT_FOUND, out.stderr.strip())
        parsed = xml_parser.parse_log_entries(out.stdout)
        if not parsed.ok or parsed.value is None:
            return Result.failure(ErrorKind.MALFORMED_OUTPUT, "could not parse svn log output")
        if not parsed.value:
            return Result.failure(ErrorKind.NOT_FOUND, f"no such revision: {revision}")

        metadata = _commit_metadata(parsed.value[0])
        diff = self.diff(metadata.hash)
        if not diff.ok or diff.value is None:
            return Result.failure(diff.error or ErrorKind.TOOL_EXECUTION_FAILED, diff.detail)
        return Result.success(Commit(metadata=metadata, diff=diff.value))

    @_requires_repository
    def diff(self, revision: Revision, parent: Optional[Revision] = None) -> Result[Diff]:
        """Per-file hunks and line counts for the change made in *revision*.

        Without *parent* svn compares against the revision's own predecessor
        (``diff -c``); with one, the range ``parent:revision`` is diffed.
        ``-c`` takes numbers only, so ``HEAD`` is resolved first.
        """
        revision = sanitize_revision(revision)
        if parent is None:
            if revision == "HEAD":
                head = self._head_revision()
                if not head.ok or head.value is None:
                    return Result.failure(head.error or ErrorKind.TOOL_EXECUTION_FAILED, head.detail)
                revision = head.value
            args = ["diff", "-c", revision, self._location or ""]
        else:
            args = ["diff", "-r", f"{sanitize_revision(parent)}:{revision}", self._location or ""]

        out = self._run(args)
        if not out.ok:
            return Result.failure(ErrorKind.TOOL_EXECUTION_FAILED, out.stderr.strip())
        return Result.success(annotate(DiffParser(out.text).parse()))

    @_requires_repository
    def blame(self, branch: str, path: str) -> Result[None]:
        """Line-by-line authorship. Not supported yet."""
        return Result.failure(ErrorKind.UNSUPPORTED, "blame is not supported")


def _commit_metadata(entry: LogEntry) -> CommitMetadata:
    parts = _LINE_BREAK_RE.split(entry.message, maxsplit=1)
    return CommitMetadata(
        hash=entry.revision,
        author_name=entry.author,
        date=xml_parser.to_utc(entry.date),
        subject=parts[0],
        body=parts[1].strip() if len(parts) > 1 else "",
        parent=parent_of(entry.revision),
        paths=entry.paths,
    )
