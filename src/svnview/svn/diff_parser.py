"""Unified diff parser: groups svn (and git-style) diffs into per-file hunks.

Hunks are delimited by their header counts, so a removed line that happens
to read ``--- something`` is still treated as content. Handles BOM, CRLF,
``\\ No newline at end of file`` markers, binary placeholders, and the
``Property changes on:`` blocks svn appends after a file's hunks.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from svnview.svn.models import DiffLine, FileDiff, Hunk, LineType

# --- Regex patterns for diff parsing ---

_INDEX_RE = re.compile(r"^Index: (.+)$")
_GIT_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_SEPARATOR_RE = re.compile(r"^={20,}$")
_HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@"
)
_OLD_FILE_RE = re.compile(r"^--- (.+)$")
_NEW_FILE_RE = re.compile(r"^\+\+\+ (.+)$")
_PROPERTY_RE = re.compile(r"^Property changes on: (.+)$")
_BINARY_RE = re.compile(
    r"^(?:Cannot display: file marked as a binary type\.|Binary files .* differ)$"
)
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")

_PREFIX_TYPES = {
    "+": LineType.ADDED,
    "-": LineType.REMOVED,
    " ": LineType.CONTEXT,
}


def _strip_bom(line: str) -> str:
    """Remove UTF-8 BOM if present."""
    return line.lstrip("\ufeff")


def _header_path(raw: str) -> Optional[str]:
    """Extract the path from a ``---``/``+++`` header value.

    Drops the tab-separated ``(revision N)`` / ``(working copy)`` suffix and
    git's ``a/``/``b/`` prefixes. Returns None for ``/dev/null``.
    """
    path = raw.split("\t", 1)[0].strip()
    if path == "/dev/null":
        return None
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path or None


class _OpenHunk:
    """A hunk being filled; closes once its header counts are used up."""

    def __init__(self, header: str, old_start: int, old_count: int,
                 new_start: int, new_count: int) -> None:
        self.header = header
        self.old_start = old_start
        self.old_count = old_count
        self.new_start = new_start
        self.new_count = new_count
        self.old_remaining = old_count
        self.new_remaining = new_count
        self.lines: List[DiffLine] = []

    @property
    def exhausted(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def add(self, line_type: LineType, content: str) -> None:
        if line_type is not LineType.ADDED:
            self.old_remaining -= 1
        if line_type is not LineType.REMOVED:
            self.new_remaining -= 1
        self.lines.append(DiffLine(line_type=line_type, content=content))

    def close(self) -> Hunk:
        return Hunk(
            header=self.header,
            old_start=self.old_start,
            old_count=self.old_count,
            new_start=self.new_start,
            new_count=self.new_count,
            lines=tuple(self.lines),
        )


class DiffParser:
    """Parse unified diff text into an ordered ``path -> FileDiff`` mapping.

    Usage::

        files = DiffParser(diff_text).parse()
        for path, file_diff in files.items():
            for hunk in file_diff.hunks:
                ...

    Line counts on the returned records are left at zero; see
    :mod:`svnview.svn.stats`.
    """

    def __init__(self, diff_text: str) -> None:
        # Only "\n" separates lines; form feeds etc. may appear in content
        lines = diff_text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self._lines = [line.rstrip("\r") for line in lines]

    def parse(self) -> Dict[str, FileDiff]:
        hunks: Dict[str, List[Hunk]] = {}
        binaries: set[str] = set()
        current_file: Optional[str] = None
        old_file: Optional[str] = None
        from_index = False  # current_file came from an Index:/diff --git header
        in_properties = False
        hunk: Optional[_OpenHunk] = None

        def flush() -> None:
            nonlocal hunk
            if hunk is not None and current_file is not None:
                hunks[current_file].append(hunk.close())
            hunk = None

        for raw_line in self._lines:
            # --- Content lines of an open hunk ---
            if hunk is not None:
                if _NO_NEWLINE_RE.match(raw_line):
                    continue
                if not hunk.exhausted:
                    if raw_line == "":
                        hunk.add(LineType.CONTEXT, "")
                        continue
                    line_type = _PREFIX_TYPES.get(raw_line[0])
                    if line_type is not None:
                        hunk.add(line_type, _strip_bom(raw_line[1:]))
                        continue
                flush()

            # --- Per-file headers ---
            m = _INDEX_RE.match(raw_line) or _GIT_HEADER_RE.match(raw_line)
            if m:
                current_file = m.group(m.lastindex or 1).strip()
                hunks.setdefault(current_file, [])
                from_index = True
                in_properties = False
                old_file = None
                continue

            if in_properties:
                continue

            if _PROPERTY_RE.match(raw_line):
                in_properties = True
                continue

            if _SEPARATOR_RE.match(raw_line):
                continue

            if _BINARY_RE.match(raw_line):
                if current_file is not None:
                    binaries.add(current_file)
                continue

            om = _OLD_FILE_RE.match(raw_line)
            if om:
                old_file = _header_path(om.group(1))
                continue

            nm = _NEW_FILE_RE.match(raw_line)
            if nm:
                if not from_index:
                    current_file = _header_path(nm.group(1)) or old_file
                    if current_file is not None:
                        hunks.setdefault(current_file, [])
                from_index = False
                continue

            hm = _HUNK_HEADER_RE.match(raw_line)
            if hm and current_file is not None:
                hunk = _OpenHunk(
                    header=raw_line,
                    old_start=int(hm.group(1)),
                    old_count=int(hm.group(2)) if hm.group(2) is not None else 1,
                    new_start=int(hm.group(3)),
                    new_count=int(hm.group(4)) if hm.group(4) is not None else 1,
                )
                continue

            # Anything else (index lines, mode lines, stray text) is ignored

        flush()

        return {
            path: FileDiff(path=path, hunks=tuple(file_hunks), binary=path in binaries)
            for path, file_hunks in hunks.items()
        }
