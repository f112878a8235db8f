"""Added/removed line statistics for parsed diffs."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, Tuple

from svnview.svn.models import Diff, FileDiff, Hunk, LineType


def count_changes(hunks: Iterable[Hunk]) -> Tuple[int, int]:
    """Return ``(more, less)``: added and removed line counts across *hunks*."""
    more = less = 0
    for hunk in hunks:
        for line in hunk.lines:
            if line.line_type is LineType.ADDED:
                more += 1
            elif line.line_type is LineType.REMOVED:
                less += 1
    return more, less


def annotate(files: Dict[str, FileDiff]) -> Diff:
    """Return a copy of *files* with ``more``/``less`` filled in, order kept."""
    diff: Diff = {}
    for path, file_diff in files.items():
        more, less = count_changes(file_diff.hunks)
        diff[path] = replace(file_diff, more=more, less=less)
    return diff
