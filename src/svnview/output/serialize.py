"""Convert repository records to plain dicts/lists for JSON and YAML output.

The key names here are the stable schema the presentation layer reads.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List

from svnview.svn.models import (
    ChangedPath,
    Commit,
    CommitMetadata,
    Diff,
    FileDiff,
    Hunk,
    TreeDir,
    TreeEntry,
    TreeFile,
    TreeResult,
)


def entry_to_dict(entry: TreeEntry) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "type": entry.kind,
        "name": entry.name,
        "path": entry.path,
    }
    if entry.kind == "file":
        data["size"] = entry.size
    data["updated"] = entry.updated
    data["message"] = entry.message
    return data


def blob_to_dict(content: bytes) -> Dict[str, Any]:
    """File contents as text when they are UTF-8, else base64 with an ``encoding`` key."""
    try:
        return {"content": content.decode("utf-8")}
    except UnicodeDecodeError:
        return {"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"}


def tree_to_dict(tree: TreeResult) -> Dict[str, Any]:
    if isinstance(tree, TreeFile):
        return {"type": tree.type, "path": tree.path, **blob_to_dict(tree.content)}
    content: Any = []
    if isinstance(tree, TreeDir):
        content = [entry_to_dict(e) for e in tree.entries]
    return {"type": tree.type, "path": tree.path, "content": content}


def hunk_to_list(hunk: Hunk) -> List[Dict[str, str]]:
    return [{"type": line.line_type.value, "content": line.content} for line in hunk.lines]


def file_diff_to_dict(file_diff: FileDiff) -> Dict[str, Any]:
    return {
        "hunks": [hunk_to_list(h) for h in file_diff.hunks],
        "more": file_diff.more,
        "less": file_diff.less,
        **({"binary": True} if file_diff.binary else {}),
    }


def diff_to_dict(diff: Diff) -> Dict[str, Any]:
    return {path: file_diff_to_dict(fd) for path, fd in diff.items()}


def _changed_path_to_dict(changed: ChangedPath) -> Dict[str, Any]:
    return {
        "action": changed.action,
        "path": changed.path,
        "kind": changed.kind,
        **({"copyfrom_path": changed.copyfrom_path} if changed.copyfrom_path else {}),
        **({"copyfrom_revision": changed.copyfrom_revision} if changed.copyfrom_revision else {}),
    }


def metadata_to_dict(meta: CommitMetadata) -> Dict[str, Any]:
    return {
        "hash": meta.hash,
        "author": {"name": meta.author_name, "email": meta.author_email},
        "date": meta.date,
        "subject": meta.subject,
        "body": meta.body,
        "parent": meta.parent,
        "paths": [_changed_path_to_dict(p) for p in meta.paths],
    }


def commit_to_dict(commit: Commit, *, include_diff: bool = True) -> Dict[str, Any]:
    data = metadata_to_dict(commit.metadata)
    if include_diff:
        data["diff"] = diff_to_dict(commit.diff)
    return data
