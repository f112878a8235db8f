"""Parsers for the XML dialects of `svn info`, `svn ls` and `svn log`.

None of the parse functions raise. Each returns a :class:`ParseResult`
whose status separates XML that could not be parsed at all from
well-formed XML that lacks the expected elements (svn prints the latter
when a path or revision does not exist).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, List, Optional, Tuple, TypeVar, Union

from loguru import logger

from svnview.svn.models import ChangedPath, InfoEntry, LogEntry, TreeEntry

T = TypeVar("T")

_CANONICAL_DATE = "%Y-%m-%d %H:%M:%S"

# Raw svn stdout; the XML declaration carries the encoding
XmlSource = Union[str, bytes]


class ParseStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    value: Optional[T]
    status: ParseStatus = ParseStatus.OK

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.OK


def _load(xml: XmlSource) -> Optional[ET.Element]:
    if not xml or not xml.strip():
        return None
    try:
        return ET.fromstring(xml)
    except ET.ParseError as exc:
        logger.debug(f"malformed svn xml: {exc}")
        return None


def _text(node: Optional[ET.Element]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text


def to_utc(stamp: str) -> Optional[str]:
    """Convert an ISO-8601 timestamp to ``YYYY-MM-DD HH:MM:SS`` in UTC."""
    stamp = stamp.strip()
    if not stamp:
        return None
    if stamp.endswith("Z"):
        stamp = stamp[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(stamp)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime(_CANONICAL_DATE)


def parse_info(xml: XmlSource) -> ParseResult[InfoEntry]:
    root = _load(xml)
    if root is None:
        return ParseResult(None, ParseStatus.MALFORMED)
    entry = root.find("entry")
    if entry is None:
        return ParseResult(None, ParseStatus.MISSING)
    return ParseResult(
        InfoEntry(
            kind=entry.get("kind", "invalid"),
            path=entry.get("path", ""),
            url=_text(entry.find("url")),
            revision=entry.get("revision"),
        )
    )


def parse_listing(xml: XmlSource, parent_path: str = "") -> ParseResult[Tuple[TreeEntry, ...]]:
    """Parse `svn ls --xml` output into TreeEntry records, in listing order.

    Each entry's full path is *parent_path* joined to its name with ``/``.
    """
    root = _load(xml)
    if root is None:
        return ParseResult(None, ParseStatus.MALFORMED)
    listing = root if root.tag == "list" else root.find("list")
    if listing is None:
        return ParseResult(None, ParseStatus.MISSING)

    entries: List[TreeEntry] = []
    for node in listing.findall("entry"):
        kind = node.get("kind", "invalid")
        name = _text(node.find("name"))
        size: Optional[int] = None
        if kind == "file":
            raw_size = _text(node.find("size")).strip()
            size = int(raw_size) if raw_size.isdigit() else None
        updated = revision = author = None
        commit = node.find("commit")
        if commit is not None:
            updated = to_utc(_text(commit.find("date")))
            revision = commit.get("revision")
            author = _text(commit.find("author")) or None
        entries.append(
            TreeEntry(
                kind=kind,
                name=name,
                path=f"{parent_path.rstrip('/')}/{name}",
                size=size,
                updated=updated,
                revision=revision,
                author=author,
            )
        )
    return ParseResult(tuple(entries))


def _changed_paths(node: ET.Element) -> Tuple[ChangedPath, ...]:
    paths = node.find("paths")
    if paths is None:
        return ()
    return tuple(
        ChangedPath(
            action=p.get("action", ""),
            path=_text(p),
            kind=p.get("kind", ""),
            copyfrom_path=p.get("copyfrom-path"),
            copyfrom_revision=p.get("copyfrom-rev"),
        )
        for p in paths.findall("path")
    )


def parse_log_entries(xml: XmlSource) -> ParseResult[Tuple[LogEntry, ...]]:
    root = _load(xml)
    if root is None:
        return ParseResult(None, ParseStatus.MALFORMED)
    if root.tag != "log":
        return ParseResult(None, ParseStatus.MISSING)
    return ParseResult(
        tuple(
            LogEntry(
                revision=node.get("revision", ""),
                author=_text(node.find("author")),
                date=_text(node.find("date")),
                message=_text(node.find("msg")),
                paths=_changed_paths(node),
            )
            for node in root.findall("logentry")
        )
    )
