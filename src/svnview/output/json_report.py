"""JSON renderer for scripted consumers."""

from __future__ import annotations

import json
from typing import Any


def render(data: Any) -> str:
    """Return *data* (already serialised to plain types) as indented JSON."""
    return json.dumps(data, indent=2, ensure_ascii=False)
