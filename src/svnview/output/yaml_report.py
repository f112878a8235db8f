"""YAML renderer, for humans who want structured output."""

from __future__ import annotations

from typing import Any

import yaml


def render(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
