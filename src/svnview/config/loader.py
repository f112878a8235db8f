"""Load and merge configuration from .svnview.toml, CLI flags, and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import-not-found]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

from loguru import logger

from svnview.config.schema import (
    OUTPUT_FORMATS,
    AdminConfig,
    LogConfig,
    OutputConfig,
    RepositoryConfig,
    SvnConfig,
    SvnViewConfig,
)

CONFIG_FILENAME = ".svnview.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(base_dir: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = base_dir / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: SvnViewConfig) -> None:
    """Apply SVNVIEW_* environment variable overrides."""
    if val := os.environ.get("SVNVIEW_REPOSITORY"):
        cfg.repository.path = val
    if val := os.environ.get("SVNVIEW_SVN_BINARY"):
        cfg.svn.binary = val
    if val := os.environ.get("SVNVIEW_TIMEOUT"):
        try:
            cfg.svn.timeout = float(val)
        except ValueError:
            logger.warning(f"ignoring SVNVIEW_TIMEOUT={val!r}: not a number")
    if val := os.environ.get("SVNVIEW_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("SVNVIEW_LOG_LIMIT"):
        try:
            cfg.log.limit = int(val)
        except ValueError:
            logger.warning(f"ignoring SVNVIEW_LOG_LIMIT={val!r}: not an integer")


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    section_data = data.get(section, {})
    if not isinstance(section_data, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in section_data.items() if k in valid_fields}
    return cls(**filtered)


def _validate(cfg: SvnViewConfig) -> None:
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Invalid output format {cfg.output.format!r}; expected one of {', '.join(OUTPUT_FORMATS)}"
        )
    if cfg.svn.timeout <= 0:
        raise ConfigError("[svn] timeout must be positive")
    if cfg.log.limit < 0:
        raise ConfigError("[log] limit must not be negative")


def load_config(
    base_dir: Optional[Path] = None,
    config_override: Optional[str] = None,
) -> SvnViewConfig:
    """Load, validate, and return a SvnViewConfig."""
    config_path = find_config_file(base_dir or Path.cwd(), config_override)

    if config_path is None:
        cfg = SvnViewConfig()
    else:
        logger.debug(f"loading config from {config_path}")
        raw = _parse_toml(config_path)
        cfg = SvnViewConfig(
            version=str(raw.get("version", "1.0")),
            svn=_build_section(raw, SvnConfig, "svn"),
            repository=_build_section(raw, RepositoryConfig, "repository"),
            log=_build_section(raw, LogConfig, "log"),
            output=_build_section(raw, OutputConfig, "output"),
            admin=_build_section(raw, AdminConfig, "admin"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
