"""Configuration schema: dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

OutputFormat = Literal["terminal", "json", "yaml"]

OUTPUT_FORMATS = ("terminal", "json", "yaml")


@dataclass
class SvnConfig:
    binary: str = "svn"
    admin_binary: str = "svnadmin"
    timeout: float = 30.0  # seconds per svn invocation


@dataclass
class RepositoryConfig:
    path: str = ""  # directory or file:// URI; empty = must be given with --repo


@dataclass
class LogConfig:
    limit: int = 10


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_diff: bool = True  # include hunks when printing commits


@dataclass
class AdminConfig:
    layout: bool = True  # create trunk/tags/branches on `svnview create`
    install_hooks: bool = False


@dataclass
class SvnViewConfig:
    version: str = "1.0"
    svn: SvnConfig = field(default_factory=SvnConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    log: LogConfig = field(default_factory=LogConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
