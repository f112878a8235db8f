"""svnview CLI: Typer application over the repository gateway."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from svnview import __version__
from svnview.config import OUTPUT_FORMATS, ConfigError, SvnViewConfig, load_config
from svnview.svn.gateway import RepositoryGateway
from svnview.svn.models import ErrorKind, Result
from svnview.svn.runner import CommandRunner

app = typer.Typer(
    name="svnview",
    help="Browse Subversion repositories: branches, trees, history, diffs.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Negative answers exit 1; configuration or tool failures exit 2.
_EXIT_CODES = {
    ErrorKind.NOT_FOUND: 1,
    ErrorKind.UNSUPPORTED: 1,
}


@dataclass
class _State:
    config: SvnViewConfig
    format: str


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:HH:mm:ss} | {level: <7} | {message}",
        backtrace=False,
        diagnose=False,
    )


def _make_runner(cfg: SvnViewConfig) -> CommandRunner:
    return CommandRunner(cfg.svn.binary, timeout=cfg.svn.timeout)


def _state(ctx: typer.Context) -> _State:
    return ctx.obj


def _open_gateway(ctx: typer.Context) -> RepositoryGateway:
    """Open the configured repository, exit 2 on failure."""
    cfg = _state(ctx).config
    if not cfg.repository.path:
        err_console.print(
            "[bold red]Error:[/bold red] no repository given "
            "(use --repo, SVNVIEW_REPOSITORY, or \\[repository] path)"
        )
        raise typer.Exit(code=2)

    opened = RepositoryGateway.open(cfg.repository.path, runner=_make_runner(cfg))
    if not opened.ok or opened.value is None:
        err_console.print(f"[bold red]Error:[/bold red] {escape(opened.detail)}")
        raise typer.Exit(code=2)
    return opened.value


def _unwrap(result: Result) -> Any:
    """Return the value of a successful result, or report it and exit."""
    if result.ok:
        return result.value
    kind = result.error or ErrorKind.TOOL_EXECUTION_FAILED
    detail = f": {escape(result.detail)}" if result.detail else ""
    err_console.print(f"[bold red]{kind.value.replace('_', ' ')}[/bold red]{detail}")
    raise typer.Exit(code=_EXIT_CODES.get(kind, 2))


def _emit(ctx: typer.Context, data: Callable[[], Any], pretty: Callable[[], None]) -> None:
    """Print structured *data* for json/yaml output, else call *pretty*."""
    from svnview.output import json_report, yaml_report

    fmt = _state(ctx).format
    if fmt == "json":
        print(json_report.render(data()))
    elif fmt == "yaml":
        print(yaml_report.render(data()), end="")
    else:
        pretty()


def _write_raw(content: bytes) -> None:
    """Copy file contents to stdout byte for byte."""
    sys.stdout.flush()
    sys.stdout.buffer.write(content)
    sys.stdout.buffer.flush()


# ── branches ──────────────────────────────────────────────────────────────────


@app.command()
def branches(ctx: typer.Context) -> None:
    """List branches (folders under /branches, then trunk)."""
    from svnview.output import terminal

    names = _unwrap(_open_gateway(ctx).branches())
    _emit(ctx, lambda: names, lambda: terminal.render_branches(names, console))


# ── tree / show ───────────────────────────────────────────────────────────────


@app.command()
def tree(
    ctx: typer.Context,
    path: str = typer.Argument("", help="Path inside the repository, e.g. /trunk/src"),
    rev: str = typer.Option("HEAD", "--rev", "-r", help="Revision to inspect"),
) -> None:
    """Show a directory listing, or a file's contents."""
    from svnview.output import serialize, terminal

    result = _unwrap(_open_gateway(ctx).tree(path=path, rev=rev))
    _emit(ctx, lambda: serialize.tree_to_dict(result), lambda: terminal.render_tree(result, console))
    if result.type == "invalid":
        raise typer.Exit(code=1)


@app.command()
def show(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File path inside the repository"),
    rev: str = typer.Option("HEAD", "--rev", "-r", help="Revision to read"),
) -> None:
    """Print a file's contents at a revision."""
    from svnview.output import serialize

    content = _unwrap(_open_gateway(ctx).show(path, rev))
    _emit(
        ctx,
        lambda: {"path": path, "revision": rev, **serialize.blob_to_dict(content)},
        lambda: _write_raw(content),
    )


# ── history ───────────────────────────────────────────────────────────────────


@app.command()
def log(
    ctx: typer.Context,
    rev: str = typer.Option("HEAD", "--rev", "-r", help="Newest revision to list from"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of commits"),
    offset: int = typer.Option(0, "--offset", help="Skip this many commits first"),
    path: str = typer.Option("", "--path", "-p", help="Only commits touching this path"),
) -> None:
    """List commits with per-commit change statistics."""
    from svnview.output import serialize, terminal

    cfg = _state(ctx).config
    count = cfg.log.limit if limit is None else limit
    commits = _unwrap(_open_gateway(ctx).log(rev, count, offset, path))
    _emit(
        ctx,
        lambda: [serialize.commit_to_dict(c, include_diff=cfg.output.show_diff) for c in commits],
        lambda: terminal.render_log(commits, console),
    )


@app.command()
def commit(
    ctx: typer.Context,
    revision: str = typer.Argument(..., help="Revision number or HEAD"),
) -> None:
    """Show one commit with its diff."""
    from svnview.output import serialize, terminal

    cfg = _state(ctx).config
    result = _unwrap(_open_gateway(ctx).show_commit(revision))
    _emit(
        ctx,
        lambda: serialize.commit_to_dict(result, include_diff=cfg.output.show_diff),
        lambda: terminal.render_commit(result, show_diff=cfg.output.show_diff, console=console),
    )


@app.command()
def diff(
    ctx: typer.Context,
    revision: str = typer.Argument(..., help="Revision number or HEAD"),
    parent: Optional[str] = typer.Option(None, "--parent", help="Compare against this revision"),
) -> None:
    """Show the diff introduced by a revision."""
    from svnview.output import serialize, terminal

    result = _unwrap(_open_gateway(ctx).diff(revision, parent))
    _emit(ctx, lambda: serialize.diff_to_dict(result), lambda: terminal.render_diff(result, console))


@app.command()
def blame(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File path inside the repository"),
    branch: str = typer.Option("HEAD", "--branch", "-b"),
) -> None:
    """Line-by-line authorship (not supported yet)."""
    _unwrap(_open_gateway(ctx).blame(branch, path))


# ── admin ─────────────────────────────────────────────────────────────────────


@app.command()
def create(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Directory for the new repository"),
    layout: Optional[bool] = typer.Option(None, "--layout/--no-layout", help="Create trunk/tags/branches"),
    hooks: Optional[bool] = typer.Option(None, "--hooks/--no-hooks", help="Install the log-edit hook"),
) -> None:
    """Create a new repository (one-off administrative step)."""
    from svnview.admin import create_repository

    cfg = _state(ctx).config
    ok, msg = create_repository(
        path,
        layout=cfg.admin.layout if layout is None else layout,
        hooks=cfg.admin.install_hooks if hooks is None else hooks,
        svn=_make_runner(cfg),
        svnadmin=CommandRunner(cfg.svn.admin_binary, timeout=cfg.svn.timeout),
    )
    if ok:
        err_console.print(f"[green]✓[/green] {escape(msg)}")
    else:
        err_console.print(f"[red]✗[/red] {escape(msg)}")
        raise typer.Exit(code=1)


@app.command()
def init() -> None:
    """Write a starter .svnview.toml in the current directory."""
    from svnview.config.defaults import DEFAULT_TOML
    from svnview.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists():
        err_console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {escape(str(config_path))}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    err_console.print(f"[green]✓[/green] Created {escape(str(config_path))}")


# ── version / global options ──────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"svnview {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Optional[str] = typer.Option(None, "--repo", help="Repository directory or file:// URI"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .svnview.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Log every svn invocation"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """svnview: read-only views of Subversion repositories."""
    _configure_logging(verbose, debug)

    try:
        cfg = load_config(Path.cwd(), config)
    except ConfigError as exc:
        err_console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if repo:
        cfg.repository.path = repo
    if format:
        if format not in OUTPUT_FORMATS:
            err_console.print(f"[bold red]Invalid format:[/bold red] {escape(format)}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]

    ctx.obj = _State(config=cfg, format=cfg.output.format)
