"""Rich terminal renderer: listings, commit tables, coloured diffs."""

from __future__ import annotations

from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from svnview.svn.models import Commit, Diff, LineType, TreeDir, TreeFile, TreeResult

_LINE_STYLE = {
    LineType.ADDED: "green",
    LineType.REMOVED: "red",
    LineType.CONTEXT: "",
}

_LINE_PREFIX = {
    LineType.ADDED: "+",
    LineType.REMOVED: "-",
    LineType.CONTEXT: " ",
}


def _size(size: Optional[int]) -> str:
    if size is None:
        return "-"
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024:
            break
    return f"{value:.1f} {unit}"


def render_branches(branches: List[str], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not branches:
        console.print("[dim]No branches found.[/dim]")
        return
    for name in branches:
        style = "bold cyan" if name == "trunk" else "cyan"
        console.print(Text(name, style=style))


def render_tree(tree: TreeResult, console: Optional[Console] = None) -> None:
    console = console or Console()

    if isinstance(tree, TreeFile):
        console.print(tree.content.decode("utf-8", errors="replace"), end="", markup=False, highlight=False)
        return

    if not isinstance(tree, TreeDir):
        console.print(f"[yellow]⚠[/yellow]  {escape(tree.path or '/')} is {escape(tree.type)}")
        return

    table = Table(title=Text(tree.path or "/"), title_style="bold", border_style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Rev", justify="right", style="green")
    table.add_column("Author", style="magenta")
    table.add_column("Updated (UTC)")

    for entry in tree.entries:
        name = entry.name + ("/" if entry.kind == "dir" else "")
        table.add_row(
            Text(name),
            _size(entry.size) if entry.kind == "file" else "",
            Text(entry.revision or ""),
            Text(entry.author or ""),
            entry.updated or "",
        )
    console.print(table)


def render_log(commits: Sequence[Commit], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not commits:
        console.print("[dim]No commits.[/dim]")
        return

    table = Table(show_lines=False, border_style="dim")
    table.add_column("Rev", justify="right", style="green")
    table.add_column("Author", style="magenta")
    table.add_column("Date (UTC)")
    table.add_column("Subject")
    table.add_column("Files", justify="right")
    table.add_column("+/-", justify="right")

    for commit in commits:
        meta = commit.metadata
        more = sum(fd.more for fd in commit.diff.values())
        less = sum(fd.less for fd in commit.diff.values())
        table.add_row(
            Text(meta.hash),
            Text(meta.author_name),
            meta.date or "",
            Text(meta.subject),
            str(len(commit.diff)),
            Text.assemble((f"+{more}", "green"), " ", (f"-{less}", "red")),
        )
    console.print(table)


def render_diff(diff: Diff, console: Optional[Console] = None) -> None:
    console = console or Console()
    if not diff:
        console.print("[dim]No changes.[/dim]")
        return

    for path, file_diff in diff.items():
        console.print()
        console.print(
            Text.assemble(
                (path, "bold"),
                "  ",
                (f"+{file_diff.more}", "green"),
                " ",
                (f"-{file_diff.less}", "red"),
            )
        )
        if file_diff.binary:
            console.print("[dim]  binary file[/dim]")
            continue
        for hunk in file_diff.hunks:
            console.print(Text(hunk.header, style="cyan"))
            for line in hunk.lines:
                console.print(
                    Text(_LINE_PREFIX[line.line_type] + line.content, style=_LINE_STYLE[line.line_type])
                )


def render_commit(commit: Commit, *, show_diff: bool = True, console: Optional[Console] = None) -> None:
    console = console or Console()
    meta = commit.metadata

    console.print(f"[bold green]r{escape(meta.hash)}[/bold green]  [dim](parent r{escape(meta.parent)})[/dim]")
    console.print(f"[dim]Author:[/dim] {escape(meta.author_name)}")
    console.print(f"[dim]Date:[/dim]   {meta.date or '-'} UTC")
    console.print()
    console.print(Text(meta.subject, style="bold"))
    if meta.body:
        console.print()
        console.print(meta.body, markup=False, highlight=False)

    if meta.paths:
        console.print()
        for changed in meta.paths:
            console.print(
                Text.assemble("  ", (changed.action, "yellow"), " ", changed.path),
                highlight=False,
            )

    if show_diff:
        render_diff(commit.diff, console)
