"""One-off repository creation: svnadmin create, standard layout, hooks."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from svnview.admin.hooks import install_hook
from svnview.svn.runner import CommandRunner, SvnError

LAYOUT_FOLDERS = ("trunk", "tags", "branches")
LAYOUT_MESSAGE = "Trunk Tag Branches"


def create_repository(
    path: Path,
    *,
    layout: bool = False,
    hooks: bool = False,
    svn: Optional[CommandRunner] = None,
    svnadmin: Optional[CommandRunner] = None,
) -> Tuple[bool, str]:
    """Create a Subversion repository at *path*.

    With *layout*, commit the conventional ``trunk``/``tags``/``branches``
    folders. With *hooks*, install the svnview pre-revprop-change hook.

    Returns (success, message).
    """
    svn = svn or CommandRunner("svn")
    svnadmin = svnadmin or CommandRunner("svnadmin")
    repo_path = Path(path).expanduser().resolve()

    if repo_path.exists():
        return False, f"Refusing to create a repository over existing path {repo_path}"

    try:
        created = svnadmin.execute(["create", str(repo_path)])
        if not created.ok:
            return False, f"svnadmin create failed: {created.stderr.strip()}"
        logger.info(f"created repository at {repo_path}")

        if layout:
            location = repo_path.as_uri()
            mkdir = svn.execute([
                "mkdir",
                *(f"{location}/{folder}" for folder in LAYOUT_FOLDERS),
                "-m", LAYOUT_MESSAGE,
            ])
            if not mkdir.ok:
                return False, f"Repository created but layout failed: {mkdir.stderr.strip()}"
    except SvnError as exc:
        return False, str(exc)

    if hooks:
        ok, msg = install_hook(repo_path)
        if not ok:
            return False, f"Repository created but hook install failed: {msg}"

    return True, f"Created repository at {repo_path}"
