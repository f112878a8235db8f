"""Repository hook installer: pre-revprop-change for editable log messages."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

HOOK_NAME = "pre-revprop-change"

_HOOK_MARKER = "# svnview-hook"
_HOOK_SCRIPT = f"""\
#!/bin/sh
{_HOOK_MARKER}
# Installed by svnview. Allows editing svn:log on existing revisions.
# To uninstall: delete this file, or call svnview.admin.uninstall_hook

REPOS="$1"
REV="$2"
USER="$3"
PROPNAME="$4"
ACTION="$5"

if [ "$ACTION" = "M" -a "$PROPNAME" = "svn:log" ]; then exit 0; fi

echo "Changing revision properties other than svn:log is prohibited" >&2
exit 1
"""


def _hooks_dir(repo_path: Path) -> Path:
    return repo_path / "hooks"


def install_hook(repo_path: Path, *, force: bool = False) -> Tuple[bool, str]:
    """Install the svnview pre-revprop-change hook.

    Returns (success, message).
    """
    hooks_dir = _hooks_dir(repo_path)
    if not (repo_path / "format").is_file():
        return False, f"Not a Subversion repository: {repo_path}"

    hooks_dir.mkdir(parents=True, exist_ok=True)
    hook_path = hooks_dir / HOOK_NAME

    if hook_path.exists():
        content = hook_path.read_text(encoding="utf-8", errors="replace")
        if _HOOK_MARKER in content:
            return True, "svnview hook is already installed."
        if not force:
            return (
                False,
                f"A {HOOK_NAME} hook already exists at {hook_path}. "
                "Use force=True to overwrite it.",
            )

    hook_path.write_text(_HOOK_SCRIPT, encoding="utf-8")
    try:
        hook_path.chmod(0o755)
    except OSError:
        pass  # Windows doesn't need chmod

    return True, f"Installed {HOOK_NAME} hook at {hook_path}"


def uninstall_hook(repo_path: Path) -> Tuple[bool, str]:
    """Remove the svnview hook, leaving hooks written by others alone.

    Returns (success, message).
    """
    hook_path = _hooks_dir(repo_path) / HOOK_NAME

    if not hook_path.exists():
        return True, f"No {HOOK_NAME} hook found, nothing to remove."

    content = hook_path.read_text(encoding="utf-8", errors="replace")
    if _HOOK_MARKER not in content:
        return False, f"{HOOK_NAME} hook exists but was not installed by svnview."

    hook_path.unlink()
    return True, f"Removed {HOOK_NAME} hook from {hook_path}"
