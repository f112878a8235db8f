"""Administrative side operations: repository creation and hooks."""

from svnview.admin.creator import create_repository
from svnview.admin.hooks import install_hook, uninstall_hook

__all__ = ["create_repository", "install_hook", "uninstall_hook"]
