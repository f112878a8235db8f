"""svnview: read-only access to Subversion repositories through the svn CLI."""

__version__ = "0.1.0"
