"""Starter .svnview.toml template."""

DEFAULT_TOML = """\
# svnview configuration
version = "1.0"

[svn]
binary = "svn"
admin_binary = "svnadmin"
timeout = 30              # seconds before an svn call is abandoned

[repository]
# path = "/srv/svn/project"    # or "file:///srv/svn/project"

[log]
limit = 10

[output]
format = "terminal"       # terminal | json | yaml
show_diff = true

[admin]
layout = true             # svnview create: add trunk/tags/branches
install_hooks = false     # svnview create: allow log message edits
"""
