# ABOUTME: Utility modules for arbmcp
# ABOUTME: Exports path resolution, app detection and backup functions

from arbmcp.utils.backup import cleanup_old_backups, create_backup
from arbmcp.utils.detect import is_app_installed
from arbmcp.utils.paths import current_os, expand_template, resolve, resolve_global, resolve_local

__all__ = [
    "current_os",
    "expand_template",
    "resolve",
    "resolve_global",
    "resolve_local",
    "is_app_installed",
    "create_backup",
    "cleanup_old_backups",
]
