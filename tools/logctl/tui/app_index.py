"""
App discovery for the log viewer.

Lists the apps that have log files under the log root, so a developer can
see what there is to view before opening the TUI.
"""

from pathlib import Path
from typing import List, Dict, Optional

from ..utils.paths import log_root


def discover_apps(root: Optional[Path] = None) -> List[Dict]:
    """
    Scan the log root and summarize each app directory.

    Args:
        root: Log root to scan; defaults to log_root().

    Returns:
        List of dicts sorted by most recent activity first, each with:
            - app (str): App name (directory name)
            - files (int): Number of log files
            - processes (int): Number of distinct pids across all days
            - last_mtime (float): Most recent modification time

    Example:
        >>> discover_apps()
        [{'app': 'ModuleSync', 'files': 3, 'processes': 2, 'last_mtime': 1705320000.0}]
    """
    root = root if root is not None else log_root()
    apps = []

    if not root.exists():
        return apps

    for app_dir in root.iterdir():
        if not app_dir.is_dir():
            continue

        log_files = sorted(app_dir.glob("*_*.log"))
        if not log_files:
            continue

        pids = {f.stem.partition("_")[2] for f in log_files}
        apps.append({
            "app": app_dir.name,
            "files": len(log_files),
            "processes": len(pids),
            "last_mtime": max(f.stat().st_mtime for f in log_files),
        })

    apps.sort(key=lambda a: a["last_mtime"], reverse=True)
    return apps
