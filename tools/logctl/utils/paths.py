"""
Filesystem locations used by logctl.

All path logic is centralized here so the file sink, the log viewer and the
CLI agree on where log files live.

Layout:
    <log root>/<AppName>/<yyyy-MM-dd>_<pid>.log

    The log root is ``<user data dir>/logctl`` where the user data dir is
    the per-user local application-data directory of the host OS:

        Windows: %LOCALAPPDATA%
        macOS:   ~/Library/Application Support
        Unix:    $XDG_DATA_HOME or ~/.local/share

    Setting LOGCTL_LOG_ROOT replaces the whole log root.
"""

from __future__ import annotations

import enum
import os
import sys
from pathlib import Path
from typing import Optional

import platformdirs

from ..errors import UnsupportedPlatformError

PRODUCT_NAME = "logctl"

LOG_ROOT_ENV = "LOGCTL_LOG_ROOT"


class PlatformFamily(enum.Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    UNIX = "unix"


# sys.platform prefixes for each family. Cygwin and MSYS present a POSIX
# filesystem, so they are treated as Unix.
_UNIX_PREFIXES = (
    "linux",
    "freebsd",
    "openbsd",
    "netbsd",
    "dragonfly",
    "sunos",
    "aix",
    "cygwin",
    "msys",
    "android",
)


def platform_family(platform: Optional[str] = None) -> PlatformFamily:
    """
    Classify a sys.platform string into an OS family.

    Args:
        platform: Value to classify; defaults to sys.platform.

    Raises:
        UnsupportedPlatformError: If the platform belongs to no known family.

    Example:
        >>> platform_family("linux")
        <PlatformFamily.UNIX: 'unix'>
    """
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return PlatformFamily.WINDOWS
    if platform == "darwin":
        return PlatformFamily.MACOS
    if platform.startswith(_UNIX_PREFIXES):
        return PlatformFamily.UNIX
    raise UnsupportedPlatformError(platform)


def user_data_dir(platform: Optional[str] = None) -> Path:
    """
    Return the per-user local application-data directory.

    The platform is classified first so an unknown OS fails before any
    directory is created or written.
    """
    platform_family(platform)
    # appname=None yields the base directory itself; roaming=False keeps
    # Windows on %LOCALAPPDATA%
    return Path(platformdirs.user_data_dir(appname=None, roaming=False))


def log_root(platform: Optional[str] = None) -> Path:
    """
    Return the root directory for all logctl logs.

    Uses LOGCTL_LOG_ROOT if set, otherwise ``<user data dir>/logctl``.
    """
    root = os.environ.get(LOG_ROOT_ENV)
    if root:
        return Path(root).expanduser()
    return user_data_dir(platform) / PRODUCT_NAME
