"""
Configuration for log calls.

Every log call takes a SinkConfig. There is no hidden global config store:
callers build one config per call site (usually SinkConfig.from_env()) and
derive variations from it with ``config.replace(...)``.

Environment variables:
    LOGCTL_CONSOLE_LEVEL  Minimum console level (default: Information)
    LOGCTL_FILE_LEVEL     Minimum file level (default: Verbose)
    LOGCTL_APP_NAME       App name; enables the file sink when set
    LOGCTL_BACKGROUND     Use the static background color (default: off)
    LOGCTL_OVERWRITE      Redraw lines in place (default: off)
    LOGCTL_JSON           Return serialized events (default: off)
    LOGCTL_LOG_ROOT       Replaces the log root directory
    LOGCTL_EXEC_TIMEOUT   Default isolated execution timeout in seconds
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ValidationError
from .levels import LogLevel

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}

DEFAULT_EXEC_TIMEOUT = 300.0


def load_dotenv(path: Optional[Path] = None) -> None:
    """
    Load a .env file into os.environ if present.

    Lines are ``KEY=VALUE``; blank lines and ``#`` comments are skipped.
    Variables already in the environment win over the file.

    Args:
        path: File to load; defaults to ``.env`` in the working directory.
    """
    env_path = path if path is not None else Path.cwd() / ".env"

    # Silently skip if no .env file exists - it's optional
    if not env_path.exists():
        return

    with env_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            # Split on first = only (value might contain =)
            key, value = line.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip())


def env_flag(value: Optional[str], name: str, default: bool = False) -> bool:
    """Parse an on/off environment value."""
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got {value!r}", parameter=name)


@dataclass(frozen=True)
class SinkConfig:
    """
    Per-call sink settings.

    Attributes:
        console_min_level: Lowest level written to the console.
        file_min_level: Lowest level written to the log file.
        app_name: Log file app name; None disables the file sink.
        use_background_color: Paint message text on the static background.
        overwrite: Redraw the previous console line instead of appending.
        initial_write: First write of a redraw sequence.
        as_json: Return the serialized event from the log call.
    """

    console_min_level: LogLevel = LogLevel.INFORMATION
    file_min_level: LogLevel = LogLevel.VERBOSE
    app_name: Optional[str] = None
    use_background_color: bool = False
    overwrite: bool = False
    initial_write: bool = False
    as_json: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "console_min_level", LogLevel.parse(self.console_min_level))
        object.__setattr__(self, "file_min_level", LogLevel.parse(self.file_min_level))
        if self.app_name is not None and not self.app_name.strip():
            object.__setattr__(self, "app_name", None)

    @property
    def file_enabled(self) -> bool:
        return self.app_name is not None

    def replace(self, **changes) -> "SinkConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SinkConfig":
        """
        Build a config from LOGCTL_* variables, falling back to defaults.

        Raises:
            ValidationError: For unknown level names or non-boolean flags.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            console_min_level=LogLevel.parse(
                env.get("LOGCTL_CONSOLE_LEVEL") or defaults.console_min_level
            ),
            file_min_level=LogLevel.parse(
                env.get("LOGCTL_FILE_LEVEL") or defaults.file_min_level
            ),
            app_name=env.get("LOGCTL_APP_NAME") or None,
            use_background_color=env_flag(env.get("LOGCTL_BACKGROUND"), "LOGCTL_BACKGROUND"),
            overwrite=env_flag(env.get("LOGCTL_OVERWRITE"), "LOGCTL_OVERWRITE"),
            as_json=env_flag(env.get("LOGCTL_JSON"), "LOGCTL_JSON"),
        )


def exec_timeout(environ: Optional[Mapping[str, str]] = None) -> float:
    """Default isolated execution timeout from LOGCTL_EXEC_TIMEOUT."""
    env = os.environ if environ is None else environ
    raw = env.get("LOGCTL_EXEC_TIMEOUT")
    if not raw:
        return DEFAULT_EXEC_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ValidationError(
            f"LOGCTL_EXEC_TIMEOUT must be a number of seconds, got {raw!r}",
            parameter="LOGCTL_EXEC_TIMEOUT",
        ) from None
    if timeout <= 0:
        raise ValidationError(
            "LOGCTL_EXEC_TIMEOUT must be positive", parameter="LOGCTL_EXEC_TIMEOUT"
        )
    return timeout
