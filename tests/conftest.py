"""
Shared fixtures for logctl tests.

Every test runs with a private log root and without any LOGCTL_* settings
from the developer's environment.
"""

import datetime
import io
import os

import pytest

from logctl.console import ConsoleRenderer
from logctl.logger import LogContext


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("LOGCTL_"):
            monkeypatch.delenv(key, raising=False)
    root = tmp_path / "logs"
    monkeypatch.setenv("LOGCTL_LOG_ROOT", str(root))
    return root


@pytest.fixture
def log_root(isolated_env):
    return isolated_env


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def plain_console(stream):
    """Uncolored renderer on a StringIO with an 80-column terminal."""
    return ConsoleRenderer(stream=stream, width=80, color=False)


@pytest.fixture
def context():
    return LogContext(caller="tests")


@pytest.fixture
def fixed_time():
    return datetime.datetime(2024, 1, 15, 12, 3, 4, 560000).astimezone()
