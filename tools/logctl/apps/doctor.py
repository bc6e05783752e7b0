#!/usr/bin/env python3
"""
Diagnostic tool: logctl environment checker

Checks the things logctl depends on at runtime:
1. The host OS can be classified (needed for the log directory)
2. The log root exists or can be created, and is writable
3. The console width can be probed (redraw needs it)
4. A fresh Python interpreter can be started in isolated mode
5. Whether PowerShell is available for isolated execution

Usage:
    python -m logctl doctor
    python -m logctl.apps.doctor
"""

import sys
import uuid

from .. import colors
from ..console import FALLBACK_WIDTH, probe_width
from ..errors import InterpreterNotFoundError, UnsupportedPlatformError
from ..executor import Interpreter, run_isolated
from ..utils.paths import log_root, platform_family


def ok(msg: str) -> None:
    """Print a success message."""
    print(f"  {colors.GREEN}✓{colors.RESET} {msg}")


def fail(msg: str) -> None:
    """Print a failure message."""
    print(f"  {colors.RED}✗{colors.RESET} {msg}")


def warn(msg: str) -> None:
    """Print a warning message."""
    print(f"  {colors.YELLOW}⚠{colors.RESET} {msg}")


def info(msg: str) -> None:
    """Print an info message."""
    print(f"  {colors.BLUE}ℹ{colors.RESET} {msg}")


def header(title: str) -> None:
    """Print a section header."""
    print(f"\n{colors.BLUE}{'='*60}{colors.RESET}")
    print(f"{colors.BLUE}{title}{colors.RESET}")
    print(f"{colors.BLUE}{'='*60}{colors.RESET}\n")


def check_platform() -> int:
    header("1. Platform Family")
    try:
        family = platform_family()
    except UnsupportedPlatformError as e:
        fail(str(e))
        return 1
    ok(f"{sys.platform} → {family.value}")
    return 0


def check_log_root() -> int:
    header("2. Log Root")
    try:
        root = log_root()
    except UnsupportedPlatformError as e:
        fail(str(e))
        return 1
    info(f"Log root: {root}")

    try:
        root.mkdir(parents=True, exist_ok=True)
        probe = root / f".doctor-{uuid.uuid4().hex}"
        probe.write_text("probe\n", encoding="utf-8")
        probe.unlink()
    except OSError as e:
        fail(f"Log root is not writable: {e}")
        return 1
    ok("Log root is writable")
    return 0


def check_terminal() -> int:
    header("3. Console")
    width = probe_width(sys.stdout)
    if sys.stdout.isatty():
        ok(f"stdout is a terminal, width {width}")
    else:
        warn(f"stdout is not a terminal; redraw will assume width {FALLBACK_WIDTH}")
    return 0


def check_python() -> int:
    header("4. Isolated Python Execution")
    result = run_isolated("import sys; print(sys.flags.isolated)", timeout=30)
    if result.timed_out:
        fail("Child interpreter timed out")
        return 1
    if result.output == ("1",) and result.ok:
        ok("Child interpreter started in isolated mode")
        return 0
    fail(f"Unexpected result: output={list(result.output)} errors={list(result.errors)}")
    return 1


def check_powershell() -> int:
    header("5. PowerShell (optional)")
    try:
        result = run_isolated("Write-Output ok", interpreter=Interpreter.POWERSHELL, timeout=60)
    except InterpreterNotFoundError as e:
        info(f"{e}; PowerShell payloads will not run")
        return 0
    if result.output == ("ok",):
        ok("PowerShell runs with -NoProfile")
    else:
        warn(f"PowerShell returned output={list(result.output)} errors={list(result.errors)}")
    return 0


def main() -> int:
    """Run all checks and print a summary."""
    issues_found = 0
    issues_found += check_platform()
    issues_found += check_log_root()
    issues_found += check_terminal()
    issues_found += check_python()
    issues_found += check_powershell()

    header("DIAGNOSIS SUMMARY")
    if issues_found == 0:
        print(f"{colors.GREEN}No issues found!{colors.RESET}")
    else:
        print(f"{colors.RED}Found {issues_found} issue(s){colors.RESET}")

    return 1 if issues_found else 0


if __name__ == "__main__":
    sys.exit(main())
