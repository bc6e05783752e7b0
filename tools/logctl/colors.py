"""
ANSI color codes and the static severity color table.

Colors are plain SGR escape sequences. Every colored span is closed with
RESET so a line never leaks its color into the next one.
"""

from .levels import LogLevel

RESET = "\033[0m"

DIM = "\033[90m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"
WHITE = "\033[97m"
GREY = "\033[37m"

# Critical events get white text on a red background
FAIL_BACKGROUND = "\033[97;41m"

# Static colors for literal template text
LITERAL_FOREGROUND = WHITE
LITERAL_BACKGROUND = "\033[40m"

# Named palette keys, referenced by the severity table below
PALETTE = {
    "dim": DIM,
    "info": CYAN,
    "success": GREEN,
    "warn": YELLOW,
    "fail": RED,
    "fail-with-background": FAIL_BACKGROUND,
}

SEVERITY_COLORS = {
    LogLevel.VERBOSE: "dim",
    LogLevel.DEBUG: "info",
    LogLevel.INFORMATION: "success",
    LogLevel.WARNING: "warn",
    LogLevel.ERROR: "fail",
    LogLevel.CRITICAL: "fail-with-background",
}


def severity_color(level: LogLevel) -> str:
    """Return the ANSI code used for a level's tag."""
    return PALETTE[SEVERITY_COLORS[level]]


def paint(text: str, code: str) -> str:
    """Wrap text in an ANSI code and a trailing reset."""
    if not code:
        return text
    return f"{code}{text}{RESET}"
