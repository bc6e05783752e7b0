#!/usr/bin/env python3
"""
logctl - structured console/file logging and isolated script execution.

This module implements the command-line interface for logctl. It exposes
the logging engine and the isolated executor to shell scripts and to
developers poking at them by hand.

Responsibilities:
    - Write leveled, templated log lines to the console and log files (write)
    - Run script payloads in a fresh interpreter and report output (exec)
    - Follow an app's log files live (logs)
    - Locate log files (apps, path)
    - Demonstrate in-place redraw (demo)
    - Check the runtime environment (doctor)

Usage:
    python -m logctl <command> [options]

Examples:
    python -m logctl write Information "{greeting}, {user}!" --param greeting=Hello --param user=World
    python -m logctl write Warning "{module} is at {version}" --arg PSReadLine --arg 2.3.4 --app ModuleSync
    python -m logctl exec "print('hi')"
    python -m logctl logs ModuleSync --min-level Warning
"""

import argparse
import datetime
import json
import re
import sys
import time
from pathlib import Path
from typing import Any, Optional, Sequence

from .config import SinkConfig, load_dotenv
from .errors import LogctlError
from .executor import Interpreter, run_isolated
from .levels import LogLevel
from .logger import Logger, write_log
from .tui.app_index import discover_apps
from .utils.logfile import log_file_path
from .values import ModuleVersion

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")

# ============================================================
# Value coercion
# ============================================================


def coerce_cli_value(text: str) -> Any:
    """
    Turn a command-line string into the most specific value it spells.

    Order matters: "1" is an int, "1.2" a float, "1.2.3" and "v1.2" are
    versions, "2024-01-15T12:00" a timestamp, "true"/"false" booleans.
    Everything else stays text.
    """
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(text)
    except ValueError:
        pass
    if ModuleVersion.is_version(text) and (text.startswith("v") or text.count(".") >= 2):
        return ModuleVersion.parse(text)
    try:
        return float(text)
    except ValueError:
        pass
    if _ISO_DATE.match(text):
        try:
            return datetime.datetime.fromisoformat(text)
        except ValueError:
            pass
    return text


def parse_named_params(items: Sequence[str]) -> dict:
    """Parse repeated NAME=VALUE options into an ordered mapping."""
    params = {}
    for item in items:
        if "=" not in item:
            raise argparse.ArgumentTypeError(f"--param expects NAME=VALUE, got {item!r}")
        name, value = item.split("=", 1)
        params[name.strip()] = coerce_cli_value(value)
    return params


# ============================================================
# Commands
# ============================================================


def sink_config_from_args(args) -> SinkConfig:
    """Environment defaults, overridden by whatever was given on the command line."""
    config = SinkConfig.from_env()
    changes = {}
    if args.console_level is not None:
        changes["console_min_level"] = LogLevel.parse(args.console_level)
    if args.file_level is not None:
        changes["file_min_level"] = LogLevel.parse(args.file_level)
    if args.app is not None:
        changes["app_name"] = args.app
    if args.background:
        changes["use_background_color"] = True
    if args.overwrite:
        changes["overwrite"] = True
    if args.initial:
        changes["initial_write"] = True
    if args.json:
        changes["as_json"] = True
    return config.replace(**changes) if changes else config


def cmd_write(args) -> int:
    if args.param:
        parameters: Any = parse_named_params(args.param)
    elif args.arg:
        parameters = [coerce_cli_value(v) for v in args.arg]
    else:
        parameters = None

    result = write_log(args.level, args.template, parameters, sink_config_from_args(args))
    if result is not None:
        print(result)
    return 0


def cmd_exec(args) -> int:
    if args.file:
        try:
            payload = Path(args.file).read_text(encoding="utf-8")
        except OSError as e:
            raise LogctlError(f"cannot read payload file {args.file}: {e.strerror or e}") from e
    elif args.payload is not None:
        payload = args.payload
    else:
        payload = sys.stdin.read()

    interpreter = Interpreter(args.interpreter)
    log = Logger()
    log.debug("Running isolated {interpreter} payload ({chars} chars)",
              [interpreter.value, len(payload)])

    result = run_isolated(payload, interpreter=interpreter, timeout=args.timeout)

    if result.timed_out:
        log.warning("Isolated {interpreter} run timed out and was killed", [interpreter.value])
    log.debug("Isolated run finished: exit {code}, {out} output lines, {err} error lines",
              [result.exit_code, len(result.output), len(result.errors)])

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        for line in result.output:
            print(line)
        for line in result.errors:
            print(line, file=sys.stderr)

    return 0 if result.ok else 1


def cmd_logs(args) -> int:
    # curses is unavailable on some platforms; only import it when needed
    import curses

    from .tui.views import run_log_viewer

    try:
        curses.wrapper(run_log_viewer, args.app, LogLevel.parse(args.min_level))
    except KeyboardInterrupt:
        pass
    return 0


def cmd_apps(args) -> int:
    apps = discover_apps()
    if not apps:
        print("[logctl] No app logs found")
        return 0
    for app in apps:
        stamp = datetime.datetime.fromtimestamp(app["last_mtime"]).strftime("%Y-%m-%d %H:%M:%S")
        print(f"{app['app']:<24} {app['files']:>5} files {app['processes']:>5} processes  last write {stamp}")
    return 0


def cmd_path(args) -> int:
    print(log_file_path(args.app))
    return 0


def cmd_demo(args) -> int:
    log = Logger(SinkConfig.from_env().replace(console_min_level=LogLevel.VERBOSE))
    log.info("Starting redraw demo with {steps} steps", [args.steps])
    for step in range(1, args.steps + 1):
        log.progress("Processing step {step} of {total} ({percent}%)",
                     [step, args.steps, round(step * 100 / args.steps, 1)])
        time.sleep(args.delay)
    log.end_progress()
    log.info("Demo complete: redraw {enabled}", [True])
    return 0


def cmd_doctor(args) -> int:
    from .apps import doctor

    return doctor.main()


# ============================================================
# Command-Line Argument Parsing
# ============================================================


def build_parser() -> argparse.ArgumentParser:
    """
    Build and configure the top-level argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser ready to parse sys.argv.
    """
    parser = argparse.ArgumentParser(
        prog="logctl",
        description="Structured console/file logging and isolated script execution",
    )
    subparsers = parser.add_subparsers(title="commands", dest="command", required=True)

    # --- write: one log line ---
    write_parser = subparsers.add_parser("write", help="Write a log line")
    write_parser.add_argument("level", help="Verbose, Debug, Information, Warning, Error or Critical")
    write_parser.add_argument("template", help="Message template with {name} placeholders")
    params = write_parser.add_mutually_exclusive_group()
    params.add_argument("--param", action="append", metavar="NAME=VALUE",
                        help="Named parameter (repeatable)")
    params.add_argument("--arg", action="append", metavar="VALUE",
                        help="Positional parameter (repeatable)")
    write_parser.add_argument("--console-level", help="Minimum console level")
    write_parser.add_argument("--file-level", help="Minimum file level")
    write_parser.add_argument("--app", help="App name; enables the log file")
    write_parser.add_argument("--background", action="store_true",
                              help="Use the static background color")
    write_parser.add_argument("--overwrite", action="store_true",
                              help="Redraw the previous line in place")
    write_parser.add_argument("--initial", action="store_true",
                              help="First write of a redraw sequence")
    write_parser.add_argument("--json", action="store_true",
                              help="Print the serialized event")
    write_parser.set_defaults(handler=cmd_write)

    # --- exec: isolated execution ---
    exec_parser = subparsers.add_parser("exec", help="Run a payload in a fresh interpreter")
    exec_parser.add_argument("payload", nargs="?",
                             help="Script text (read from stdin if omitted)")
    exec_parser.add_argument("--file", help="Read the payload from a file")
    exec_parser.add_argument("--interpreter", choices=[i.value for i in Interpreter],
                             default=Interpreter.PYTHON.value)
    exec_parser.add_argument("--timeout", type=float, default=None,
                             help="Seconds before the child is killed")
    exec_parser.add_argument("--json", action="store_true",
                             help="Print {Output, Errors, ExitCode, TimedOut} as JSON")
    exec_parser.set_defaults(handler=cmd_exec)

    # --- logs: TUI viewer ---
    logs_parser = subparsers.add_parser("logs", help="Follow today's logs for an app (TUI)")
    logs_parser.add_argument("app", help="App name")
    logs_parser.add_argument("--min-level", default="Verbose", help="Hide lower levels")
    logs_parser.set_defaults(handler=cmd_logs)

    # --- apps: discovery ---
    apps_parser = subparsers.add_parser("apps", help="List apps that have log files")
    apps_parser.set_defaults(handler=cmd_apps)

    # --- path: log file location ---
    path_parser = subparsers.add_parser("path", help="Print this process's log file path for an app")
    path_parser.add_argument("app", help="App name")
    path_parser.set_defaults(handler=cmd_path)

    # --- demo: redraw ---
    demo_parser = subparsers.add_parser("demo", help="Show in-place redraw")
    demo_parser.add_argument("--steps", type=int, default=10)
    demo_parser.add_argument("--delay", type=float, default=0.2)
    demo_parser.set_defaults(handler=cmd_demo)

    # --- doctor: diagnostics ---
    doctor_parser = subparsers.add_parser("doctor", help="Check the runtime environment")
    doctor_parser.set_defaults(handler=cmd_doctor)

    return parser


# ============================================================
# Entry Point
# ============================================================


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main entry point for the logctl CLI.

    Exit Codes:
        0: Success
        1: The command ran but reported a failure (e.g. child errors)
        2: Invalid arguments or a logctl error
    """
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        code = args.handler(args)
    except (LogctlError, argparse.ArgumentTypeError) as e:
        print(f"[logctl] error: {e}", file=sys.stderr)
        sys.exit(2)

    sys.exit(code)


if __name__ == "__main__":
    main()
