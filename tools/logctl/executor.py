"""
Isolated script execution.

Runs a script payload in a brand-new interpreter process that inherits no
profile, startup script or user site state, and returns what it printed:

    >>> run_isolated("print('hi')").output
    ('hi',)

Both output streams are drained while the child runs, so a chatty child
cannot fill a pipe buffer and stall. The call blocks until the child exits
or the timeout expires. The child runs in its own process group; on expiry
the whole group is killed, so processes the payload started in the
background go with it, and whatever had been written so far is returned
with ``timed_out`` set.

A child that fails (writes to stderr, exits non-zero, times out) is not an
exception: the caller inspects the returned ProcessResult.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
import shutil
import signal
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import exec_timeout
from .errors import InterpreterNotFoundError

logger = logging.getLogger(__name__)

# PowerShell executables tried in order
POWERSHELL_CANDIDATES = ("pwsh", "powershell")

# Seconds to wait for the pipes to close after a kill
KILL_GRACE = 5.0


class Interpreter(enum.Enum):
    PYTHON = "python"
    POWERSHELL = "powershell"


@dataclass(frozen=True)
class ProcessResult:
    """
    Captured output of one isolated execution.

    Attributes:
        output: Non-blank stdout lines, right-trimmed, in order.
        errors: Non-blank stderr lines, right-trimmed, in order.
        exit_code: Child exit status; None only if it could not be reaped.
        timed_out: The child was killed because the timeout expired.
    """

    output: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    exit_code: Optional[int] = None
    timed_out: bool = field(default=False)

    @property
    def ok(self) -> bool:
        return not self.errors and self.exit_code == 0 and not self.timed_out

    def to_dict(self) -> dict[str, Any]:
        return {
            "Output": list(self.output),
            "Errors": list(self.errors),
            "ExitCode": self.exit_code,
            "TimedOut": self.timed_out,
        }


def split_lines(text: Optional[str]) -> tuple[str, ...]:
    """Split captured text into right-trimmed lines, dropping blank ones."""
    if not text:
        return ()
    return tuple(
        line.rstrip() for line in text.splitlines() if line.strip()
    )


def build_command(payload: str, interpreter: Interpreter = Interpreter.PYTHON) -> list[str]:
    """
    Build the argv that runs ``payload`` in a fresh interpreter.

    The payload is passed as a single argument, never through a shell.

    Raises:
        InterpreterNotFoundError: No PowerShell executable on PATH.
    """
    if interpreter is Interpreter.PYTHON:
        # -I: isolated mode (no PYTHON* env vars, no user site, no cwd on path)
        return [sys.executable, "-I", "-c", payload]

    for candidate in POWERSHELL_CANDIDATES:
        executable = shutil.which(candidate)
        if executable:
            return [
                executable,
                "-NoLogo",
                "-NoProfile",
                "-NonInteractive",
                "-ExecutionPolicy",
                "Bypass",
                "-Command",
                payload,
            ]
    raise InterpreterNotFoundError(interpreter.value, POWERSHELL_CANDIDATES)


def _process_group_options() -> dict[str, Any]:
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def kill_process_tree(proc: subprocess.Popen) -> None:
    """
    Kill a child started by run_isolated() and everything it started.

    On POSIX the child leads its own session, so its process group holds
    every descendant that did not detach itself. On Windows taskkill walks
    the process tree.
    """
    if os.name == "nt":
        subprocess.run(
            ["taskkill", "/F", "/T", "/PID", str(proc.pid)],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    else:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError) as e:
            logger.debug("Process group %d already gone: %s", proc.pid, e)
    # No-op once the child has been reaped
    proc.kill()


def _text(data: Any) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _collect_after_kill(proc: subprocess.Popen) -> tuple[str, str]:
    """
    Read what a killed child left in its pipes.

    A descendant that detached from the process group survives the kill and
    can hold the pipes open indefinitely, so the read is bounded by
    KILL_GRACE and the pipes are closed when it runs out.
    """
    try:
        return proc.communicate(timeout=KILL_GRACE)
    except subprocess.TimeoutExpired as e:
        logger.debug("Pipes of pid %d still open %.1fs after kill, closing them",
                     proc.pid, KILL_GRACE)
        stdout, stderr = _text(e.output), _text(e.stderr)

    for pipe in (proc.stdout, proc.stderr):
        if pipe is not None:
            pipe.close()
    try:
        proc.wait(timeout=KILL_GRACE)
    except subprocess.TimeoutExpired:
        logger.debug("Killed pid %d has not exited", proc.pid)
    return stdout, stderr


def run_isolated(
    payload: str,
    interpreter: Interpreter = Interpreter.PYTHON,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """
    Run a payload in a fresh child process and capture its output.

    Args:
        payload: Script source passed to the interpreter as one argument.
        interpreter: Which interpreter to start.
        timeout: Seconds to wait before killing the child; defaults to
            LOGCTL_EXEC_TIMEOUT or 300.

    Returns:
        ProcessResult with stdout and stderr lines kept separate.
    """
    command = build_command(payload, interpreter)
    timeout = timeout if timeout is not None else exec_timeout()

    proc = subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        **_process_group_options(),
    )
    timed_out = False
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug("Isolated %s run exceeded %.1fs, killing pid %d",
                     interpreter.value, timeout, proc.pid)
        timed_out = True
        kill_process_tree(proc)
        stdout, stderr = _collect_after_kill(proc)
    except BaseException:
        # The child has its own process group and does not see Ctrl+C
        kill_process_tree(proc)
        raise

    return ProcessResult(
        output=split_lines(stdout),
        errors=split_lines(stderr),
        exit_code=proc.returncode,
        timed_out=timed_out,
    )


async def run_isolated_async(
    payload: str,
    interpreter: Interpreter = Interpreter.PYTHON,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """run_isolated() on a worker thread, for use inside an event loop."""
    return await asyncio.to_thread(run_isolated, payload, interpreter, timeout)
