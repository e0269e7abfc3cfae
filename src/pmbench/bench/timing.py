"""Wall-clock timing of package-manager commands.

Commands run through the host shell and block until they exit.  The
exit status is reported but never raised: a failing command still
yields a measurement, and deciding what to do with it is left to the
caller.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger("pmbench")


# ---------------------------------------------------------------------------
# TimedResult
# ---------------------------------------------------------------------------


@dataclass
class TimedResult:
    """Result of a timed subprocess execution."""

    elapsed_ms: int
    exit_code: int
    timed_out: bool = False
    stdout: str | None = None
    stderr: str | None = None

    @property
    def status(self) -> str:
        """Classify the execution as ``ok``, ``fail`` or ``timeout``."""
        if self.timed_out:
            return "timeout"
        return "ok" if self.exit_code == 0 else "fail"


# ---------------------------------------------------------------------------
# Core timing implementation
# ---------------------------------------------------------------------------


def run_timed(
    command: str,
    *,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    timeout: float = 600,
    capture_output: bool = False,
) -> TimedResult:
    """Execute a shell command and measure its wall-clock duration.

    The clock starts immediately before the process is spawned and stops
    immediately after it terminates.  Output passes through to this
    process unless *capture_output* is set.

    Args:
        command: Shell command string.
        cwd: Working directory for the subprocess.
        env: Extra environment variables layered over ``os.environ``.
        timeout: Maximum execution time in seconds.  On expiry the whole
            process group is killed and the elapsed time up to that
            point is reported with ``timed_out`` set.
        capture_output: Capture stdout/stderr as text instead of
            passing them through.

    Returns:
        TimedResult with the elapsed milliseconds and exit code.
    """
    run_env = dict(os.environ)
    if env:
        run_env.update(env)

    pipe = subprocess.PIPE if capture_output else None

    timed_out = False
    wall_start = time.monotonic()
    proc = subprocess.Popen(
        command,
        shell=True,
        cwd=str(cwd) if cwd else None,
        env=run_env,
        stdout=pipe,
        stderr=pipe,
        text=True,
        start_new_session=True,
    )
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
        exit_code = proc.returncode
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_process_group(proc.pid)
        try:
            stdout, stderr = proc.communicate(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            stdout, stderr = proc.communicate()
        exit_code = -1
        log.warning("Command timed out after %ss: %s", timeout, command)

    wall_time = time.monotonic() - wall_start

    return TimedResult(
        elapsed_ms=max(int(round(wall_time * 1000)), 0),
        exit_code=exit_code,
        timed_out=timed_out,
        stdout=stdout,
        stderr=stderr,
    )


def _kill_process_group(pid: int) -> None:
    """Attempt to kill the entire process group on timeout."""
    try:
        os.killpg(os.getpgid(pid), signal.SIGKILL)
    except (ProcessLookupError, PermissionError, OSError):
        pass
