"""Detached child processes tracked by PID.

expose never supervises its children: it spawns them detached, records the
PID and later sends a termination signal. A PID of SENTINEL_PID marks a
process expose does not own (an external service) and is never signalled.

PIDs can be recycled by the OS, so a stale record may point at an unrelated
process. Nothing here guards against that.
"""

import logging
import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .platform import IS_WINDOWS
from .subprocess_timeouts import get_timeout

logger = logging.getLogger("expose.processes")

SENTINEL_PID = 0


@dataclass(frozen=True)
class ProcessHandle:
    pid: int

    @property
    def is_owned(self) -> bool:
        return self.pid > SENTINEL_PID

    def is_alive(self) -> bool:
        """Check if process still exists"""
        if not self.is_owned:
            return False
        if IS_WINDOWS:
            result = subprocess.run(
                ["tasklist", "/FI", f"PID eq {self.pid}"],
                capture_output=True,
                text=True,
                timeout=get_timeout("taskkill"),
                check=False,
            )
            return str(self.pid) in result.stdout
        try:
            os.kill(self.pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but belongs to someone else
            return True
        return True

    def terminate(self) -> bool:
        """Send a termination signal.

        Returns False (after logging a warning) when the signal could not be
        delivered, typically because the process has already exited.
        """
        if not self.is_owned:
            return False
        try:
            if IS_WINDOWS:
                result = subprocess.run(
                    ["taskkill", "/F", "/PID", str(self.pid)],
                    capture_output=True,
                    timeout=get_timeout("taskkill"),
                    check=False,
                )
                if result.returncode != 0:
                    raise ProcessLookupError(f"taskkill exited with {result.returncode}")
            else:
                os.kill(self.pid, signal.SIGTERM)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Failed to signal process %s (might already be dead): %s", self.pid, e)
            return False
        logger.debug("Sent SIGTERM to %s", self.pid)
        return True


def spawn_detached(
    command: list[str],
    cwd: Path | str | None = None,
    log_path: Path | None = None,
    env: dict[str, str] | None = None,
) -> ProcessHandle:
    """Start a long-lived process that outlives this CLI invocation.

    With log_path, stdout and stderr are appended to that file for the life of
    the process. Otherwise output is discarded.
    """
    child_env = None
    if env:
        child_env = {**os.environ, **env}

    kwargs = {}
    if IS_WINDOWS:
        kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW | subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True

    logger.debug("Spawning %s (cwd=%s)", command, cwd)
    if log_path is None:
        proc = subprocess.Popen(
            command,
            cwd=cwd,
            env=child_env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **kwargs,
        )
        return ProcessHandle(proc.pid)

    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, "ab") as f:
        proc = subprocess.Popen(
            command,
            cwd=cwd,
            env=child_env,
            stdin=subprocess.DEVNULL,
            stdout=f,
            stderr=subprocess.STDOUT,
            **kwargs,
        )
    return ProcessHandle(proc.pid)
