"""Background service launch and termination.

The service runs detached from the orchestrator: in its own session on
POSIX, in its own process group on Windows. Termination follows the
platform's TerminationStrategy and is attempted exactly once.
"""

import logging
import os
import signal
import subprocess
import time
from pathlib import Path
from typing import Optional

from skybuild.harness.credentials import CERT_FILE, KEY_FILE
from skybuild.harness.types import ServiceProcessHandle
from skybuild.pipeline.executor import format_command, run_step
from skybuild.pipeline.types import ServiceStartFailure, StepResult
from skybuild.variant.types import TerminationStrategy

logger = logging.getLogger(__name__)

# How long teardown waits for the service to exit after being stopped.
SHUTDOWN_WAIT_SECONDS = 10


def service_command(binary: Path) -> list[str]:
    return [
        str(binary),
        "--noart",
        "--sslchain",
        CERT_FILE,
        "--sslkey",
        KEY_FILE,
    ]


def _detach_kwargs(termination: TerminationStrategy) -> dict:
    if termination is TerminationStrategy.SIGNAL:
        return {"start_new_session": True}
    return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)}


def launch_service(
    binary: Path,
    workspace_root: Path,
    termination: TerminationStrategy,
    env: Optional[dict] = None,
) -> tuple[StepResult, ServiceProcessHandle]:
    """Start the service in the background. Raises ServiceStartFailure."""
    command = service_command(binary)
    display = format_command(command)
    logger.info("Starting service: %s", display)
    start = time.monotonic()
    try:
        process = subprocess.Popen(
            command,
            cwd=str(workspace_root),
            stdin=subprocess.DEVNULL,
            env=env,
            **_detach_kwargs(termination),
        )
    except OSError as exc:
        step = StepResult(
            name="service:start",
            command=display,
            exit_code=-2,
            duration_seconds=time.monotonic() - start,
            stderr=str(exc),
        )
        raise ServiceStartFailure(step)

    handle = ServiceProcessHandle(
        pid=process.pid,
        binary_name=Path(binary).name,
        termination=termination,
        process=process,
    )
    logger.info("Service started with pid %d", handle.pid)
    step = StepResult(
        name="service:start",
        command=display,
        exit_code=0,
        duration_seconds=time.monotonic() - start,
    )
    return step, handle


def terminate_service(
    handle: ServiceProcessHandle,
    workspace_root: Path,
    wait_seconds: float = SHUTDOWN_WAIT_SECONDS,
) -> StepResult:
    """Stop the service. Never raises; failures come back as a StepResult."""
    if handle.termination is TerminationStrategy.KILL_BY_NAME:
        step = run_step(
            "teardown:terminate",
            ["taskkill.exe", "/F", "/IM", handle.binary_name],
            workspace_root,
        )
    else:
        step = _signal_process_group(handle)

    if step.is_success:
        wait_error = _reap(handle, wait_seconds)
        if wait_error:
            step.exit_code = 1
            step.stderr = wait_error
    return step


def _signal_process_group(handle: ServiceProcessHandle) -> StepResult:
    command = f"kill -TERM -{handle.pid}"
    start = time.monotonic()
    exit_code, stderr = 0, ""
    try:
        os.killpg(handle.pid, signal.SIGTERM)
    except ProcessLookupError:
        logger.info("Service pid %d had already exited", handle.pid)
    except OSError as exc:
        exit_code, stderr = 1, str(exc)
    return StepResult(
        name="teardown:terminate",
        command=command,
        exit_code=exit_code,
        duration_seconds=time.monotonic() - start,
        stderr=stderr,
    )


def _reap(handle: ServiceProcessHandle, wait_seconds: float) -> Optional[str]:
    if handle.process is None:
        return None
    try:
        handle.process.wait(timeout=wait_seconds)
    except subprocess.TimeoutExpired:
        logger.warning(
            "Service pid %d (%s) did not exit within %ss; it is still running "
            "and must be stopped by hand",
            handle.pid,
            handle.binary_name,
            wait_seconds,
        )
        return f"Service pid {handle.pid} still running {wait_seconds}s after stop"
    logger.info("Service pid %d exited (code %s)", handle.pid, handle.process.returncode)
    return None
