"""Step execution and the fail-fast pipeline driver.

Each step runs as a subprocess with optional timeout enforcement and full
stdout/stderr capture for the operation report. The driver runs steps in
order and stops at the first fatal failure.
"""

import logging
import shlex
import subprocess
import time
from pathlib import Path
from typing import Optional, Sequence, Union

from skybuild.pipeline.types import OperationResult, PipelineError, Step, StepResult

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[str]]

SEPARATOR = "=" * 60


def format_command(command: Command) -> str:
    if isinstance(command, str):
        return command
    return shlex.join(command)


def run_step(
    name: str,
    command: Command,
    cwd: Path,
    timeout: Optional[float] = None,
    env: Optional[dict] = None,
) -> StepResult:
    """Execute a single pipeline step as a subprocess.

    String commands run through the shell, argv lists run directly.
    Raises no exceptions; always returns a StepResult.
    """
    display = format_command(command)
    logger.info("Running step '%s': %s (cwd=%s)", name, display, cwd)
    start = time.monotonic()

    try:
        result = subprocess.run(
            command if isinstance(command, str) else list(command),
            shell=isinstance(command, str),
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
        step_result = StepResult(
            name=name,
            command=display,
            exit_code=result.returncode,
            duration_seconds=time.monotonic() - start,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    except subprocess.TimeoutExpired:
        step_result = StepResult(
            name=name,
            command=display,
            exit_code=-1,
            duration_seconds=time.monotonic() - start,
            stderr=f"Timed out after {timeout} seconds",
        )

    except OSError as exc:
        step_result = StepResult(
            name=name,
            command=display,
            exit_code=-2,
            duration_seconds=time.monotonic() - start,
            stderr=str(exc),
        )

    status = "OK" if step_result.is_success else "FAILED"
    logger.info(
        "Step '%s' %s (exit=%d, %.1fs)",
        name, status, step_result.exit_code, step_result.duration_seconds,
    )
    if step_result.is_success and step_result.stdout:
        logger.debug("Step '%s' stdout:\n%s", name, step_result.stdout)
    if not step_result.is_success:
        for stream, text in (("stderr", step_result.stderr), ("stdout", step_result.stdout)):
            if not text:
                continue
            tail = _truncate_output(text)
            logger.warning("Step '%s' %s (tail):\n%s", name, stream, tail)
            if tail != text.rstrip("\n"):
                logger.debug("Step '%s' %s (full):\n%s", name, stream, text)

    return step_result


def _truncate_output(text: str, max_lines: int = 60, max_chars: int = 4000) -> str:
    """Return a concise tail of command output for logs."""
    if not text:
        return ""
    lines = text.splitlines()
    tail = lines[-max_lines:]
    joined = "\n".join(tail)
    if len(joined) > max_chars:
        joined = joined[-max_chars:]
    return joined


def run_pipeline(operation: str, steps: Sequence[Step]) -> OperationResult:
    """Run `steps` in order, stopping at the first fatal failure.

    Steps after a failing one never execute. The failing step's name,
    error kind and message are recorded on the result.
    """
    result = OperationResult(operation=operation)
    logger.info("Starting operation '%s' (%d steps)", operation, len(steps))

    for step in steps:
        logger.info("%s", SEPARATOR)
        logger.info("[%s] %s", operation, step.name)
        try:
            result.steps.extend(step.action())
        except PipelineError as exc:
            result.steps.extend(exc.steps)
            result.is_success = False
            result.error = str(exc)
            result.error_kind = exc.kind
            result.failed_step = exc.step_result.name
            logger.error(
                "Operation '%s' aborted at step '%s': %s", operation, step.name, exc
            )
            return result

    logger.info("%s", SEPARATOR)
    result.is_success = True
    logger.info("Operation '%s' completed successfully", operation)
    return result
