"""Ephemeral TLS credentials for a single test run."""

import logging
import stat
import time
from pathlib import Path
from typing import Optional

from skybuild.pipeline.executor import run_step
from skybuild.pipeline.types import CredentialGenerationFailure, StepResult

logger = logging.getLogger(__name__)

CERT_FILE = "cert.pem"
KEY_FILE = "key.pem"
# Written by the service while it runs.
PID_FILE = ".sky_pid"

EPHEMERAL_FILES = (PID_FILE, CERT_FILE, KEY_FILE)


def generate_credentials(
    workspace_root: Path,
    script: str = "ci/ssl.sh",
    timeout: Optional[float] = None,
) -> StepResult:
    """Run the certificate script and check that it produced both files.

    Raises CredentialGenerationFailure.
    """
    workspace_root = Path(workspace_root)
    script_path = workspace_root / script
    start = time.monotonic()
    try:
        mode = script_path.stat().st_mode
        script_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        step = StepResult(
            name="credentials",
            command=f"bash {script}",
            exit_code=-2,
            duration_seconds=time.monotonic() - start,
            stderr=str(exc),
        )
        raise CredentialGenerationFailure(step, f"Cannot prepare {script}: {exc}")

    step = run_step("credentials", ["bash", script], workspace_root, timeout=timeout)
    if not step.is_success:
        raise CredentialGenerationFailure(step)

    missing = [name for name in (CERT_FILE, KEY_FILE) if not (workspace_root / name).is_file()]
    if missing:
        raise CredentialGenerationFailure(
            step, f"{script} did not produce {', '.join(missing)}"
        )

    logger.info("Generated %s and %s", CERT_FILE, KEY_FILE)
    return step


def remove_ephemeral_files(workspace_root: Path) -> list[str]:
    """Delete credentials and the pid marker. Returns errors, never raises."""
    errors: list[str] = []
    for name in EPHEMERAL_FILES:
        path = Path(workspace_root) / name
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            errors.append(f"{name}: {exc}")
    return errors
