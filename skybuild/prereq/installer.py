"""Prerequisite installation ahead of any build step.

Runs the variant's install commands in order. The first failing command
aborts the operation before the toolchain is ever invoked.
"""

import logging
from pathlib import Path
from typing import Optional

from skybuild.pipeline.executor import run_step
from skybuild.pipeline.types import PrerequisiteInstallFailure, StepResult
from skybuild.variant.types import BuildVariant

logger = logging.getLogger(__name__)

NO_ADDITIONAL_SOFTWARE = "No additional software required for this target"


def install_prerequisites(
    variant: BuildVariant,
    cwd: Path,
    timeout: Optional[float] = None,
) -> list[StepResult]:
    """Run every prerequisite command for `variant`.

    Raises PrerequisiteInstallFailure naming the failing command.
    """
    logger.info("Installing additional dependencies ...")
    if not variant.prerequisite_commands:
        logger.info(NO_ADDITIONAL_SOFTWARE)
        return []

    results: list[StepResult] = []
    for index, command in enumerate(variant.prerequisite_commands, start=1):
        step = run_step(f"prerequisites[{index}]", command, cwd, timeout=timeout)
        results.append(step)
        if not step.is_success:
            raise PrerequisiteInstallFailure(
                step,
                f"Prerequisite install command failed: `{command}` "
                f"(exit {step.exit_code})",
                steps=results,
            )
    return results
