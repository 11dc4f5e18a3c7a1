"""Types for operation pipelines.

StepResult captures one external command. OperationResult aggregates the
steps of one top-level operation (build, bundle, test, ...).
PipelineError and its subclasses name the kind of fatal failure.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass
class StepResult:
    """Result of a single pipeline step.

    A step is successful if exit_code == 0. Negative exit codes are
    reserved: -1 for a timeout, -2 for a process that never spawned.
    """

    name: str
    command: str
    exit_code: int
    duration_seconds: float
    stdout: str = ""
    stderr: str = ""

    @property
    def is_success(self) -> bool:
        return self.exit_code == 0

    @property
    def spawned(self) -> bool:
        return self.exit_code != -2

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "command": self.command,
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 3),
            "stdout_lines": self.stdout.count("\n") + 1 if self.stdout else 0,
            "stderr_lines": self.stderr.count("\n") + 1 if self.stderr else 0,
            "is_success": self.is_success,
        }
        if not self.is_success:
            # Failed steps keep their complete output for the report.
            data["stdout"] = self.stdout
            data["stderr"] = self.stderr
        return data


@dataclass
class OperationResult:
    """Complete result of one top-level operation.

    An operation is successful only if every executed step passed.
    """

    operation: str
    steps: list[StepResult] = field(default_factory=list)
    is_success: bool = False
    error: Optional[str] = None
    error_kind: Optional[str] = None
    failed_step: Optional[str] = None
    artifacts: list[str] = field(default_factory=list)
    harness_states: list[str] = field(default_factory=list)
    variant: dict = field(default_factory=dict)
    service: Optional[dict] = None

    @property
    def exit_code(self) -> int:
        """Process exit code: 0, the failing step's code, or 1."""
        if self.is_success:
            return 0
        for step in reversed(self.steps):
            if step.name == self.failed_step and step.exit_code > 0:
                return step.exit_code
        return 1

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "steps": [s.to_dict() for s in self.steps],
            "is_success": self.is_success,
            "exit_code": self.exit_code,
            "error": self.error,
            "error_kind": self.error_kind,
            "failed_step": self.failed_step,
            "artifacts": self.artifacts,
            "harness_states": self.harness_states,
            "variant": self.variant,
            "service": self.service,
            "total_duration_seconds": round(
                sum(s.duration_seconds for s in self.steps), 3
            ),
        }


@dataclass
class Step:
    """One named unit of an operation pipeline.

    `action` runs the step and returns its StepResults. It raises a
    PipelineError subclass when the step fails fatally.
    """

    name: str
    action: Callable[[], list[StepResult]]


class PipelineError(Exception):
    """Raised when a pipeline step fails fatally.

    Carries the failing step result for detailed error reporting, and
    every step result the failing action produced (failing one last).
    """

    kind = "pipeline_failure"

    def __init__(
        self,
        step_result: StepResult,
        message: str = "",
        steps: Optional[list[StepResult]] = None,
    ):
        self.step_result = step_result
        self.steps = steps if steps is not None else [step_result]
        super().__init__(message or describe_failure(step_result))


class PrerequisiteInstallFailure(PipelineError):
    kind = "prerequisite_install_failure"


class BuildFailure(PipelineError):
    kind = "build_failure"


class CredentialGenerationFailure(PipelineError):
    kind = "credential_generation_failure"


class ServiceStartFailure(PipelineError):
    kind = "service_start_failure"


class TestSuiteFailure(PipelineError):
    kind = "test_suite_failure"
    __test__ = False


class BundlingFailure(PipelineError):
    kind = "bundling_failure"


class PackagingFailure(PipelineError):
    kind = "packaging_failure"


class CleanFailure(PipelineError):
    kind = "clean_failure"


class TeardownFailure(PipelineError):
    """Logged during harness teardown; never propagated."""

    kind = "teardown_failure"


def describe_failure(step_result: StepResult) -> str:
    """Human-readable reason for a failed step, naming the step."""
    if step_result.exit_code == -1:
        return f"Step '{step_result.name}' timed out: {step_result.stderr}"
    if not step_result.spawned:
        return (
            f"Step '{step_result.name}' failed to spawn `{step_result.command}`: "
            f"{step_result.stderr}"
        )
    return (
        f"Step '{step_result.name}' failed with exit code {step_result.exit_code} "
        f"(`{step_result.command}`)"
    )
