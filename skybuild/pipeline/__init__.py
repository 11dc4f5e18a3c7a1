"""Step execution and the fail-fast pipeline driver."""

from skybuild.pipeline.executor import run_pipeline, run_step
from skybuild.pipeline.types import (
    BuildFailure,
    BundlingFailure,
    CleanFailure,
    CredentialGenerationFailure,
    OperationResult,
    PackagingFailure,
    PipelineError,
    PrerequisiteInstallFailure,
    ServiceStartFailure,
    Step,
    StepResult,
    TeardownFailure,
    TestSuiteFailure,
)

__all__ = [
    "run_pipeline",
    "run_step",
    "BuildFailure",
    "BundlingFailure",
    "CleanFailure",
    "CredentialGenerationFailure",
    "OperationResult",
    "PackagingFailure",
    "PipelineError",
    "PrerequisiteInstallFailure",
    "ServiceStartFailure",
    "Step",
    "StepResult",
    "TeardownFailure",
    "TestSuiteFailure",
]
