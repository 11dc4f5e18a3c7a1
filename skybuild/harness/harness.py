"""Integration test harness.

Lifecycle:
    idle -> building -> credentials_generated -> service_starting
         -> waiting_grace_period -> tests_running -> tearing_down -> done

Build and credential failures end in `failed` before any process exists.
From service_starting onward teardown always runs exactly once: the
service is stopped if it was launched, and the credential and pid files
are removed. The test suite's outcome is the harness's outcome; teardown
problems are logged and never replace it.

Readiness is a blind, fixed sleep. No probing is performed.
"""

import logging
import time
from typing import Callable, Optional

from skybuild.build.builder import Profile, build, output_dir, suite_command, toolchain_env
from skybuild.core.config import OrchestratorConfig
from skybuild.harness.credentials import generate_credentials, remove_ephemeral_files
from skybuild.harness.service import launch_service, terminate_service
from skybuild.harness.types import HarnessState, ServiceProcessHandle, validate_transition
from skybuild.pipeline.executor import run_step
from skybuild.pipeline.types import (
    PipelineError,
    StepResult,
    TeardownFailure,
    TestSuiteFailure,
)
from skybuild.variant.types import BuildVariant
from skybuild.workspace.members import SERVICE

logger = logging.getLogger(__name__)


class TestHarness:
    __test__ = False

    def __init__(
        self,
        config: OrchestratorConfig,
        variant: BuildVariant,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.variant = variant
        self._sleep = sleep
        self.state = HarnessState.IDLE
        self.history: list[HarnessState] = [HarnessState.IDLE]
        self.steps: list[StepResult] = []
        self.handle: Optional[ServiceProcessHandle] = None
        self.service: Optional[dict] = None
        self.termination_attempts = 0
        self.cleanup_passes = 0
        self.teardown_errors: list[str] = []

    def _transition(self, target: HarnessState) -> None:
        validate_transition(self.state, target)
        logger.debug("Harness %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def run(self) -> list[StepResult]:
        """Run the full lifecycle. Raises a PipelineError on failure."""
        root = self.config.workspace_root
        timeout = self.config.step_timeout_seconds

        try:
            self._transition(HarnessState.BUILDING)
            logger.info("Building and starting server in debug mode ...")
            self.steps.append(
                build(
                    self.variant,
                    Profile.DEBUG,
                    root,
                    members=[SERVICE],
                    cargo=self.config.cargo,
                    timeout=timeout,
                )
            )
            self._transition(HarnessState.CREDENTIALS_GENERATED)
            self.steps.append(
                generate_credentials(root, self.config.ssl_script, timeout=timeout)
            )
        except PipelineError as exc:
            self._transition(HarnessState.FAILED)
            exc.steps = self.steps + exc.steps
            raise

        self._transition(HarnessState.SERVICE_STARTING)
        try:
            try:
                suite = self._serve_and_test()
            finally:
                self._teardown()
        except PipelineError as exc:
            exc.steps = list(self.steps)
            raise

        if not suite.is_success:
            raise TestSuiteFailure(suite, steps=list(self.steps))
        return list(self.steps)

    def _serve_and_test(self) -> StepResult:
        root = self.config.workspace_root
        binary = output_dir(root, self.variant, Profile.DEBUG) / self.variant.binary_name(
            SERVICE.binary_base_name
        )
        try:
            start_step, self.handle = launch_service(
                binary, root, self.variant.termination, env=toolchain_env(self.variant)
            )
        except PipelineError as exc:
            self.steps.append(exc.step_result)
            raise
        self.steps.append(start_step)
        self.service = self.handle.to_dict()

        self._transition(HarnessState.WAITING_GRACE_PERIOD)
        grace = self.config.grace_period_seconds
        logger.info("Sleeping for %s seconds to let the server start up ...", grace)
        self._sleep(grace)
        logger.info("Finished sleeping")

        self._transition(HarnessState.TESTS_RUNNING)
        logger.info("Running all tests ...")
        suite = run_step(
            "test:suite",
            suite_command(self.variant, cargo=self.config.cargo),
            root,
            timeout=self.config.step_timeout_seconds,
            env=toolchain_env(self.variant, {"ROOT_DIR": str(root)}),
        )
        self.steps.append(suite)
        return suite

    def _teardown(self) -> None:
        """Stop the service and remove ephemeral files. Never raises."""
        self._transition(HarnessState.TEARING_DOWN)
        root = self.config.workspace_root

        if self.handle is not None:
            logger.info("Waiting for server to shut down ...")
            self.termination_attempts += 1
            step = terminate_service(self.handle, root)
            self.steps.append(step)
            if not step.is_success:
                self._record_teardown_error(str(TeardownFailure(step)))
            self.handle = None
        else:
            logger.info("No service process was started; nothing to stop")

        logger.info("Removing temporary files ...")
        self.cleanup_passes += 1
        for error in remove_ephemeral_files(root):
            self._record_teardown_error(f"Failed to remove {error}")

        self._transition(HarnessState.DONE)

    def _record_teardown_error(self, message: str) -> None:
        self.teardown_errors.append(message)
        logger.warning("Teardown: %s", message)
