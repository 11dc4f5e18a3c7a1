"""Top-level operations and the pipelines they run.

    build          prerequisites -> build(debug, all members)
    release        prerequisites -> build(release, all members)
    release-bundle prerequisites -> build(release, bundle members)
    bundle         release-bundle -> bundler
    test           prerequisites -> test harness
    clean          cargo clean
    deb            release-bundle -> cargo-deb

The variant and artifact spec are resolved once per Orchestrator and
handed to every component explicitly.
"""

import logging
import time
from typing import Callable, Optional

from skybuild.build.builder import Profile, build, clean_command, toolchain_env
from skybuild.core.config import OrchestratorConfig
from skybuild.harness.harness import TestHarness
from skybuild.packaging.bundler import create_bundle
from skybuild.packaging.deb import make_deb_package
from skybuild.packaging.types import ArtifactSpec
from skybuild.pipeline.executor import run_pipeline, run_step
from skybuild.pipeline.types import CleanFailure, OperationResult, Step, StepResult
from skybuild.prereq.installer import install_prerequisites
from skybuild.variant.resolver import resolve_variant

logger = logging.getLogger(__name__)

OPERATIONS = ("build", "release", "release-bundle", "bundle", "test", "clean", "deb")


class Orchestrator:
    def __init__(
        self,
        config: OrchestratorConfig,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.variant = resolve_variant(config.platform, config.target)
        self.artifact_spec = ArtifactSpec(
            version=config.version, artifact_name=config.artifact
        )
        self._sleep = sleep
        self._artifacts: list[str] = []
        self._harness: Optional[TestHarness] = None

    def run(self, operation: str) -> OperationResult:
        if operation not in OPERATIONS:
            raise ValueError(
                f"Unknown operation {operation!r}; expected one of {', '.join(OPERATIONS)}"
            )
        logger.info(
            "Resolved build variant: platform=%s target=%s",
            self.variant.platform.value,
            self.variant.target_triple or "<host>",
        )
        self._artifacts = []
        self._harness = None

        result = run_pipeline(operation, self.steps_for(operation))
        result.artifacts = list(self._artifacts)
        result.variant = self.variant.to_dict()
        if self._harness is not None:
            result.harness_states = [s.value for s in self._harness.history]
            result.service = self._harness.service
        return result

    def steps_for(self, operation: str) -> list[Step]:
        if operation == "build":
            return [self._prerequisites(), self._build(Profile.DEBUG)]
        if operation == "release":
            return [self._prerequisites(), self._build(Profile.RELEASE)]
        if operation == "release-bundle":
            return [self._prerequisites(), self._build(Profile.RELEASE_BUNDLE)]
        if operation == "bundle":
            return self.steps_for("release-bundle") + [Step("bundle", self._bundle)]
        if operation == "test":
            return [self._prerequisites(), Step("test", self._test)]
        if operation == "clean":
            return [Step("clean", self._clean)]
        if operation == "deb":
            return self.steps_for("release-bundle") + [Step("deb", self._deb)]
        raise ValueError(f"Unknown operation {operation!r}")

    def _prerequisites(self) -> Step:
        return Step(
            "prerequisites",
            lambda: install_prerequisites(
                self.variant,
                self.config.workspace_root,
                timeout=self.config.step_timeout_seconds,
            ),
        )

    def _build(self, profile: Profile) -> Step:
        return Step(
            f"build:{profile.value}",
            lambda: [
                build(
                    self.variant,
                    profile,
                    self.config.workspace_root,
                    cargo=self.config.cargo,
                    timeout=self.config.step_timeout_seconds,
                )
            ],
        )

    def _bundle(self) -> list[StepResult]:
        steps, archive = create_bundle(
            self.variant,
            self.artifact_spec,
            self.config.workspace_root,
            timeout=self.config.step_timeout_seconds,
        )
        self._artifacts.append(str(archive))
        return steps

    def _test(self) -> list[StepResult]:
        self._harness = TestHarness(self.config, self.variant, sleep=self._sleep)
        return self._harness.run()

    def _clean(self) -> list[StepResult]:
        logger.info("Cleaning up target folder ...")
        step = run_step(
            "clean",
            clean_command(self.config.cargo),
            self.config.workspace_root,
            timeout=self.config.step_timeout_seconds,
            env=toolchain_env(self.variant),
        )
        if not step.is_success:
            raise CleanFailure(step)
        return [step]

    def _deb(self) -> list[StepResult]:
        return make_deb_package(
            self.variant,
            self.config.workspace_root,
            manifest_path=self.config.deb_manifest,
            cargo=self.config.cargo,
            timeout=self.config.step_timeout_seconds,
        )
