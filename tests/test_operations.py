"""End-to-end operation tests with the toolchain mocked out.

Every subprocess goes through skybuild.pipeline.executor.subprocess.run,
so patching it here sees every command an operation would execute.
"""

from dataclasses import replace
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from skybuild.operations import OPERATIONS, Orchestrator
from skybuild.variant.types import Platform

RUN = "skybuild.pipeline.executor.subprocess.run"


def _completed(returncode=0):
    return MagicMock(returncode=returncode, stdout="", stderr="")


def _commands(mock_run):
    return [c.args[0] for c in mock_run.call_args_list]


class TestStepsFor:
    @pytest.mark.parametrize("operation", OPERATIONS)
    def test_every_operation_has_a_pipeline(self, config, operation):
        assert Orchestrator(config).steps_for(operation)

    def test_pipeline_shapes(self, config):
        orchestrator = Orchestrator(config)
        names = {op: [s.name for s in orchestrator.steps_for(op)] for op in OPERATIONS}

        assert names["build"] == ["prerequisites", "build:debug"]
        assert names["release"] == ["prerequisites", "build:release"]
        assert names["release-bundle"] == ["prerequisites", "build:release-bundle"]
        assert names["bundle"] == ["prerequisites", "build:release-bundle", "bundle"]
        assert names["test"] == ["prerequisites", "test"]
        assert names["clean"] == ["clean"]
        assert names["deb"] == ["prerequisites", "build:release-bundle", "deb"]

    def test_unknown_operation(self, config):
        with pytest.raises(ValueError, match="Unknown operation"):
            Orchestrator(config).run("install")


class TestBuildOperations:
    @patch(RUN)
    def test_build_runs_debug_build(self, mock_run, config):
        mock_run.return_value = _completed()

        result = Orchestrator(config).run("build")

        assert result.is_success
        assert result.exit_code == 0
        assert _commands(mock_run) == [["cargo", "build"]]

    @patch(RUN)
    def test_failing_prerequisite_aborts_before_toolchain(self, mock_run, config):
        config = replace(config, target="x86_64-unknown-linux-musl")
        mock_run.return_value = _completed(returncode=100)

        result = Orchestrator(config).run("build")

        assert result.is_success is False
        assert result.error_kind == "prerequisite_install_failure"
        assert result.exit_code == 100
        assert "sudo apt-get update" in result.error
        assert all(isinstance(c, str) for c in _commands(mock_run))
        assert mock_run.call_count == 1

    @patch(RUN)
    def test_build_failure_propagates_exit_code(self, mock_run, config):
        mock_run.return_value = _completed(returncode=101)

        result = Orchestrator(config).run("release")

        assert result.failed_step == "build:release"
        assert result.exit_code == 101

    @patch(RUN)
    def test_clean(self, mock_run, config):
        mock_run.return_value = _completed()

        result = Orchestrator(config).run("clean")

        assert result.is_success
        assert _commands(mock_run) == [["cargo", "clean"]]

    @patch(RUN)
    def test_windows_build_sets_rustflags(self, mock_run, config):
        config = replace(config, platform=Platform.WINDOWS)
        mock_run.return_value = _completed()

        Orchestrator(config).run("build")

        env = mock_run.call_args.kwargs["env"]
        assert env["RUSTFLAGS"] == "-Ctarget-feature=+crt-static"


class TestBundleOperation:
    def _fake_toolchain(self, root: Path):
        def run(command, **kwargs):
            if command[:2] == ["cargo", "build"]:
                release = root / "target" / "release"
                release.mkdir(parents=True, exist_ok=True)
                for name in ("skysh", "skyd", "sky-bench", "sky-migrate"):
                    (release / name).write_bytes(b"bin")
            elif command[0] == "zip":
                Path(command[2]).write_bytes(b"PK")
            return _completed()

        return run

    @patch(RUN)
    def test_bundle_scenario(self, mock_run, config, tmp_path):
        config = replace(config, artifact="linux64", version="2.0.1")
        mock_run.side_effect = self._fake_toolchain(tmp_path)

        result = Orchestrator(config).run("bundle")

        assert result.is_success, result.error
        archive = tmp_path / "sky-bundle-2.0.1-linux64.zip"
        assert result.artifacts == [str(archive)]
        assert archive.exists()
        assert result.to_dict()["variant"]["archive_tool"] == "zip"
        assert result.service is None
        zip_command = _commands(mock_run)[-1]
        assert [Path(p).name for p in zip_command[3:]] == [
            "skysh", "skyd", "sky-bench", "sky-migrate",
        ]

    @patch(RUN)
    def test_stale_archive_directory_fails_the_bundle_step(self, mock_run, config, tmp_path):
        mock_run.side_effect = self._fake_toolchain(tmp_path)
        (tmp_path / "ourbundle.zip").mkdir()

        result = Orchestrator(config).run("bundle")

        assert result.is_success is False
        assert result.error_kind == "bundling_failure"
        assert result.failed_step == "bundle:stale-archive"
        assert result.exit_code == 1

    @patch(RUN)
    def test_bundle_stops_when_release_build_fails(self, mock_run, config):
        mock_run.return_value = _completed(returncode=101)

        result = Orchestrator(config).run("bundle")

        assert result.failed_step == "build:release-bundle"
        assert mock_run.call_count == 1

    @patch(RUN)
    def test_deb_runs_after_release_bundle(self, mock_run, config):
        mock_run.return_value = _completed()

        result = Orchestrator(config).run("deb")

        assert result.is_success
        commands = _commands(mock_run)
        assert commands[0][:3] == ["cargo", "build", "--release"]
        assert commands[1] == ["cargo", "install", "cargo-deb"]
        assert commands[2][:2] == ["cargo", "deb"]


class TestTestOperation:
    @patch("skybuild.harness.harness.launch_service")
    @patch("skybuild.harness.harness.generate_credentials")
    @patch(RUN)
    def test_service_start_failure_reports_nonzero_without_teardown_error(
        self, mock_run, mock_credentials, mock_launch, config
    ):
        from skybuild.pipeline.types import ServiceStartFailure, StepResult

        mock_run.return_value = _completed()
        mock_credentials.return_value = StepResult(
            name="credentials", command="bash ci/ssl.sh", exit_code=0, duration_seconds=0.1
        )
        mock_launch.side_effect = ServiceStartFailure(
            StepResult(name="service:start", command="skyd", exit_code=-2, duration_seconds=0)
        )

        with patch("skybuild.harness.harness.terminate_service") as mock_terminate:
            result = Orchestrator(config).run("test")

        mock_terminate.assert_not_called()
        assert result.is_success is False
        assert result.exit_code == 1
        assert result.error_kind == "service_start_failure"
        assert result.harness_states[-2:] == ["tearing_down", "done"]
        assert result.service is None
        assert result.to_dict()["variant"]["platform"] == "posix"
