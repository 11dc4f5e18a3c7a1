"""Debian packaging through the external cargo-deb tool."""

import logging
from pathlib import Path
from typing import Optional

from skybuild.build.builder import toolchain_env
from skybuild.pipeline.executor import run_step
from skybuild.pipeline.types import PackagingFailure, StepResult
from skybuild.variant.types import BuildVariant

logger = logging.getLogger(__name__)


def package_commands(
    variant: BuildVariant,
    manifest_path: str = "server/Cargo.toml",
    cargo: str = "cargo",
) -> list[tuple[str, list[str]]]:
    return [
        ("deb:install-tool", [cargo, "install", "cargo-deb"]),
        (
            "deb:package",
            [
                cargo,
                "deb",
                *variant.target_args,
                f"--manifest-path={manifest_path}",
                "--output",
                ".",
            ],
        ),
    ]


def make_deb_package(
    variant: BuildVariant,
    workspace_root: Path,
    manifest_path: str = "server/Cargo.toml",
    cargo: str = "cargo",
    timeout: Optional[float] = None,
) -> list[StepResult]:
    """Install cargo-deb, then package the pre-built release binaries."""
    logger.info("Making a debian package (release) ...")
    results: list[StepResult] = []
    for name, command in package_commands(variant, manifest_path, cargo):
        step = run_step(
            name,
            command,
            workspace_root,
            timeout=timeout,
            env=toolchain_env(variant),
        )
        results.append(step)
        if not step.is_success:
            raise PackagingFailure(step, steps=results)
    return results
