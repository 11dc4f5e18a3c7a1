"""Toolchain invocation for the debug, release and release-bundle profiles.

Commands are composed from the BuildVariant so the same profile yields
the same argv for the same variant. Binaries land in
`target/[<triple>/]<profile dir>/`.
"""

import logging
import os
from enum import StrEnum
from pathlib import Path
from typing import Optional, Sequence

from skybuild.pipeline.executor import run_step
from skybuild.pipeline.types import BuildFailure, StepResult
from skybuild.variant.types import BuildVariant
from skybuild.workspace.members import BUNDLE_MEMBERS, WorkspaceMember

logger = logging.getLogger(__name__)

TARGET_DIR = "target"


class Profile(StrEnum):
    DEBUG = "debug"
    RELEASE = "release"
    RELEASE_BUNDLE = "release-bundle"

    @property
    def output_dir_name(self) -> str:
        return "debug" if self is Profile.DEBUG else "release"

    @property
    def is_release(self) -> bool:
        return self is not Profile.DEBUG


_BANNERS = {
    Profile.DEBUG: "Building all binaries (debug) ...",
    Profile.RELEASE: "Building all binaries (release) ...",
    Profile.RELEASE_BUNDLE: "Building binaries for packaging (release) ...",
}


def toolchain_env(variant: BuildVariant, extra: Optional[dict] = None) -> Optional[dict]:
    """Return the child environment for toolchain commands.

    None means "inherit unchanged". Windows variants force static CRT
    linking through RUSTFLAGS.
    """
    if not variant.rustflags and not extra:
        return None
    env = dict(os.environ)
    if variant.rustflags:
        env["RUSTFLAGS"] = variant.rustflags
    if extra:
        env.update(extra)
    return env


def output_dir(workspace_root: Path, variant: BuildVariant, profile: Profile) -> Path:
    path = Path(workspace_root) / TARGET_DIR
    if variant.target_triple:
        path = path / variant.target_triple
    return path / profile.output_dir_name


def build_command(
    variant: BuildVariant,
    profile: Profile,
    members: Optional[Sequence[WorkspaceMember]] = None,
    cargo: str = "cargo",
) -> list[str]:
    """Compose the toolchain argv for one profile/member-set combination.

    The release-bundle profile always builds exactly BUNDLE_MEMBERS;
    other profiles build the whole workspace unless `members` is given.
    """
    command = [cargo, "build", *variant.target_args]
    if profile.is_release:
        command.append("--release")

    if profile is Profile.RELEASE_BUNDLE:
        members = BUNDLE_MEMBERS
    for member in members or ():
        command.extend(["-p", member.name])
    return command


def suite_command(variant: BuildVariant, cargo: str = "cargo") -> list[str]:
    return [cargo, "test", *variant.target_args]


def clean_command(cargo: str = "cargo") -> list[str]:
    return [cargo, "clean"]


def build(
    variant: BuildVariant,
    profile: Profile,
    workspace_root: Path,
    members: Optional[Sequence[WorkspaceMember]] = None,
    cargo: str = "cargo",
    timeout: Optional[float] = None,
) -> StepResult:
    """Run one toolchain build. Raises BuildFailure on a non-zero exit."""
    if members:
        logger.info("Building %s (%s) ...", ", ".join(m.name for m in members), profile.value)
    else:
        logger.info(_BANNERS[profile])

    step = run_step(
        f"build:{profile.value}",
        build_command(variant, profile, members, cargo=cargo),
        workspace_root,
        timeout=timeout,
        env=toolchain_env(variant),
    )
    if not step.is_success:
        raise BuildFailure(step)

    logger.info(
        "Binaries available under %s", output_dir(workspace_root, variant, profile)
    )
    return step
