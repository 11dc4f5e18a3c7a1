"""Release bundler: compresses the release-bundle binaries into one archive.

Two steps:
1. compress every manifest entry into a staging archive with the
   variant's archive tool;
2. rename the staging archive per the ArtifactSpec naming rule.

A failure between the two steps leaves the staging archive on disk.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from skybuild.build.builder import Profile, output_dir
from skybuild.packaging.types import ArtifactSpec, BundleManifest
from skybuild.pipeline.executor import run_step
from skybuild.pipeline.types import BundlingFailure, StepResult
from skybuild.variant.types import ArchiveTool, BuildVariant
from skybuild.workspace.members import BUNDLE_MEMBERS

logger = logging.getLogger(__name__)

STAGING_ARCHIVE = "ourbundle.zip"


def build_manifest(workspace_root: Path, variant: BuildVariant) -> BundleManifest:
    """Resolve the release-bundle binary paths in archive order."""
    release_dir = output_dir(workspace_root, variant, Profile.RELEASE_BUNDLE)
    return BundleManifest(
        paths=tuple(
            release_dir / variant.binary_name(member.binary_base_name)
            for member in BUNDLE_MEMBERS
        )
    )


def archive_command(tool: ArchiveTool, archive: Path, paths: Sequence[Path]) -> list[str]:
    files = [str(p) for p in paths]
    if tool is ArchiveTool.SEVEN_ZIP:
        return ["7z", "a", str(archive), *files]
    # -j: store bare file names, no directory components
    return ["zip", "-j", str(archive), *files]


def create_bundle(
    variant: BuildVariant,
    spec: ArtifactSpec,
    workspace_root: Path,
    timeout: Optional[float] = None,
) -> tuple[list[StepResult], Path]:
    """Compress and rename the release bundle.

    Returns the step results and the final archive path.
    Raises BundlingFailure on a missing binary, a compression error or a
    failed rename.
    """
    workspace_root = Path(workspace_root)
    logger.info("Building and packaging bundle (release) ...")
    manifest = build_manifest(workspace_root, variant)

    missing = manifest.missing()
    if missing:
        step = StepResult(
            name="bundle:manifest",
            command="",
            exit_code=1,
            duration_seconds=0.0,
            stderr="Missing release binaries: " + ", ".join(str(p) for p in missing),
        )
        raise BundlingFailure(step, step.stderr)

    staging = workspace_root / STAGING_ARCHIVE
    if staging.exists():
        logger.info("Removing stale staging archive %s", staging)
        try:
            staging.unlink()
        except OSError as exc:
            step = StepResult(
                name="bundle:stale-archive",
                command=f"rm {staging.name}",
                exit_code=1,
                duration_seconds=0.0,
                stderr=str(exc),
            )
            raise BundlingFailure(
                step, f"Failed to remove stale {staging.name}: {exc}"
            )

    compress = run_step(
        "bundle:compress",
        archive_command(variant.archive_tool, staging, manifest.paths),
        workspace_root,
        timeout=timeout,
    )
    if not compress.is_success:
        raise BundlingFailure(compress)

    final = workspace_root / spec.archive_name()
    try:
        staging.replace(final)
    except OSError as exc:
        step = StepResult(
            name="bundle:rename",
            command=f"mv {staging.name} {final.name}",
            exit_code=1,
            duration_seconds=0.0,
            stderr=str(exc),
        )
        raise BundlingFailure(
            step,
            f"Failed to rename {staging.name} to {final.name}: {exc}",
            steps=[compress, step],
        )

    logger.info("Bundled %d binaries into %s", len(manifest), final)
    return [compress], final
