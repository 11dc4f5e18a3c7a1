"""Types for the packaging module."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ARCHIVE_PREFIX = "sky-bundle"
DEFAULT_ARCHIVE_NAME = "bundle.zip"


@dataclass(frozen=True)
class ArtifactSpec:
    """Naming inputs for the distributable archive.

    The version only takes part in the name when an artifact name is
    also given; a version on its own still yields `bundle.zip`.
    """

    version: Optional[str] = None
    artifact_name: Optional[str] = None

    def archive_name(self) -> str:
        if not self.artifact_name:
            return DEFAULT_ARCHIVE_NAME
        if not self.version:
            return f"{ARCHIVE_PREFIX}-{self.artifact_name}.zip"
        return f"{ARCHIVE_PREFIX}-{self.version}-{self.artifact_name}.zip"


@dataclass(frozen=True)
class BundleManifest:
    """Ordered binary paths that make up the release bundle."""

    paths: tuple[Path, ...]

    def missing(self) -> list[Path]:
        return [p for p in self.paths if not p.is_file()]

    def __len__(self) -> int:
        return len(self.paths)
