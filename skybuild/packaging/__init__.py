"""Packaging module for release archives and OS-native packages.

Public API:
    create_bundle(variant, spec, workspace_root) -> (steps, archive path)
    make_deb_package(variant, workspace_root) -> steps
"""

from skybuild.packaging.bundler import build_manifest, create_bundle
from skybuild.packaging.deb import make_deb_package
from skybuild.packaging.types import ArtifactSpec, BundleManifest

__all__ = [
    "ArtifactSpec",
    "BundleManifest",
    "build_manifest",
    "create_bundle",
    "make_deb_package",
]
