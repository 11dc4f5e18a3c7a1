"""Platform and build-variant resolution."""

from skybuild.variant.resolver import resolve_variant
from skybuild.variant.types import (
    ArchiveTool,
    BuildVariant,
    Platform,
    PlatformPolicy,
    TerminationStrategy,
)

__all__ = [
    "resolve_variant",
    "ArchiveTool",
    "BuildVariant",
    "Platform",
    "PlatformPolicy",
    "TerminationStrategy",
]
