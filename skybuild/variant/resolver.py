"""Target resolution: (platform, requested target) -> BuildVariant.

Pure and deterministic. Unknown triples are accepted as-is and forwarded
to the toolchain, which is the real validator.
"""

from typing import Optional

from skybuild.variant.types import BuildVariant, Platform

# Targets that need extra system packages before the toolchain can link.
TARGET_PREREQUISITES: dict[str, tuple[str, ...]] = {
    "x86_64-unknown-linux-musl": (
        "sudo apt-get update",
        "sudo apt install musl-tools -y",
    ),
    "i686-unknown-linux-gnu": (
        "sudo apt-get update",
        "sudo apt install gcc-multilib -y",
    ),
}


def resolve_variant(platform: Platform, target: Optional[str] = None) -> BuildVariant:
    policy = platform.policy
    triple = target.strip() if target else None
    if not triple:
        triple = None

    return BuildVariant(
        platform=platform,
        target_triple=triple,
        binary_extension=policy.binary_extension,
        archive_tool=policy.archive_tool,
        prerequisite_commands=TARGET_PREREQUISITES.get(triple, ()) if triple else (),
        rustflags=policy.rustflags,
    )
