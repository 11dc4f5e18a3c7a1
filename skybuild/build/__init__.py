"""Toolchain invocation."""

from skybuild.build.builder import (
    Profile,
    build,
    build_command,
    clean_command,
    output_dir,
    suite_command,
    toolchain_env,
)

__all__ = [
    "Profile",
    "build",
    "build_command",
    "clean_command",
    "output_dir",
    "suite_command",
    "toolchain_env",
]
