"""Platform policy and build variant types.

Platform is chosen once at startup and carries every platform-specific
policy as data. BuildVariant is the immutable result of resolving a
platform and an optional target triple.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

WINDOWS_OS_MARKER = "Windows_NT"


class ArchiveTool(StrEnum):
    ZIP = "zip"
    SEVEN_ZIP = "7z"


class TerminationStrategy(StrEnum):
    """How the test harness stops the background service."""

    SIGNAL = "signal"              # SIGTERM to the service's process group
    KILL_BY_NAME = "kill_by_name"  # taskkill /F /IM <binary>


@dataclass(frozen=True)
class PlatformPolicy:
    binary_extension: str
    archive_tool: ArchiveTool
    termination: TerminationStrategy
    rustflags: Optional[str] = None


class Platform(StrEnum):
    WINDOWS = "windows"
    POSIX = "posix"

    @classmethod
    def from_os_marker(cls, marker: Optional[str]) -> "Platform":
        """Map the host-OS discriminator (the `OS` variable) to a platform."""
        if marker == WINDOWS_OS_MARKER:
            return cls.WINDOWS
        return cls.POSIX

    @property
    def policy(self) -> PlatformPolicy:
        return _POLICIES[self]


_POLICIES: dict[Platform, PlatformPolicy] = {
    Platform.WINDOWS: PlatformPolicy(
        binary_extension=".exe",
        archive_tool=ArchiveTool.SEVEN_ZIP,
        termination=TerminationStrategy.KILL_BY_NAME,
        rustflags="-Ctarget-feature=+crt-static",
    ),
    Platform.POSIX: PlatformPolicy(
        binary_extension="",
        archive_tool=ArchiveTool.ZIP,
        termination=TerminationStrategy.SIGNAL,
    ),
}


@dataclass(frozen=True)
class BuildVariant:
    """Everything downstream components need to know about the build target.

    target_triple is None when no target was requested; the toolchain then
    builds for the host.
    """

    platform: Platform
    target_triple: Optional[str]
    binary_extension: str
    archive_tool: ArchiveTool
    prerequisite_commands: tuple[str, ...] = ()
    rustflags: Optional[str] = None

    @property
    def termination(self) -> TerminationStrategy:
        return self.platform.policy.termination

    @property
    def target_args(self) -> list[str]:
        if self.target_triple is None:
            return []
        return ["--target", self.target_triple]

    def binary_name(self, base_name: str) -> str:
        return f"{base_name}{self.binary_extension}"

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.value,
            "target_triple": self.target_triple,
            "binary_extension": self.binary_extension,
            "archive_tool": self.archive_tool.value,
            "prerequisite_commands": list(self.prerequisite_commands),
            "rustflags": self.rustflags,
        }
