"""Workspace member definitions."""

from skybuild.workspace.members import (
    BENCHMARK,
    BUNDLE_MEMBERS,
    MIGRATE,
    SERVICE,
    SHELL,
    WorkspaceMember,
)

__all__ = [
    "BENCHMARK",
    "BUNDLE_MEMBERS",
    "MIGRATE",
    "SERVICE",
    "SHELL",
    "WorkspaceMember",
]
