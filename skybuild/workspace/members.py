"""Workspace members known to the orchestrator."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkspaceMember:
    """A cargo package in the workspace and the binary it produces."""

    name: str
    binary_base_name: str


SHELL = WorkspaceMember(name="skysh", binary_base_name="skysh")
SERVICE = WorkspaceMember(name="skyd", binary_base_name="skyd")
BENCHMARK = WorkspaceMember(name="sky-bench", binary_base_name="sky-bench")
MIGRATE = WorkspaceMember(name="sky-migrate", binary_base_name="sky-migrate")

# Archive order of the release bundle.
BUNDLE_MEMBERS: tuple[WorkspaceMember, ...] = (SHELL, SERVICE, BENCHMARK, MIGRATE)

