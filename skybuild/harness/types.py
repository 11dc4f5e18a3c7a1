"""Test harness lifecycle types.

The harness is an explicit state machine. Every transition is validated
against VALID_TRANSITIONS so an out-of-order lifecycle fails loudly.
"""

import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from skybuild.variant.types import TerminationStrategy


class HarnessState(StrEnum):
    IDLE = "idle"
    BUILDING = "building"
    CREDENTIALS_GENERATED = "credentials_generated"
    SERVICE_STARTING = "service_starting"
    WAITING_GRACE_PERIOD = "waiting_grace_period"
    TESTS_RUNNING = "tests_running"
    TEARING_DOWN = "tearing_down"
    DONE = "done"
    # Build or credential failure: no process ever existed, no teardown.
    FAILED = "failed"


VALID_TRANSITIONS: dict[HarnessState, set[HarnessState]] = {
    HarnessState.IDLE: {HarnessState.BUILDING},
    HarnessState.BUILDING: {HarnessState.CREDENTIALS_GENERATED, HarnessState.FAILED},
    HarnessState.CREDENTIALS_GENERATED: {HarnessState.SERVICE_STARTING, HarnessState.FAILED},
    HarnessState.SERVICE_STARTING: {
        HarnessState.WAITING_GRACE_PERIOD,
        HarnessState.TEARING_DOWN,
    },
    HarnessState.WAITING_GRACE_PERIOD: {
        HarnessState.TESTS_RUNNING,
        HarnessState.TEARING_DOWN,
    },
    HarnessState.TESTS_RUNNING: {HarnessState.TEARING_DOWN},
    HarnessState.TEARING_DOWN: {HarnessState.DONE},
    HarnessState.DONE: set(),
    HarnessState.FAILED: set(),
}


def validate_transition(current: str, target: str) -> None:
    """Enforce the harness state machine.

    Raises ValueError if the transition is not allowed.
    """
    allowed = VALID_TRANSITIONS.get(current, set())
    if target not in allowed:
        names = sorted(str(s) for s in allowed)
        raise ValueError(
            f"Invalid harness state transition: {current} -> {target}. "
            f"Allowed transitions from '{current}': {names or 'none (terminal state)'}"
        )


@dataclass
class ServiceProcessHandle:
    """A launched background service. Owned by the harness until teardown."""

    pid: int
    binary_name: str
    termination: TerminationStrategy
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    process: Optional[subprocess.Popen] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "pid": self.pid,
            "binary_name": self.binary_name,
            "termination": self.termination.value,
            "started_at": self.started_at.isoformat(),
        }
