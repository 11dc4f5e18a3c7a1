"""Integration test harness with guaranteed service teardown."""

from skybuild.harness.harness import TestHarness
from skybuild.harness.types import (
    VALID_TRANSITIONS,
    HarnessState,
    ServiceProcessHandle,
    validate_transition,
)

__all__ = [
    "TestHarness",
    "VALID_TRANSITIONS",
    "HarnessState",
    "ServiceProcessHandle",
    "validate_transition",
]
