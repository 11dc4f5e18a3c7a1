import pytest

from skybuild.core.config import OrchestratorConfig
from skybuild.variant.resolver import resolve_variant
from skybuild.variant.types import Platform


@pytest.fixture
def posix_variant():
    return resolve_variant(Platform.POSIX, None)


@pytest.fixture
def windows_variant():
    return resolve_variant(Platform.WINDOWS, None)


@pytest.fixture
def config(tmp_path):
    return OrchestratorConfig(
        platform=Platform.POSIX,
        workspace_root=tmp_path,
        grace_period_seconds=0,
    )
