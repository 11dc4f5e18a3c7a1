from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skybuild.variant.types import Platform


class Settings(BaseSettings):
    """Orchestrator settings loaded from environment variables.

    The naming and target inputs are read from their bare, conventional
    names (TARGET, ARTIFACT, VERSION, OS) so existing CI jobs keep working.
    Everything else is a SKYBUILD_-prefixed tunable.

    An empty variable counts as unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKYBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Target triple forwarded to the toolchain, e.g. x86_64-unknown-linux-musl
    target: Optional[str] = Field(default=None, validation_alias="TARGET")

    # Archive naming inputs
    artifact: Optional[str] = Field(default=None, validation_alias="ARTIFACT")
    version: Optional[str] = Field(default=None, validation_alias="VERSION")

    # Host-OS discriminator; "Windows_NT" selects the Windows platform.
    host_os: Optional[str] = Field(default=None, validation_alias="OS")

    @field_validator("target", "artifact", "version", "host_os", mode="before")
    @classmethod
    def empty_as_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    workspace_root: Path = Path(".")
    cargo: str = "cargo"

    # Blind wait between launching the service and running the test suite.
    grace_period_seconds: float = 10.0

    # Per-step wall-clock limit; unset means no limit.
    step_timeout_seconds: Optional[float] = None

    ssl_script: str = "ci/ssl.sh"
    deb_manifest: str = "server/Cargo.toml"

    # Console logs when true, JSON logs otherwise.
    debug: bool = True


def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class OrchestratorConfig:
    """Configuration collected once at program entry.

    Threaded explicitly through every operation; components never read
    the environment themselves.
    """

    platform: Platform
    workspace_root: Path
    target: Optional[str] = None
    artifact: Optional[str] = None
    version: Optional[str] = None
    cargo: str = "cargo"
    grace_period_seconds: float = 10.0
    step_timeout_seconds: Optional[float] = None
    ssl_script: str = "ci/ssl.sh"
    deb_manifest: str = "server/Cargo.toml"
    debug: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrchestratorConfig":
        return cls(
            platform=Platform.from_os_marker(settings.host_os),
            workspace_root=settings.workspace_root.resolve(),
            target=settings.target,
            artifact=settings.artifact,
            version=settings.version,
            cargo=settings.cargo,
            grace_period_seconds=settings.grace_period_seconds,
            step_timeout_seconds=settings.step_timeout_seconds,
            ssl_script=settings.ssl_script,
            deb_manifest=settings.deb_manifest,
            debug=settings.debug,
        )

    def with_overrides(self, **overrides) -> "OrchestratorConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "workspace_root" in changes:
            changes["workspace_root"] = Path(changes["workspace_root"]).resolve()
        return replace(self, **changes)
