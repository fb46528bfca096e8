"""Runtime configuration for safe-spot teleports."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mc_safe_teleport.models import WORLD_HEIGHT_MARGIN


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="MC_SAFE_TELEPORT_", env_file=".env", extra="ignore")

    app_name: str = "mc-safe-teleport"
    log_level: str = "INFO"
    default_protection_radius: int = Field(
        default=100,
        ge=0,
        description="Search radius in blocks when the target is not inside a managed region.",
    )
    batch_size: int = Field(default=50, gt=0, description="Chunks snapshotted and scanned per dispatch.")
    tick_interval_ticks: int = Field(default=5, gt=0, description="Game ticks between scheduler steps.")
    seconds_per_tick: float = Field(default=0.05, ge=0)
    world_height_margin: int = Field(
        default=WORLD_HEIGHT_MARGIN,
        ge=0,
        description="Blocks below the build limit where the downward column walk starts.",
    )
    max_batches: int | None = Field(
        default=None,
        gt=0,
        description="Optional ceiling on dispatched batches per search; unset means scan the whole region.",
    )
    observation_mode_enabled: bool = True

    @property
    def tick_seconds(self) -> float:
        return self.tick_interval_ticks * self.seconds_per_tick


settings = Settings()
