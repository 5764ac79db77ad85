"""Application configuration settings."""
import os
import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional, List

from .models.level import RefreshPolicyType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "StackMatch Puzzle Engine"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS settings - as comma-separated string or JSON array
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Default game rules
    canvas_width: int = 800
    canvas_height: int = 600
    layer_count: int = 7
    slots_per_lane: int = 3
    queue_capacity: int = 4
    clickable_threshold: float = 0.5
    palette_size: int = 8
    piece_radius: float = 9.0
    refresh_policy: str = RefreshPolicyType.MODULE.value
    empty_layers_occlude: bool = True

    # Live game store
    max_sessions: int = 200

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("refresh_policy")
    @classmethod
    def validate_refresh_policy(cls, value: str) -> str:
        valid = [p.value for p in RefreshPolicyType]
        if value not in valid:
            raise ValueError(f"refresh_policy must be one of: {valid}")
        return value

    @field_validator("clickable_threshold")
    @classmethod
    def validate_threshold(cls, value: float) -> float:
        if not 0 < value <= 1:
            raise ValueError("clickable_threshold must be in (0, 1]")
        return value

    @field_validator("max_sessions")
    @classmethod
    def validate_max_sessions(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_sessions must be at least 1")
        return value

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from string (comma-separated or JSON)."""
        if not self.cors_origins:
            return ["http://localhost:5173"]

        # Try JSON parse first
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            pass

        # Fall back to comma-separated
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Don't use lru_cache in production to allow env var updates
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings instance (cached in production for performance)."""
    global _settings
    if _settings is None or os.getenv("DEBUG", "false").lower() == "true":
        _settings = Settings()
    return _settings
