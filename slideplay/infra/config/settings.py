"""
Application configuration settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=[".env", "../.env"], case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = Field("slideplay", alias="APP_NAME")

    # Environment
    environment: str = Field("development", alias="ENVIRONMENT")
    debug: bool = Field(False, alias="DEBUG")

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8000, alias="PORT")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = Field("json", alias="LOG_FORMAT")

    # Live edit
    debounce_ms: int = Field(150, alias="DEBOUNCE_MS")
    saved_display_ms: int = Field(2000, alias="SAVED_DISPLAY_MS")
    error_display_ms: int = Field(5000, alias="ERROR_DISPLAY_MS")

    # Export
    capture_timeout_s: float = Field(30.0, alias="CAPTURE_TIMEOUT_S")
    slide_width: int = Field(1920, alias="SLIDE_WIDTH")
    slide_height: int = Field(1080, alias="SLIDE_HEIGHT")
    renderer_idle_timeout_s: float = Field(60.0, alias="RENDERER_IDLE_TIMEOUT_S")

    # Rendering surface readiness
    surface_poll_interval_ms: int = Field(50, alias="SURFACE_POLL_INTERVAL_MS")
    surface_poll_attempts: int = Field(20, alias="SURFACE_POLL_ATTEMPTS")
    surface_observe_timeout_ms: int = Field(100, alias="SURFACE_OBSERVE_TIMEOUT_MS")

    # WebSocket
    websocket_heartbeat_interval: int = Field(30, alias="WS_HEARTBEAT_INTERVAL")

    @property
    def debounce_s(self) -> float:
        return self.debounce_ms / 1000

    @property
    def surface_poll_interval_s(self) -> float:
        return self.surface_poll_interval_ms / 1000

    @property
    def surface_observe_timeout_s(self) -> float:
        return self.surface_observe_timeout_ms / 1000


_settings = None


def get_settings() -> Settings:
    """Get settings instance (useful for dependency injection)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
