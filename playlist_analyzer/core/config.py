"""Settings loaded from config.yaml with APP_* environment overrides"""

import os
from typing import Any, Dict, List, Optional, Tuple, Type

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Serves upstream requests from the bundled demo playlists instead of the network
TEST_MODE_ENV = "APP_TESTING_TEST_MODE"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def is_test_mode() -> bool:
    """Check whether test mode is switched on in the environment."""
    return os.environ.get(TEST_MODE_ENV, "").lower() in ("true", "1", "yes")


class BaseConfigSection(BaseSettings):
    """A config.yaml section whose fields can be overridden from the environment.

    Values passed to the constructor come from the YAML file. An APP_* variable
    for the same field wins over them, and defaults apply last.
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


class ServerConfig(BaseConfigSection):
    """Where uvicorn listens"""

    host: str = "0.0.0.0"  # nosec B104 - containerized deployment
    port: int = 8000

    model_config = SettingsConfigDict(env_prefix="APP_SERVER_")


class YouTubeConfig(BaseConfigSection):
    """Upstream YouTube Data API configuration"""

    api_key: Optional[str] = None
    base_url: str = "https://www.googleapis.com/youtube/v3"
    page_size: int = 50
    timeout: float = 10.0  # seconds per request

    model_config = SettingsConfigDict(env_prefix="APP_YOUTUBE_")

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if not 1 <= v <= 50:
            raise ValueError("page_size must be between 1 and 50")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class AnalysisConfig(BaseConfigSection):
    """Bounds for user-supplied playback speeds"""

    min_speed: float = 0.25
    max_speed: float = 3.0

    model_config = SettingsConfigDict(env_prefix="APP_ANALYSIS_")

    @model_validator(mode="after")
    def validate_bounds(self) -> "AnalysisConfig":
        if self.min_speed <= 0:
            raise ValueError("min_speed must be positive")
        if self.max_speed < self.min_speed:
            raise ValueError("max_speed must not be lower than min_speed")
        return self


class LoggingConfig(BaseConfigSection):
    """structlog level and renderer (json or console)"""

    level: str = "INFO"
    format: str = "json"

    model_config = SettingsConfigDict(env_prefix="APP_LOGGING_")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {list(LOG_LEVELS)}")
        return level


class SecurityConfig(BaseConfigSection):
    """Client API keys, CORS origins and degraded start"""

    api_keys: List[str] = Field(default_factory=list)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_degraded_start: bool = False

    model_config = SettingsConfigDict(env_prefix="APP_SECURITY_")


class MonitoringConfig(BaseConfigSection):
    """Prometheus endpoint toggle"""

    metrics_enabled: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_MONITORING_")


class Config(BaseSettings):
    """All sections, as assembled by ConfigService"""

    server: ServerConfig = Field(default_factory=ServerConfig)
    youtube: YouTubeConfig = Field(default_factory=YouTubeConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="APP_")


SECTIONS: Dict[str, Type[BaseConfigSection]] = {
    "server": ServerConfig,
    "youtube": YouTubeConfig,
    "analysis": AnalysisConfig,
    "logging": LoggingConfig,
    "security": SecurityConfig,
    "monitoring": MonitoringConfig,
}


class ConfigService:
    """Loads config.yaml (path from APP_CONFIG_PATH) and checks startup requirements"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.environ.get("APP_CONFIG_PATH", "config.yaml")
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """
        Build the configuration from the YAML file, if any, and the environment.

        A missing file is not an error: every section then comes from
        APP_* variables and defaults.
        """
        file_data: Dict[str, Any] = {}
        if os.path.exists(self.config_path):
            with open(self.config_path, "r", encoding="utf-8") as f:
                file_data = yaml.safe_load(f) or {}

        # Each section applies its own env prefix on top of the YAML values
        sections = {
            name: section_cls(**(file_data.get(name) or {}))
            for name, section_cls in SECTIONS.items()
        }
        self._config = Config(**sections)
        return self._config

    def validate(self) -> bool:
        """Refuse to start without a YouTube key unless degraded start is allowed"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")

        if not self._config.youtube.api_key and not self._config.security.allow_degraded_start:
            raise ValueError("A YouTube Data API key must be configured (APP_YOUTUBE_API_KEY)")

        return True

    @property
    def config(self) -> Config:
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")
        return self._config
