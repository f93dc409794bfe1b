"""Client settings using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from jaguar_flux.core.cache.types import EvictionStrategy


class Settings(BaseSettings):
    """Client configuration loaded from environment variables (JAGUAR_*)."""

    model_config = SettingsConfigDict(
        env_prefix="JAGUAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Deployment prefix, e.g. "https://your-username--shuttle-jaguar".
    # Endpoint names are appended as "-<endpoint>.modal.run".
    base_url: str = ""

    # Request behaviour
    timeout_seconds: float = 30.0
    retry_attempts: int = 1
    retry_base_delay_seconds: float = 1.0
    # 503 usually means the serverless container is cold-starting.
    retry_cold_start_delay_seconds: float = 5.0
    max_concurrent: int = 3

    # HTTP connection pool
    http_max_connections: int = 10
    http_max_keepalive_connections: int = 5

    # Result cache
    cache_enabled: bool = True
    cache_max_size: int = 100
    cache_ttl_seconds: float = 3600.0
    cache_strategy: EvictionStrategy = EvictionStrategy.OLDEST

    # Generation defaults
    default_height: int = 1024
    default_width: int = 1024
    default_guidance_scale: float = 3.5
    default_steps: int = 4
    default_max_seq_length: int = 256


settings = Settings()
