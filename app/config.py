from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from the environment (or a local .env file)."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    app_env: str = "production"
    # Auto-reload is for local development only
    reload: bool = False

    # PokeAPI
    pokeapi_base_url: str = "https://pokeapi.co/api/v2"
    request_timeout: float = Field(default=10.0, gt=0)
    # A zero-permit semaphore would block every listing forever
    max_concurrency: int = Field(default=20, gt=0)

    # Pagination
    default_page_limit: int = Field(default=20, gt=0)
    max_search_limit: int = Field(default=1000, gt=0)

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
