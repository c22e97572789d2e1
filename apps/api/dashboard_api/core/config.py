from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "KZ Dashboard API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(default="sqlite:///./kz-dashboard.db", alias="DATABASE_URL")

    docker_base_url: str = Field(default="unix:///var/run/docker.sock", alias="DOCKER_BASE_URL")
    docker_timeout_seconds: int = Field(default=30, alias="DOCKER_TIMEOUT_SECONDS")
    action_timeout_seconds: float = Field(default=30.0, alias="ACTION_TIMEOUT_SECONDS")

    # Comma separated; empty falls back to the built-in set.
    protected_containers: str = Field(default="", alias="PROTECTED_CONTAINERS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    logs_default_tail: int = Field(default=200, alias="LOGS_DEFAULT_TAIL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
