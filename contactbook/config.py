from functools import lru_cache
from pathlib import Path

from fastapi import Request
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_exp_minutes: int = Field(default=60, alias="JWT_EXP_MINUTES")
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS")

    database_url: str = Field(alias="DATABASE_URL")

    log_sink_url: str | None = Field(default=None, alias="LOG_SINK_URL")
    log_sink_token: str = Field(default="", alias="LOG_SINK_TOKEN")
    log_sink_auth_scheme: str = Field(default="Splunk", alias="LOG_SINK_AUTH_SCHEME")
    log_sink_timeout_seconds: float = Field(default=5.0, alias="LOG_SINK_TIMEOUT_SECONDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    static_dir: str = Field(default="public", alias="STATIC_DIR")

    @property
    def static_path(self) -> Path:
        return Path(self.static_dir)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """The settings object the running app was built with."""
    return request.app.state.settings
