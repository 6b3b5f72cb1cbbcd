from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NAME = "demo-api"
SERVICE_VERSION = "1.0.0"

# Logstash HTTP input; not overridable from the environment.
LOGSTASH_URL = "http://logstash:5000"

DEFAULT_SERVER_IP = "127.0.0.1"
DEFAULT_ENVIRONMENT = "production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    environment: str = Field(default=DEFAULT_ENVIRONMENT, alias="ENVIRONMENT")
    server_ip: str = Field(default=DEFAULT_SERVER_IP, alias="SERVER_IP")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8080, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    simulate_latency: bool = Field(default=True, alias="SIMULATE_LATENCY")

    @field_validator("environment", mode="before")
    @classmethod
    def _default_environment(cls, value: str | None) -> str:
        return value or DEFAULT_ENVIRONMENT

    @field_validator("server_ip", mode="before")
    @classmethod
    def _default_server_ip(cls, value: str | None) -> str:
        return value or DEFAULT_SERVER_IP

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
