"""Application configuration via pydantic-settings, plus the per-environment key file."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.errors import ConfigLoadError, UnknownEnvironmentError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    # Environment -> write key mapping, read once at startup
    config_path: str = "./config.json"

    # Inbound
    max_body_bytes: int = 1024 * 1024

    # Segment
    segment_api_url: str = "https://api.segment.io"
    segment_timeout: float = 10.0


class EnvironmentCredentials(BaseModel):
    """Write credential for a single environment."""
    model_config = ConfigDict(frozen=True)

    segment_write_key: str = Field(..., min_length=1)


class EnvironmentConfig(BaseModel):
    """Environment name -> credential mapping. Read-only after load."""
    model_config = ConfigDict(frozen=True)

    environments: dict[str, EnvironmentCredentials] = Field(default_factory=dict)

    def get(self, env: str) -> EnvironmentCredentials:
        try:
            return self.environments[env]
        except KeyError:
            raise UnknownEnvironmentError(env) from None

    def names(self) -> list[str]:
        return sorted(self.environments)


def load_environments(path: str | Path) -> EnvironmentConfig:
    """Load the environment mapping from a JSON file.

    Raises ConfigLoadError if the file can't be opened, isn't valid JSON,
    or doesn't have the {"environments": {...}} shape.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigLoadError(f"load_environments: {e}") from e
    except ValueError as e:
        raise ConfigLoadError(f"load_environments: {path}: invalid JSON: {e}") from e

    try:
        return EnvironmentConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigLoadError(f"load_environments: {path}: {e}") from e


settings = Settings()
