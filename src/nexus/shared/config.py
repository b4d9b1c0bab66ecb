import os
from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING
from os import PathLike
from pathlib import Path
from tomllib import load

from pydantic import BaseModel, field_validator

DEFAULT_CONFIG_PATH = Path("config.toml")

# Environment variables take precedence over the file, matching the deploy target
PASSPHRASE_ENV = "ENCRYPTION_PASSPHRASE"
API_KEY_ENV = "GEMINI_API_KEY"


class General(BaseModel):
    title: str


class Logging(BaseModel):
    level: int

    @field_validator("level", mode="before")
    @classmethod
    def convert_log_level(cls, value):
        if isinstance(value, int):
            return value
        log_levels = {
            "DEBUG": DEBUG,
            "INFO": INFO,
            "WARNING": WARNING,
            "ERROR": ERROR,
            "CRITICAL": CRITICAL,
        }
        return log_levels.get(value.upper(), INFO)


class Paths(BaseModel):
    logs: str


class Network(BaseModel):
    host: str
    port: int
    reload: bool


class Crypto(BaseModel):
    salt: str = "ai-qr-nexus-salt"
    iterations: int = 100_000
    passphrase: str | None = None

    @field_validator("passphrase", mode="before")
    @classmethod
    def empty_is_unset(cls, value):
        return value or None


class Generation(BaseModel):
    model: str = "gemini-pro"
    api_key: str | None = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 30.0

    @field_validator("api_key", mode="before")
    @classmethod
    def empty_is_unset(cls, value):
        return value or None


class Config(BaseModel):
    general: General
    paths: Paths
    logging: Logging
    network: Network
    crypto: Crypto = Crypto()
    generation: Generation = Generation()


def _apply_env_overrides(config_data: dict) -> None:
    passphrase = os.environ.get(PASSPHRASE_ENV)
    if passphrase:
        config_data.setdefault("crypto", {})["passphrase"] = passphrase

    api_key = os.environ.get(API_KEY_ENV)
    if api_key:
        config_data.setdefault("generation", {})["api_key"] = api_key


def load_config(
    shared_config_file: PathLike = DEFAULT_CONFIG_PATH,
    specific_config_file: PathLike | None = None,
) -> Config:
    """Load and merge configurations from TOML files, then the environment."""
    # Load shared config
    with Path(shared_config_file).open("rb") as f:
        config_data = load(f)

    # Load and merge specific config if provided
    if specific_config_file:
        with Path(specific_config_file).open("rb") as f:
            specific_data = load(f)
            config_data.update(specific_data)

    _apply_env_overrides(config_data)

    return Config(**config_data)
