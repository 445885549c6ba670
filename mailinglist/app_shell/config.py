"""
Application settings.

Loaded once at process start and passed explicitly to whoever needs them.

Sources, later ones win:
1. configuration/base.yaml
2. configuration/{APP_ENVIRONMENT}.yaml  (local | production, default local)
3. APP_* environment variables, '__' separating nesting levels,
   e.g. APP_EMAIL_CLIENT__TIMEOUT_MILLISECONDS=500
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

ENV_PREFIX = "APP_"
ENV_SEPARATOR = "__"


class ConfigurationError(ValueError):
    """Settings could not be loaded or failed validation."""


class Environment(str, Enum):
    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str) -> Environment:
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"{value} is not a supported environment. Use either `local` or `production`."
            ) from None


class ApplicationSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_url: str = "http://127.0.0.1:8000"
    log_level: str = "INFO"


class DatabaseSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = "./data/mailinglist.db"
    migrations_dir: str = "migrations"


class EmailClientSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    provider: Literal["postmark", "dev"] = "dev"
    base_url: str = "https://api.postmarkapp.com"
    sender_email: str
    authorization_token: str = ""
    timeout_milliseconds: int = Field(default=10_000, gt=0)

    @model_validator(mode="after")
    def require_token_for_postmark(self) -> EmailClientSettings:
        if self.provider == "postmark" and not self.authorization_token.strip():
            raise ValueError("authorization_token is required when provider is postmark")
        return self

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_milliseconds / 1000


class DeliverySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_workers: int = Field(default=4, ge=1)
    confirmation_subject: str = "Welcome!"


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    environment: Environment = Environment.LOCAL
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email_client: EmailClientSettings
    delivery: DeliverySettings = Field(default_factory=DeliverySettings)


def _read_yaml(path: Path, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found at: {path}")
        return {}

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Turn APP_SECTION__KEY=value variables into a nested dict.

    Only variables naming a settings section are picked up; other APP_*
    variables belong to someone else and are ignored.
    """
    sections = set(Settings.model_fields) - {"environment"}
    result: dict[str, Any] = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX) or name == "APP_ENVIRONMENT":
            continue
        path = [p.lower() for p in name[len(ENV_PREFIX) :].split(ENV_SEPARATOR) if p]
        if len(path) < 2 or path[0] not in sections:
            continue
        node = result
        for part in path[:-1]:
            node = node.setdefault(part, {})
        node[path[-1]] = value
    return result


def load_settings(
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load and validate settings.

    Raises:
        ConfigurationError: missing base file, bad YAML, unknown
            environment or schema violation
    """
    env = os.environ if environ is None else environ
    directory = config_dir or Path.cwd() / "configuration"

    environment = Environment.parse(env.get("APP_ENVIRONMENT", Environment.LOCAL.value))

    data = _read_yaml(directory / "base.yaml", required=True)
    data = deep_merge(data, _read_yaml(directory / f"{environment.value}.yaml", required=False))
    data = deep_merge(data, env_overrides(env))
    data["environment"] = environment.value

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Settings validation failed:\n{e}") from e
