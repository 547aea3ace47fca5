"""
Server configuration.

Settings are resolved once at startup into a frozen ``ServerConfig`` and handed
to the application; nothing reads the environment after that. Precedence, from
lowest to highest: built-in defaults, the YAML file named by
``CONSCRIPT_CONFIG``, ``CONSCRIPT_*`` environment variables, explicit overrides
(CLI options).

The Docker engine connection itself is configured through Docker's own
variables (``DOCKER_HOST``, ``DOCKER_TLS_VERIFY``, ``DOCKER_CERT_PATH``).
"""

import os
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from conscript import __version__

CONFIG_PATH_ENV = "CONSCRIPT_CONFIG"
ENV_PREFIX = "CONSCRIPT_"


class ConfigError(Exception):
    """Raised when the configuration file or environment is invalid."""
    pass


class ServerConfig(BaseModel):
    """Immutable process-wide configuration."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = "0.0.0.0"
    port: int = Field(3333, ge=1, le=65535)
    app_version: str = __version__
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"
    engine_timeout: int = Field(60, gt=0, description="Seconds before an engine call is abandoned.")
    graceful_timeout: Optional[int] = Field(
        10, ge=0, description="Seconds to drain in-flight requests on shutdown."
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_log_level(cls, v):
        return v.lower() if isinstance(v, str) else v


def _load_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values = {}
    for name in ServerConfig.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            values[name] = raw
    return values


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> ServerConfig:
    """Build the ``ServerConfig`` from file, environment and explicit overrides.

    Overrides whose value is ``None`` are ignored so CLI options can be passed
    through unconditionally.
    """
    if environ is None:
        environ = os.environ
    path = path or environ.get(CONFIG_PATH_ENV)

    values: Dict[str, Any] = {}
    if path:
        values.update(_load_yaml(path))
    values.update(_from_env(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ServerConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
