"""Configuration loading for the multipart client.

Supports two configuration sources:
1. Environment variables - take priority, field by field
2. A JSON config file (for local development)

Anything set in neither falls back to the defaults on ClientConfig.

Environment Variables:
    GCS_MULTIPART_ENDPOINT=https://storage.googleapis.com
    GCS_MULTIPART_ACCESS_TOKEN=ya29....
    GCS_MULTIPART_TIMEOUT=30

Config file:
    {
        "endpoint_url": "https://storage.googleapis.com",
        "access_token": "ya29....",
        "timeout_seconds": 30
    }
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from gcs_multipart import __version__
from gcs_multipart.client import DEFAULT_ENDPOINT


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_USER_AGENT = f"gcs-multipart-client/{__version__}"

# Environment variable -> ClientConfig field
ENV_FIELDS = {
    "GCS_MULTIPART_ENDPOINT": "endpoint_url",
    "GCS_MULTIPART_ACCESS_TOKEN": "access_token",
    "GCS_MULTIPART_TIMEOUT": "timeout_seconds",
}

KNOWN_FIELDS = {"endpoint_url", "access_token", "timeout_seconds", "user_agent"}


@dataclass(frozen=True)
class ClientConfig:
    """Settings for the HTTP transport and the client endpoint."""

    endpoint_url: str = DEFAULT_ENDPOINT
    access_token: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT


def _parse_timeout(value: Any, source: str) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout in {source}: {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"Timeout in {source} must be positive, got {value!r}")
    return timeout


def load_from_json(config_path: str) -> dict[str, Any]:
    """Load client settings from a JSON file.

    Args:
        config_path: Path to the JSON config file.

    Returns:
        Dictionary of ClientConfig field values found in the file.

    Raises:
        ConfigError: If the file doesn't exist, contains invalid JSON,
                    or holds unknown or invalid fields.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")

    unknown = sorted(set(data) - KNOWN_FIELDS)
    if unknown:
        raise ConfigError(f"Unknown config fields: {', '.join(unknown)}")

    values = dict(data)
    if "timeout_seconds" in values:
        values["timeout_seconds"] = _parse_timeout(values["timeout_seconds"], config_path)
    return values


def load_from_env() -> dict[str, Any]:
    """Load client settings from GCS_MULTIPART_* environment variables.

    Returns:
        Dictionary of ClientConfig field values that are set.

    Raises:
        ConfigError: If GCS_MULTIPART_TIMEOUT is not a positive number.
    """
    values: dict[str, Any] = {}

    for env_key, field_name in ENV_FIELDS.items():
        env_value = os.environ.get(env_key)
        if not env_value:
            continue
        values[field_name] = env_value

    if "timeout_seconds" in values:
        values["timeout_seconds"] = _parse_timeout(values["timeout_seconds"], "GCS_MULTIPART_TIMEOUT")
    return values


def load_config(config_path: Optional[str] = None) -> ClientConfig:
    """Load the client configuration with environment priority.

    Priority order:
    1. Environment variables
    2. Config file, if config_path is given
    3. ClientConfig defaults

    Args:
        config_path: Optional path to a JSON config file. A missing file
                     is an error only when a path was given explicitly.

    Returns:
        The merged ClientConfig.

    Raises:
        ConfigError: If any source is malformed.
    """
    values: dict[str, Any] = {}

    if config_path:
        values.update(load_from_json(config_path))

    values.update(load_from_env())

    return ClientConfig(**values)
