"""Tests for configuration loading module."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from gcs_multipart.client import DEFAULT_ENDPOINT
from gcs_multipart.config import (
    DEFAULT_TIMEOUT_SECONDS,
    ClientConfig,
    ConfigError,
    load_config,
    load_from_env,
    load_from_json,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any GCS_MULTIPART_* variables from the environment."""
    for name in ("GCS_MULTIPART_ENDPOINT", "GCS_MULTIPART_ACCESS_TOKEN", "GCS_MULTIPART_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


class TestLoadFromJson:
    """Tests for load_from_json function."""

    def test_valid_config_with_all_fields(self, tmp_path: Path):
        """Load a valid config file with all fields specified."""
        config_data = {
            "endpoint_url": "http://localhost:4443",
            "access_token": "test-token",
            "timeout_seconds": 5,
            "user_agent": "tester/1.0",
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        values = load_from_json(str(config_file))

        assert values["endpoint_url"] == "http://localhost:4443"
        assert values["access_token"] == "test-token"
        assert values["timeout_seconds"] == 5.0
        assert values["user_agent"] == "tester/1.0"

    def test_missing_file_raises_error(self, tmp_path: Path):
        """Raise ConfigError when config file doesn't exist."""
        config_file = tmp_path / "nonexistent.json"

        with pytest.raises(ConfigError, match="Config file not found"):
            load_from_json(str(config_file))

    def test_malformed_json_raises_error(self, tmp_path: Path):
        """Raise ConfigError when config file contains invalid JSON."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{ invalid json }")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_from_json(str(config_file))

    def test_non_object_raises_error(self, tmp_path: Path):
        """Raise ConfigError when the top level isn't an object."""
        config_file = tmp_path / "config.json"
        config_file.write_text("[]")

        with pytest.raises(ConfigError, match="JSON object"):
            load_from_json(str(config_file))

    def test_unknown_field_raises_error(self, tmp_path: Path):
        """Raise ConfigError on fields ClientConfig doesn't have."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"bucket_name": "b"}))

        with pytest.raises(ConfigError, match="Unknown config fields: bucket_name"):
            load_from_json(str(config_file))

    def test_invalid_timeout_raises_error(self, tmp_path: Path):
        """Raise ConfigError when the timeout isn't a positive number."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"timeout_seconds": "soon"}))

        with pytest.raises(ConfigError, match="Invalid timeout"):
            load_from_json(str(config_file))

    def test_empty_config_returns_empty_dict(self, tmp_path: Path):
        """Return empty dict when config file sets nothing."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        assert load_from_json(str(config_file)) == {}


class TestLoadFromEnv:
    """Tests for load_from_env function."""

    def test_reads_all_variables(self, clean_env):
        """All GCS_MULTIPART_* variables should be picked up."""
        env = {
            "GCS_MULTIPART_ENDPOINT": "http://localhost:4443",
            "GCS_MULTIPART_ACCESS_TOKEN": "env-token",
            "GCS_MULTIPART_TIMEOUT": "12.5",
        }
        with patch.dict("os.environ", env):
            values = load_from_env()

        assert values == {
            "endpoint_url": "http://localhost:4443",
            "access_token": "env-token",
            "timeout_seconds": 12.5,
        }

    def test_no_variables_returns_empty(self, clean_env):
        """Without variables nothing should be set."""
        assert load_from_env() == {}

    def test_empty_variable_ignored(self, clean_env):
        """Empty values should be treated as unset."""
        with patch.dict("os.environ", {"GCS_MULTIPART_ACCESS_TOKEN": ""}):
            assert load_from_env() == {}

    def test_negative_timeout_raises(self, clean_env):
        """Non-positive timeouts should be rejected."""
        with patch.dict("os.environ", {"GCS_MULTIPART_TIMEOUT": "-1"}):
            with pytest.raises(ConfigError, match="must be positive"):
                load_from_env()


class TestLoadConfig:
    """Tests for load_config priority logic."""

    def test_defaults_without_sources(self, clean_env):
        """No file and no env should give the defaults."""
        config = load_config()

        assert config == ClientConfig()
        assert config.endpoint_url == DEFAULT_ENDPOINT
        assert config.access_token is None
        assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS

    def test_file_values_used(self, clean_env, tmp_path: Path):
        """Values from the file should be applied."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"endpoint_url": "http://file:1"}))

        config = load_config(str(config_file))

        assert config.endpoint_url == "http://file:1"

    def test_env_takes_priority(self, clean_env, tmp_path: Path):
        """Environment variables should override file values field by field."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "endpoint_url": "http://file:1",
            "access_token": "file-token",
        }))

        with patch.dict("os.environ", {"GCS_MULTIPART_ACCESS_TOKEN": "env-token"}):
            config = load_config(str(config_file))

        assert config.endpoint_url == "http://file:1"
        assert config.access_token == "env-token"

    def test_explicit_missing_file_raises(self, clean_env, tmp_path: Path):
        """An explicitly given path that doesn't exist is an error."""
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(str(tmp_path / "missing.json"))
