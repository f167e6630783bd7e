"""Test configuration loading and validation."""

import pytest
import yaml

from make_mcp_server.config import Config, ConfigError


def test_config_from_environment(mock_env_vars):
    """Test loading configuration from environment variables."""
    config = Config.load(environ=mock_env_vars)

    assert config.api_key == "test_api_key"
    assert config.zone == "eu2.make.com"
    assert config.team_id == 42
    assert config.results_api_url == "https://results.example.com"
    assert config.results_api_secret_key == "test_secret"
    assert config.request_timeout == 30.0
    assert config.results_timeout == 30.0
    assert config.log_level == "INFO"


def test_make_base_url_from_zone(mock_env_vars):
    """Test zone normalization into the Make API base URL."""
    mock_env_vars["MAKE_ZONE"] = "https://us1.make.com/"
    config = Config.load(environ=mock_env_vars)

    assert config.zone == "us1.make.com"
    assert config.make_base_url == "https://us1.make.com/api/v2"


@pytest.mark.parametrize(
    "missing",
    [
        "MAKE_API_KEY",
        "MAKE_ZONE",
        "MAKE_TEAM",
        "RESULTS_API_URL",
        "RESULTS_API_SECRET_KEY",
    ],
)
def test_missing_required_value(mock_env_vars, missing):
    """Test every required value is reported by its variable name."""
    del mock_env_vars[missing]

    with pytest.raises(ConfigError, match=missing):
        Config.load(environ=mock_env_vars)


def test_empty_value_counts_as_missing(mock_env_vars):
    mock_env_vars["MAKE_API_KEY"] = ""

    with pytest.raises(ConfigError, match="MAKE_API_KEY"):
        Config.load(environ=mock_env_vars)


def test_team_id_must_be_numeric(mock_env_vars):
    """Test non-numeric team id is rejected."""
    mock_env_vars["MAKE_TEAM"] = "team-a"

    with pytest.raises(ConfigError, match="could not be parsed into a valid number"):
        Config.load(environ=mock_env_vars)


def test_invalid_timeout_does_not_leak_secrets(mock_env_vars):
    mock_env_vars["RESULTS_API_TIMEOUT"] = "-1"

    with pytest.raises(ConfigError) as exc_info:
        Config.load(environ=mock_env_vars)

    assert "RESULTS_API_TIMEOUT" in str(exc_info.value)
    assert "test_secret" not in str(exc_info.value)
    assert "test_api_key" not in str(exc_info.value)


def test_config_file_with_env_override(tmp_path, mock_env_vars):
    """Test environment variables take precedence over the YAML file."""
    config_file = tmp_path / "server.yaml"
    config_file.write_text(
        yaml.dump(
            {
                "api_key": "file_key",
                "zone": "eu1.make.com",
                "team_id": 7,
                "results_api_url": "https://file.example.com",
                "results_api_secret_key": "file_secret",
                "results_timeout": 5,
                "log_level": "debug",
            }
        )
    )

    config = Config.load(str(config_file), environ={"MAKE_API_KEY": "env_key"})

    assert config.api_key == "env_key"
    assert config.zone == "eu1.make.com"
    assert config.team_id == 7
    assert config.results_timeout == 5.0
    assert config.log_level == "DEBUG"


def test_example_config_file_loads():
    config = Config.load("config/server.example.yaml", environ={})

    assert config.team_id == 123456
    assert config.results_api_url == "https://results.example.com"


def test_missing_config_file():
    with pytest.raises(ConfigError, match="Configuration file not found"):
        Config.load("does/not/exist.yaml", environ={})


def test_redacted_masks_secrets(config):
    redacted = config.redacted()

    assert redacted["api_key"] == "[REDACTED]"
    assert redacted["results_api_secret_key"] == "[REDACTED]"
    assert redacted["team_id"] == 42
