"""Configuration management for the Make MCP Server.

Settings are validated once at process entry. Values may come from an
optional YAML file; environment variables take precedence over the file.
Nothing outside this module reads the process environment.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

# Field name -> environment variable
ENV_VARS: Dict[str, str] = {
    "api_key": "MAKE_API_KEY",
    "zone": "MAKE_ZONE",
    "team_id": "MAKE_TEAM",
    "results_api_url": "RESULTS_API_URL",
    "results_api_secret_key": "RESULTS_API_SECRET_KEY",
    "request_timeout": "MAKE_REQUEST_TIMEOUT",
    "results_timeout": "RESULTS_API_TIMEOUT",
    "log_level": "LOG_LEVEL",
}

REQUIRED_FIELDS = (
    "api_key",
    "zone",
    "team_id",
    "results_api_url",
    "results_api_secret_key",
)

SECRET_FIELDS = ("api_key", "results_api_secret_key")


class ConfigError(Exception):
    """Raised when the server configuration is missing or invalid."""


class Config(BaseModel):
    """Main configuration class."""

    api_key: str = Field(..., min_length=1, description="Make API token")
    zone: str = Field(..., min_length=1, description="Make zone, e.g. eu2.make.com")
    team_id: int = Field(..., description="Team whose scenarios are exposed")
    results_api_url: str = Field(..., min_length=1, description="Results API base URL")
    results_api_secret_key: str = Field(
        ..., min_length=1, description="Secret sent as X-API-Key to the Results API"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Timeout for Make API calls (seconds)"
    )
    results_timeout: float = Field(
        default=30.0, gt=0, description="Timeout for Results API calls (seconds)"
    )
    log_level: str = Field(default="INFO")

    @field_validator("results_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("zone")
    @classmethod
    def _normalize_zone(cls, value: str) -> str:
        # Accept either "eu2.make.com" or "https://eu2.make.com/"
        for scheme in ("https://", "http://"):
            if value.startswith(scheme):
                value = value[len(scheme):]
        return value.strip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def make_base_url(self) -> str:
        """Base URL of the Make API for the configured zone."""
        return f"https://{self.zone}/api/v2"

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """Load configuration from an optional YAML file and the environment."""
        if environ is None:
            environ = os.environ

        data: Dict[str, Any] = {}
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigError(f"Configuration file not found: {config_path}")
            with open(path, "r") as f:
                file_data = yaml.safe_load(f) or {}
            if not isinstance(file_data, dict):
                raise ConfigError(
                    f"Configuration file must contain a mapping: {config_path}"
                )
            data.update({k: v for k, v in file_data.items() if k in ENV_VARS})

        for field_name, env_var in ENV_VARS.items():
            value = environ.get(env_var)
            if value:
                data[field_name] = value

        for field_name in REQUIRED_FIELDS:
            if data.get(field_name) in (None, ""):
                raise ConfigError(
                    f"Please provide {ENV_VARS[field_name]} environment variable."
                )

        team_id = data["team_id"]
        if isinstance(team_id, bool) or not str(team_id).strip().isdigit():
            raise ConfigError(
                f'{ENV_VARS["team_id"]} environment variable ("{team_id}") could '
                "not be parsed into a valid number."
            )

        try:
            return cls(**data)
        except ValidationError as e:
            # Report variable names only, values may be secrets
            fields = sorted(
                {ENV_VARS.get(str(err["loc"][0]), str(err["loc"][0])) for err in e.errors()}
            )
            raise ConfigError(f"Invalid configuration for: {', '.join(fields)}") from None

    def redacted(self) -> Dict[str, Any]:
        """Configuration as a dict with secrets masked, safe to log."""
        data = self.model_dump()
        for field_name in SECRET_FIELDS:
            data[field_name] = "[REDACTED]"
        return data
