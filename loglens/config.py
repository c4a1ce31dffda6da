"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# (yaml section, yaml key) -> settings field
_YAML_FIELDS: dict[tuple[str, str], str] = {
    ("aws", "region"): "aws_region",
    ("aws", "profile"): "aws_profile",
    ("aws", "endpoint_url"): "aws_endpoint_url",
    ("query", "poll_interval_seconds"): "poll_interval_seconds",
    ("query", "timeout_seconds"): "query_timeout_seconds",
    ("stream", "default_limit"): "stream_default_limit",
    ("server", "host"): "loglens_host",
    ("server", "port"): "loglens_port",
    ("logging", "level"): "log_level",
    ("logging", "format"): "log_format",
}


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Priority:
    1. Explicitly provided config_path
    2. ~/.loglens/config.yaml (default location)
    3. Empty dict if no file exists

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary of configuration values (flattened from nested YAML)
    """
    if config_path is None:
        config_path = Path.home() / ".loglens" / "config.yaml"

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            yaml_data = yaml.safe_load(f) or {}

        flattened = {}

        for (section, key), field_name in _YAML_FIELDS.items():
            values = yaml_data.get(section)
            if isinstance(values, dict) and key in values:
                flattened[field_name] = values[key]

        if "mock_mode" in yaml_data:
            flattened["mock_mode"] = yaml_data["mock_mode"]

        return flattened

    except Exception as e:
        import warnings

        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


_config_path: Path | None = None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """
    Custom settings source that loads configuration from YAML file.

    This allows YAML config to be loaded with proper priority in the settings chain.
    """

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        """Not used since we override __call__."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        return load_yaml_config(_config_path)


class Settings(BaseSettings):
    """
    LogLens configuration settings.

    Configuration priority (highest to lowest):
    1. Environment variables (e.g., AWS_REGION=eu-west-1)
    2. YAML configuration file (~/.loglens/config.yaml)
    3. Default values defined in this class
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    aws_region: str = Field(default="us-east-1", description="CloudWatch Logs region")
    aws_profile: str | None = Field(
        default=None, description="Named AWS profile used by the transport"
    )
    aws_endpoint_url: str | None = Field(
        default=None,
        description="Custom CloudWatch Logs endpoint (for LocalStack, etc.)",
    )

    poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Delay between query status polls",
    )
    query_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional deadline for a query run (unbounded when unset)",
    )
    stream_default_limit: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Default number of events fetched in stream mode",
    )
    mock_mode: bool = Field(
        default=False,
        description="Serve synthetic data instead of calling CloudWatch",
    )

    loglens_host: str = Field(default="0.0.0.0", description="API bind address")
    loglens_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json", description="Log format"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize settings sources priority.

        Priority order (highest to lowest):
        1. Explicit kwargs (init_settings) - for testing and programmatic config
        2. Environment variables
        3. YAML configuration file
        4. .env file
        5. Field defaults
        """
        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls),
            dotenv_settings,
        )


_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """
    Get global settings instance.

    Args:
        config_path: Optional path to YAML config file (defaults to ~/.loglens/config.yaml)
        reload: If True, force reload settings (useful for testing)

    Returns:
        Settings instance with merged configuration
    """
    global _settings, _config_path
    if _settings is None or reload:
        _config_path = config_path

        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
