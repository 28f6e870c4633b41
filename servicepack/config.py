"""Configuration management for the service pack.

Handles all service configuration including environment variables, an
optional YAML config file, and default settings. Provides structured
configuration classes for the rate provider, the geolocation service and the
bundled reference dataset.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_COUNTRIES_PATH = Path(__file__).parent / "data" / "countries.json"


class ConversionConfig(BaseSettings):
    """TraderMade rate provider settings.

    Attributes:
        api_key: TraderMade API key passed as the ``api_key`` query parameter.
        base_url: API root including the version prefix.
        timeout: HTTP request timeout in seconds.
        verify_ssl: Whether to verify the provider's TLS certificate.
    """
    api_key: str | None = Field(default=None, validation_alias="TRADERMADE_API_KEY")
    base_url: str = "https://marketdata.tradermade.com/api/v1"
    timeout: float = 30.0
    verify_ssl: bool = Field(default=True, validation_alias="TRADERMADE_VERIFY_SSL")


class GeolocationConfig(BaseSettings):
    """ip-api.com geolocation settings.

    Attributes:
        base_url: Service root; lookups go to ``/json/{ip}``.
        timeout: HTTP request timeout in seconds.
        verify_ssl: Whether to verify the service's TLS certificate.
    """
    base_url: str = Field(default="http://ip-api.com", validation_alias="GEOLOCATION_BASE_URL")
    timeout: float = 30.0
    verify_ssl: bool = Field(default=True, validation_alias="GEOLOCATION_VERIFY_SSL")


class DatasetConfig(BaseSettings):
    """Country reference dataset location.

    Attributes:
        path: JSON file with country records, defaults to the bundled copy.
    """
    path: Path = Field(default=DEFAULT_COUNTRIES_PATH, validation_alias="SERVICEPACK_COUNTRIES_PATH")


class Config:
    """Service pack configuration manager.

    Centralizes loading of environment variables, the YAML service file and
    default values. Provides typed access to configuration sections for the
    conversion and geolocation services.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to servicepack/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        services_data = self._load_services_file()

        self.conversion = ConversionConfig(**_section_kwargs(ConversionConfig, services_data.get("conversion")))
        self.geolocation = GeolocationConfig(**_section_kwargs(GeolocationConfig, services_data.get("geolocation")))

        self.dataset = DatasetConfig()

    def _load_services_file(self) -> dict[str, Any]:
        """Load service overrides from YAML configuration.

        Returns:
            Parsed mapping, empty when the file is absent or blank.
        """
        services_path = self.config_dir / "services.yml"
        if not services_path.exists():
            return {}

        with open(services_path) as f:
            data = yaml.safe_load(f)

        return data or {}


def _section_kwargs(settings_cls: type[BaseSettings], data: dict[str, Any] | None) -> dict[str, Any]:
    """Turn a services.yml section into settings keyword arguments.

    Only keys present in the file are passed, so anything the file leaves out
    still comes from the environment or the field default. Keys present in the
    file take precedence over the environment. Aliased fields are passed under
    their environment variable name, which is what the settings model accepts.
    """
    kwargs: dict[str, Any] = {}
    for name, field in settings_cls.model_fields.items():
        if data and name in data:
            kwargs[field.validation_alias or name] = data[name]
    return kwargs


# Global configuration instance
config = Config()
