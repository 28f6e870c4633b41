"""Dependency-injection container.

This module defines a dependency-injection (DI) container that wires together
the service pack's components: one HTTP client per remote host, the shared
reference dataset and the two services built on them.
"""

from dependency_injector import containers, providers

from servicepack.services.conversion import CurrencyConversionService
from servicepack.services.geolocation import GeolocationClient
from servicepack.services.http_client import JsonHttpClient
from servicepack.services.reference_data import get_reference_dataset


class Container(containers.DeclarativeContainer):
    """DI container for the service pack.

    Populate ``config`` from ``servicepack.config.Config`` (see
    ``build_container``) or from a plain dictionary in tests.
    """

    config = providers.Configuration()

    # HTTP collaborators
    rates_http_client = providers.Singleton(
        JsonHttpClient,
        base_url=config.conversion.base_url,
        timeout=config.conversion.timeout,
        verify_ssl=config.conversion.verify_ssl,
    )
    geolocation_http_client = providers.Singleton(
        JsonHttpClient,
        base_url=config.geolocation.base_url,
        timeout=config.geolocation.timeout,
        verify_ssl=config.geolocation.verify_ssl,
    )

    # Services
    reference_dataset = providers.Callable(get_reference_dataset)
    geolocation_client = providers.Singleton(GeolocationClient, http_client=geolocation_http_client)
    conversion_service = providers.Singleton(
        CurrencyConversionService,
        api_key=config.conversion.api_key,
        http_client=rates_http_client,
    )


def build_container() -> Container:
    """Create a container configured from the global service pack config."""
    from servicepack.config import config as settings

    container = Container()
    container.config.from_dict(
        {
            "conversion": settings.conversion.model_dump(),
            "geolocation": settings.geolocation.model_dump(),
        }
    )
    return container
