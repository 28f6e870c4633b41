"""IP geolocation enriched with bundled country metadata.

Resolves an IP address to a country through ip-api.com and completes the
answer with locale, language and currency information from the reference
dataset. Resolution happens once, when the service object is created; the
getters afterwards are plain reads.
"""

import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from ..config import config
from ..errors import RemoteLogicalError, ServicePackError
from ..models import CountryInfo, CountryRecord, CurrencyInfo, GeoProfile
from .http_client import JsonHttpClient
from .reference_data import ReferenceDataset, get_reference_dataset

logger = logging.getLogger(__name__)

JSON_PATH = "/json"


class GeolocationClient:
    """ip-api.com client returning the country of an IP address."""

    def __init__(self, http_client: JsonHttpClient | None = None):
        """Initialize geolocation client.

        Args:
            http_client: HTTP collaborator, built from configuration if omitted.
        """
        if http_client is None:
            http_client = JsonHttpClient(
                config.geolocation.base_url,
                timeout=config.geolocation.timeout,
                verify_ssl=config.geolocation.verify_ssl,
            )
        self.http_client = http_client

    async def lookup(
        self, ip_address: str, session: aiohttp.ClientSession | None = None
    ) -> CountryInfo:
        """Locate an IP address.

        Args:
            ip_address: IPv4 or IPv6 address (e.g., '8.8.8.8').
            session: Optional HTTP session to reuse.

        Returns:
            Country name and code reported by the service.

        Raises:
            TransportError: Request could not be completed.
            RemoteLogicalError: Service answered with a failure or without country data.
        """
        data = await self.http_client.get(f"{JSON_PATH}/{ip_address}", session=session)
        return _parse_country(data)


def _parse_country(data: Any) -> CountryInfo:
    if not isinstance(data, dict) or data.get("status") != "success":
        message = data.get("message") if isinstance(data, dict) else None
        raise RemoteLogicalError(
            f"IP Api lookup failed: {message}" if message else "IP Api result not found in response."
        )

    name = data.get("country")
    code = data.get("countryCode")
    if not name or not code:
        raise RemoteLogicalError("IP Api result not found in response.")

    try:
        return CountryInfo(name=name, code=code)
    except ValidationError as e:
        raise RemoteLogicalError(f"IP Api returned malformed country data: {e.error_count()} invalid field(s)") from e


class GeoEnrichmentService:
    """Geolocation profile of a single IP address.

    Create instances with ``await GeoEnrichmentService.locate(ip)``. A failed
    lookup does not raise: ``error`` holds the reason and every getter
    returns None. Countries missing from the reference dataset leave locale,
    language and currency as None while ``get_info`` still reports them.
    """

    def __init__(
        self,
        ip_address: str,
        info: CountryInfo | None,
        dataset: ReferenceDataset,
        error: str | None = None,
    ):
        """Build the profile from an already resolved country.

        Args:
            ip_address: Address the profile describes.
            info: Country from the geolocation lookup, None if it failed.
            dataset: Reference dataset used for the metadata lookups.
            error: Failure description when ``info`` is None.
        """
        self._ip_address = ip_address
        self._info = info
        self._error = error
        self._locale: tuple[str, ...] | None = None
        self._language: tuple[str, ...] | None = None
        self._currency: CurrencyInfo | None = None

        if info is not None:
            self._locale = _locales_for(dataset.find_by_code(info.code))
            self._language = _languages_for(dataset.find_by_code(info.code))
            self._currency = _currency_for(dataset.find_by_code(info.code))

    @classmethod
    async def locate(
        cls,
        ip_address: str,
        client: GeolocationClient | None = None,
        dataset: ReferenceDataset | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> "GeoEnrichmentService":
        """Geolocate an IP address and enrich it with country metadata.

        Args:
            ip_address: Address to locate (e.g., '34.124.137.169').
            client: Geolocation client, a configured default if omitted.
            dataset: Reference dataset, the shared bundled one if omitted.
            session: Optional HTTP session to reuse.

        Returns:
            Resolved service; check ``error`` to distinguish failed lookups.

        Raises:
            DatasetLoadError: Bundled reference dataset cannot be loaded.
        """
        if dataset is None:
            dataset = get_reference_dataset()
        if client is None:
            client = GeolocationClient()

        try:
            info = await client.lookup(ip_address, session=session)
        except ServicePackError as e:
            logger.warning(f"Geolocation of {ip_address} failed: {e}")
            return cls(ip_address, None, dataset, error=str(e))

        logger.info(f"Located {ip_address} in {info.name} ({info.code})")
        return cls(ip_address, info, dataset)

    @property
    def ip_address(self) -> str:
        return self._ip_address

    @property
    def error(self) -> str | None:
        """Reason the geolocation lookup failed, None on success."""
        return self._error

    @property
    def is_resolved(self) -> bool:
        return self._info is not None

    def get_info(self) -> CountryInfo | None:
        """Country name and code, e.g. ``{name: 'Singapore', code: 'SG'}``."""
        return self._info

    def get_locale(self) -> tuple[str, ...] | None:
        """Locales of the country, e.g. ``('zh_Hans_SG', 'en_SG')``."""
        return self._locale

    def get_language(self) -> tuple[str, ...] | None:
        """Language codes of the country, e.g. ``('en', 'ms', 'ta', 'zh')``."""
        return self._language

    def get_currency(self) -> CurrencyInfo | None:
        """Currency of the country, e.g. ``{name: 'Singapore Dollar', code: 'SGD'}``."""
        return self._currency

    def get_all(self) -> GeoProfile:
        """Everything known about the IP address in one profile."""
        return GeoProfile(
            country=self._info,
            locales=self._locale,
            languages=self._language,
            currency=self._currency,
        )


def _locales_for(record: CountryRecord | None) -> tuple[str, ...] | None:
    return record.locales if record is not None else None


def _languages_for(record: CountryRecord | None) -> tuple[str, ...] | None:
    return record.languages if record is not None else None


def _currency_for(record: CountryRecord | None) -> CurrencyInfo | None:
    if record is None or record.currency_code is None or record.currency_name is None:
        return None
    return CurrencyInfo(name=record.currency_name, code=record.currency_code)
