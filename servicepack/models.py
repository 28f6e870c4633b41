"""Data models for the service pack.

Defines Pydantic models for the bundled country reference data, the enriched
geolocation profile and the currency conversion results. Every result that
crosses the public service boundary is one of these models; failures are
reported through ``ServiceError`` and ``PairLevelError`` values rather than
exceptions.
"""

from decimal import Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class CountryRecord(BaseModel):
    """Single entry of the bundled country reference dataset.

    Attributes:
        alpha2: ISO 3166-1 alpha-2 code (e.g., 'SG').
        alpha3: ISO 3166-1 alpha-3 code (e.g., 'SGP').
        name: Country name.
        currency_code: ISO 4217 currency code, stored as ``currency`` in JSON;
            null for territories without a currency (e.g., Antarctica).
        currency_name: Human readable currency name, null with the code.
        locales: Locale identifiers in dataset order (e.g., 'en_SG').
        languages: ISO 639-1 language codes in dataset order.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    alpha2: str
    alpha3: str
    name: str
    currency_code: str | None = Field(alias="currency")
    currency_name: str | None
    locales: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()


class CountryInfo(BaseModel):
    """Country reported by the geolocation service."""

    model_config = ConfigDict(frozen=True)

    name: str
    code: str


class CurrencyInfo(BaseModel):
    """Currency of a country, taken from the reference dataset."""

    model_config = ConfigDict(frozen=True)

    name: str
    code: str


class GeoProfile(BaseModel):
    """Enriched geolocation result for one IP address.

    Any field may be None: ``country`` when the geolocation lookup failed, the
    others when the country is not present in the reference dataset.

    Attributes:
        country: Country name and code as reported by the geolocation service.
        locales: Locale identifiers for the country.
        languages: Language codes for the country.
        currency: Currency name and code for the country.
    """

    model_config = ConfigDict(frozen=True)

    country: CountryInfo | None = None
    locales: tuple[str, ...] | None = None
    languages: tuple[str, ...] | None = None
    currency: CurrencyInfo | None = None


class ConversionPair(BaseModel):
    """One requested currency pair of a batch conversion.

    Attributes:
        from_currency: Source currency code, ``from`` in serialized form.
        to_currency: Target currency code, ``to`` in serialized form.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_currency: str = Field(alias="from")
    to_currency: str = Field(alias="to")

    @property
    def token(self) -> str:
        """Concatenated pair key used by the rate provider (e.g., 'USDMYR')."""
        return f"{self.from_currency}{self.to_currency}"


class ConversionQuote(BaseModel):
    """Successful single-amount conversion.

    Attributes:
        from_currency: Source currency code reported by the provider.
        to_currency: Target currency code reported by the provider.
        amount: Amount requested by the caller.
        total: Converted amount in the target currency.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_currency: str = Field(alias="from")
    to_currency: str = Field(alias="to")
    amount: Decimal
    total: Decimal


class PairRate(BaseModel):
    """Successful batch conversion entry carrying the mid-market rate."""

    model_config = ConfigDict(frozen=True)

    from_currency: str
    to_currency: str
    rate: Decimal


class PairLevelError(BaseModel):
    """Failed batch conversion entry for one requested pair.

    The currency codes are always those of the request at the same position,
    since the provider may omit them on error.
    """

    model_config = ConfigDict(frozen=True)

    from_currency: str
    to_currency: str
    error: str


ConversionPairResult = Union[PairRate, PairLevelError]


class ServiceError(BaseModel):
    """Request-level failure returned instead of a service result.

    Attributes:
        error: Human readable description of the failure.
    """

    model_config = ConfigDict(frozen=True)

    error: str
