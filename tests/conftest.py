"""Global test configuration and fixtures.

Provides shared fixtures for the service tests: reference datasets, mocked
HTTP collaborators and canned provider payloads. Ensures the process-wide
dataset is reset between tests.
"""

from unittest.mock import AsyncMock

import pytest

from servicepack.models import CountryRecord
from servicepack.services.http_client import JsonHttpClient
from servicepack.services.reference_data import ReferenceDataset, reset_reference_dataset


@pytest.fixture(autouse=True)
def fresh_reference_dataset():
    """Make every test start without a cached shared dataset."""
    reset_reference_dataset()
    yield
    reset_reference_dataset()


@pytest.fixture
def bundled_dataset():
    """The packaged countries.json dataset."""
    return ReferenceDataset.load()


@pytest.fixture
def small_dataset():
    """Three-country dataset for focused lookups."""
    return ReferenceDataset(
        (
            CountryRecord(
                alpha2="US",
                alpha3="USA",
                name="United States of America",
                currency="USD",
                currency_name="US Dollar",
                locales=["en_US", "es_US", "haw_US"],
                languages=["en"],
            ),
            CountryRecord(
                alpha2="SG",
                alpha3="SGP",
                name="Singapore",
                currency="SGD",
                currency_name="Singapore Dollar",
                locales=["zh_Hans_SG", "en_SG"],
                languages=["en", "ms", "ta", "zh"],
            ),
            CountryRecord(
                alpha2="MY",
                alpha3="MYS",
                name="Malaysia",
                currency="MYR",
                currency_name="Malaysian Ringgit",
                locales=["ms_MY", "ta_MY"],
                languages=["ms"],
            ),
        )
    )


@pytest.fixture
def mock_http_client():
    """JsonHttpClient double whose ``get`` is an AsyncMock."""
    return AsyncMock(spec=JsonHttpClient)


@pytest.fixture
def sample_payloads():
    """Canned TraderMade and ip-api payloads."""
    return {
        'convert': {
            "base_currency": "USD",
            "quote_currency": "MYR",
            "quote": 4.3,
            "total": 12900.0,
        },
        'live_mixed': {
            "endpoint": "live",
            "quotes": [
                {"error": 400, "instrument": "MYRIDR", "message": "Currency pair MYRIDR is not available"},
                {"base_currency": "MYR", "quote_currency": "USD", "mid": 0.25, "bid": 0.2499, "ask": 0.2501},
            ],
        },
        'currencies': {
            "available_currencies": {"USD": "US Dollar", "MYR": "Malaysian Ringgit", "IDR": "Indonesian Rupiah"},
        },
        'geo_success': {
            "status": "success",
            "country": "United States",
            "countryCode": "US",
            "query": "8.8.8.8",
        },
        'geo_fail': {
            "status": "fail",
            "message": "private range",
            "query": "10.0.0.1",
        },
    }
