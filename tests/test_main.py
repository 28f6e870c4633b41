"""Tests for the command line entry point and service wiring.

Checks that the DI container builds configured services and that each CLI
sub-command prints JSON and reports failures through the exit status.
"""

import argparse
import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from dependency_injector import providers

from servicepack.core.container import Container, build_container
from servicepack.main import main, parse_pair
from servicepack.models import (
    ConversionPair,
    ConversionQuote,
    CountryInfo,
    PairLevelError,
    PairRate,
    ServiceError,
)
from servicepack.services.conversion import CurrencyConversionService
from servicepack.services.geolocation import GeolocationClient


@pytest.fixture
def container(small_dataset):
    """Container with mocked remote collaborators."""
    container = Container()
    container.config.from_dict(
        {
            "conversion": {"api_key": "test", "base_url": "https://rates.test", "timeout": 1, "verify_ssl": True},
            "geolocation": {"base_url": "http://geo.test", "timeout": 1, "verify_ssl": True},
        }
    )
    container.conversion_service.override(providers.Object(AsyncMock(spec=CurrencyConversionService)))
    container.geolocation_client.override(providers.Object(AsyncMock(spec=GeolocationClient)))
    container.reference_dataset.override(providers.Object(small_dataset))
    return container


def _run(argv, container):
    with patch("servicepack.main.build_container", return_value=container):
        return main(argv)


def test_build_container_wires_services():
    """Test the container builds singletons from configuration."""
    container = build_container()
    service = container.conversion_service()

    assert isinstance(service, CurrencyConversionService)
    assert service is container.conversion_service()
    assert service.http_client.base_url == "https://marketdata.tradermade.com/api/v1"
    assert container.geolocation_client().http_client.base_url == "http://ip-api.com"


def test_parse_pair():
    """Test pair arguments in both accepted spellings."""
    assert parse_pair("usdmyr") == ConversionPair(from_currency="USD", to_currency="MYR")
    assert parse_pair("BTC/USDT") == ConversionPair(from_currency="BTC", to_currency="USDT")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_pair("USD")


def test_convert_command(container, capsys):
    """Test convert prints the quote with from/to keys."""
    container.conversion_service().convert.return_value = ConversionQuote(
        from_currency="USD", to_currency="MYR", amount=Decimal("3000"), total=Decimal("12900.0")
    )

    exit_code = _run(["convert", "USD", "MYR", "3000"], container)
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert output["from"] == "USD"
    assert output["to"] == "MYR"
    container.conversion_service().convert.assert_awaited_once_with("USD", "MYR", 3000.0)


def test_currencies_command_prints_names(container, capsys):
    """Test the listing prints codes with their names."""
    container.conversion_service().list_currencies.return_value = {"USD": "US Dollar", "MYR": "Malaysian Ringgit"}

    exit_code = _run(["currencies"], container)

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"USD": "US Dollar", "MYR": "Malaysian Ringgit"}


def test_currencies_command_error(container, capsys):
    """Test a ServiceError result exits with status 1."""
    container.conversion_service().list_currencies.return_value = ServiceError(error="HTTP 401: Unauthorized")

    exit_code = _run(["currencies"], container)

    assert exit_code == 1
    assert json.loads(capsys.readouterr().out) == {"error": "HTTP 401: Unauthorized"}


def test_batch_command(container, capsys):
    """Test batch prints one entry per requested pair."""
    container.conversion_service().convert_currencies.return_value = [
        PairLevelError(from_currency="MYR", to_currency="IDR", error="not available"),
        PairRate(from_currency="MYR", to_currency="USD", rate=Decimal("0.25")),
    ]

    exit_code = _run(["batch", "MYRIDR", "MYR/USD"], container)
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert [entry["from_currency"] for entry in output] == ["MYR", "MYR"]
    assert output[0]["error"] == "not available"
    pairs = container.conversion_service().convert_currencies.await_args.args[0]
    assert [pair.token for pair in pairs] == ["MYRIDR", "MYRUSD"]


def test_locate_command(container, capsys):
    """Test locate prints the enriched profile."""
    container.geolocation_client().lookup.return_value = CountryInfo(name="Singapore", code="SG")

    exit_code = _run(["locate", "34.124.137.169"], container)
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert output["country"] == {"name": "Singapore", "code": "SG"}
    assert output["currency"] == {"name": "Singapore Dollar", "code": "SGD"}
    assert output["locales"] == ["zh_Hans_SG", "en_SG"]
