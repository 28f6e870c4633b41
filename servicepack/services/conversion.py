"""Currency conversion service backed by the TraderMade market-data API.

Provides single conversions, supported currency listings and batch live
conversions. Every public method returns either its result model or a
``ServiceError``; transport and payload problems never escape as exceptions.

Batch conversions are reconciled into one result per requested pair, in
request order, so callers can correlate result ``i`` with request ``i``.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

import aiohttp
from pydantic import ValidationError

from ..config import config
from ..errors import ServicePackError
from ..models import (
    ConversionPair,
    ConversionPairResult,
    ConversionQuote,
    PairLevelError,
    PairRate,
    ServiceError,
)
from .http_client import JsonHttpClient

logger = logging.getLogger(__name__)

CONVERT_PATH = "/convert"
CONVERT_LIVE_PATH = "/live"
CURRENCY_LIST_PATH = "/live_currencies_list"
CRYPTO_LIST_PATH = "/live_crypto_list"

RESULT_NOT_FOUND = "Conversion result not found in response."
MISSING_QUOTE = "No quote returned for this pair."


class CurrencyConversionService:
    """TraderMade client sharing one API key across all requests."""

    def __init__(self, api_key: str | None = None, http_client: JsonHttpClient | None = None):
        """Initialize conversion service.

        Args:
            api_key: TraderMade API key, taken from configuration if omitted.
            http_client: HTTP collaborator, built from configuration if omitted.
        """
        self.api_key = api_key if api_key is not None else config.conversion.api_key
        if http_client is None:
            http_client = JsonHttpClient(
                config.conversion.base_url,
                timeout=config.conversion.timeout,
                verify_ssl=config.conversion.verify_ssl,
            )
        self.http_client = http_client

    async def _fetch(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> Any:
        if not self.api_key:
            raise ServicePackError("TraderMade API key is not configured")

        query = {"api_key": self.api_key, **(params or {})}
        return await self.http_client.get(path, params=query, session=session)

    async def convert(
        self,
        from_currency: str,
        to_currency: str,
        amount: Decimal | float | int,
        session: aiohttp.ClientSession | None = None,
    ) -> ConversionQuote | ServiceError:
        """Convert an amount from one currency to another.

        Args:
            from_currency: Source currency code (e.g., 'USD').
            to_currency: Target currency code (e.g., 'MYR').
            amount: Amount in the source currency; the provider validates it.
            session: Optional HTTP session to reuse.

        Returns:
            ConversionQuote with the provider's total, or ServiceError.
        """
        params = {"from": from_currency, "to": to_currency, "amount": amount}
        try:
            data = await self._fetch(CONVERT_PATH, params, session)
        except ServicePackError as e:
            logger.error(f"Conversion {from_currency}->{to_currency} failed: {e}")
            return ServiceError(error=str(e))

        if not isinstance(data, dict):
            logger.warning(f"Unexpected conversion payload: {data!r}")
            return ServiceError(error=RESULT_NOT_FOUND)

        try:
            quote = ConversionQuote(
                from_currency=data.get("base_currency"),
                to_currency=data.get("quote_currency"),
                amount=amount,
                total=data.get("total"),
            )
        except ValidationError:
            logger.warning(f"Conversion payload missing fields: {data!r}")
            return ServiceError(error=RESULT_NOT_FOUND)

        logger.info(f"Converted {amount} {quote.from_currency} -> {quote.total} {quote.to_currency}")
        return quote

    async def list_currencies(
        self, session: aiohttp.ClientSession | None = None
    ) -> dict[str, str] | list[str] | ServiceError:
        """List currencies currently supported by the provider.

        Returns:
            ``{code: name}`` mapping in provider order, the plain list of
            codes when the provider sends no names, or ServiceError.
        """
        return await self._list(CURRENCY_LIST_PATH, session)

    async def list_crypto(
        self, session: aiohttp.ClientSession | None = None
    ) -> dict[str, str] | list[str] | ServiceError:
        """List supported crypto currencies, shaped like ``list_currencies``."""
        return await self._list(CRYPTO_LIST_PATH, session)

    async def _list(
        self, path: str, session: aiohttp.ClientSession | None
    ) -> dict[str, str] | list[str] | ServiceError:
        try:
            data = await self._fetch(path, session=session)
        except ServicePackError as e:
            logger.error(f"Listing {path} failed: {e}")
            return ServiceError(error=str(e))

        available = data.get("available_currencies") if isinstance(data, dict) else None
        if isinstance(available, dict):
            return {str(code): str(name) for code, name in available.items()}
        if isinstance(available, list):
            return [str(code) for code in available]

        logger.warning(f"Listing {path} returned no available_currencies")
        return ServiceError(error=RESULT_NOT_FOUND)

    async def convert_currencies(
        self,
        pairs: Iterable[ConversionPair | Mapping[str, str]],
        session: aiohttp.ClientSession | None = None,
    ) -> list[ConversionPairResult] | ServiceError:
        """Fetch live rates for several currency pairs in one request.

        Args:
            pairs: Ordered pairs such as ``[{"from": "MYR", "to": "IDR"}]``.
                Duplicates are allowed and each gets its own result.
            session: Optional HTTP session to reuse.

        Returns:
            One PairRate or PairLevelError per requested pair, in request
            order, or a single ServiceError if the whole request failed.
        """
        requested = [_as_pair(pair) for pair in pairs]
        if not requested:
            return []

        token = build_currency_token(requested)
        try:
            data = await self._fetch(CONVERT_LIVE_PATH, {"currency": token}, session)
        except ServicePackError as e:
            logger.error(f"Batch conversion {token} failed: {e}")
            return ServiceError(error=str(e))

        results = reconcile_quotes(requested, data)
        if isinstance(results, list):
            failed = sum(isinstance(result, PairLevelError) for result in results)
            logger.info(f"Batch conversion {token}: {len(results) - failed} ok, {failed} failed")
        return results


def _as_pair(pair: ConversionPair | Mapping[str, str]) -> ConversionPair:
    if isinstance(pair, ConversionPair):
        return pair
    return ConversionPair.model_validate(pair)


def build_currency_token(pairs: Iterable[ConversionPair]) -> str:
    """Join pairs into the provider's ``currency`` parameter, e.g. 'USDMYR,MYRIDR'."""
    return ",".join(pair.token for pair in pairs)


def reconcile_quotes(
    pairs: Sequence[ConversionPair], payload: Any
) -> list[ConversionPairResult] | ServiceError:
    """Turn a live-quotes payload into one result per requested pair.

    Quote entries are matched to requests by position. When the provider keys
    the quotes by pair token (``{"USDMYR": {...}}``) and the keys match the
    request, entries are looked up by token instead, which also serves
    duplicate pairs. Missing entries become PairLevelError values and surplus
    entries are dropped, so the result length always equals ``len(pairs)``.

    Args:
        pairs: Requested pairs in request order.
        payload: Decoded response body.

    Returns:
        Per-pair results, or ServiceError when the payload has no quotes.
    """
    quotes = payload.get("quotes") if isinstance(payload, dict) else None

    if isinstance(quotes, dict):
        entries = _align_keyed_quotes(pairs, quotes)
    elif isinstance(quotes, list):
        entries = list(quotes)
    else:
        logger.warning("Live conversion response carries no quotes")
        return ServiceError(error=RESULT_NOT_FOUND)

    if len(entries) > len(pairs):
        logger.warning(f"Provider returned {len(entries)} quotes for {len(pairs)} pairs")
    elif len(entries) < len(pairs):
        logger.warning(f"Provider returned only {len(entries)} quotes for {len(pairs)} pairs")

    results: list[ConversionPairResult] = []
    for index, pair in enumerate(pairs):
        entry = entries[index] if index < len(entries) else None
        results.append(_reconcile_entry(pair, entry))
    return results


def _align_keyed_quotes(
    pairs: Sequence[ConversionPair], quotes: Mapping[str, Any]
) -> list[Any]:
    if any(pair.token in quotes for pair in pairs):
        return [quotes.get(pair.token) for pair in pairs]
    return list(quotes.values())


def _reconcile_entry(pair: ConversionPair, entry: Any) -> ConversionPairResult:
    if entry is None:
        return _pair_error(pair, MISSING_QUOTE)
    if not isinstance(entry, dict):
        return _pair_error(pair, "Malformed quote entry.")

    if entry.get("error") is not None:
        message = entry.get("message") or f"Error {entry['error']}"
        return _pair_error(pair, str(message))

    try:
        return PairRate(
            from_currency=entry.get("base_currency") or pair.from_currency,
            to_currency=entry.get("quote_currency") or pair.to_currency,
            rate=entry.get("mid"),
        )
    except ValidationError:
        return _pair_error(pair, "Quote has no usable mid rate.")


def _pair_error(pair: ConversionPair, message: str) -> PairLevelError:
    return PairLevelError(
        from_currency=pair.from_currency,
        to_currency=pair.to_currency,
        error=message,
    )
