"""Command line entry point.

Thin wrapper over the two services for manual lookups: geolocate an IP
address, convert an amount, list supported currencies or fetch live rates for
several pairs. Results are printed as JSON; the exit status is 1 when the
service reported a failure.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

from pydantic import BaseModel

from .core.container import Container, build_container
from .models import ConversionPair, ServiceError
from .services.geolocation import GeoEnrichmentService


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(message)s",
        level=level,
    )


def parse_pair(value: str) -> ConversionPair:
    """Parse a 'USDMYR' or 'USD/MYR' argument into a ConversionPair."""
    if "/" in value:
        from_currency, _, to_currency = value.partition("/")
    elif len(value) == 6:
        from_currency, to_currency = value[:3], value[3:]
    else:
        raise argparse.ArgumentTypeError(f"Expected a pair like USDMYR or USD/MYR, got {value!r}")
    return ConversionPair(from_currency=from_currency.upper(), to_currency=to_currency.upper())


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(prog="servicepack", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    locate = commands.add_parser("locate", help="Geolocate an IP address")
    locate.add_argument("ip_address")

    convert = commands.add_parser("convert", help="Convert an amount between currencies")
    convert.add_argument("from_currency")
    convert.add_argument("to_currency")
    convert.add_argument("amount", type=float)

    commands.add_parser("currencies", help="List supported currencies")
    commands.add_parser("crypto", help="List supported crypto currencies")

    batch = commands.add_parser("batch", help="Live rates for several pairs")
    batch.add_argument("pairs", nargs="+", type=parse_pair)

    return parser


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True)
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


async def run(args: argparse.Namespace, container: Container) -> tuple[Any, bool]:
    """Execute one parsed command.

    Args:
        args: Parsed command line.
        container: Wired service container.

    Returns:
        JSON-ready result and whether the command succeeded.
    """
    if args.command == "locate":
        service = await GeoEnrichmentService.locate(
            args.ip_address,
            client=container.geolocation_client(),
            dataset=container.reference_dataset(),
        )
        if service.error is not None:
            return {"error": service.error}, False
        return _to_jsonable(service.get_all()), True

    conversion = container.conversion_service()
    if args.command == "convert":
        result = await conversion.convert(args.from_currency, args.to_currency, args.amount)
    elif args.command == "currencies":
        result = await conversion.list_currencies()
    elif args.command == "crypto":
        result = await conversion.list_crypto()
    else:
        result = await conversion.convert_currencies(args.pairs)

    return _to_jsonable(result), not isinstance(result, ServiceError)


def main(argv: list[str] | None = None) -> int:
    """Main application entry point.

    Args:
        argv: Command line arguments, defaults to ``sys.argv[1:]``.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    container = build_container()
    output, ok = asyncio.run(run(args, container))
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
