# src/main.py — v1
"""CLI entry point — allocate, search, list commands.

Usage:
    trackgen allocate --origin MY --destination ID --weight 1.234 \
        --created-at 2018-11-20T19:29:32+08:00 --customer-id <uuid> \
        --customer-name "RedBox Logistics" --customer-slug redbox-logistics
    trackgen search [--tracking-number N] [--customer-name S] ...
    trackgen list [--page 0] [--size 10]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from datetime import datetime
from decimal import Decimal

from trackgen.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        from trackgen.api.models import ErrorResponse

        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        print(ErrorResponse.from_exception(exc).model_dump_json(indent=2))
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="trackgen",
        description=f"trackgen v{__version__} — tracking number allocation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- allocate ---
    p_alloc = subparsers.add_parser("allocate", help="Allocate a tracking number")
    p_alloc.add_argument("--origin", required=True, help="Origin country code (ISO alpha-2)")
    p_alloc.add_argument("--destination", required=True, help="Destination country code")
    p_alloc.add_argument("--weight", required=True, type=Decimal, help="Weight in kg")
    p_alloc.add_argument(
        "--created-at", required=True, type=datetime.fromisoformat,
        help="Order creation timestamp (RFC 3339)",
    )
    p_alloc.add_argument("--customer-id", required=True, type=uuid.UUID)
    p_alloc.add_argument("--customer-name", required=True)
    p_alloc.add_argument("--customer-slug", required=True)
    p_alloc.set_defaults(func=_cmd_allocate)

    # --- search ---
    p_search = subparsers.add_parser("search", help="Search tracking numbers")
    p_search.add_argument("--tracking-number", default=None)
    p_search.add_argument("--customer-name", default=None)
    p_search.add_argument("--customer-slug", default=None)
    p_search.add_argument("--origin", default=None)
    p_search.add_argument("--destination", default=None)
    p_search.set_defaults(func=_cmd_search)

    # --- list ---
    p_list = subparsers.add_parser("list", help="List tracking numbers, newest first")
    p_list.add_argument("--page", type=int, default=0, help="Page index (default: 0)")
    p_list.add_argument("--size", type=int, default=10, help="Page size (default: 10)")
    p_list.set_defaults(func=_cmd_list)

    return parser


async def _run(args: argparse.Namespace) -> int:
    from trackgen.api.facade import TrackingService
    from trackgen.config.settings import Settings

    settings = Settings()
    _setup_logging(settings, args.verbose)
    service = TrackingService.from_settings(settings)
    try:
        return await args.func(service, args)
    finally:
        await service.aclose()


async def _cmd_allocate(service, args: argparse.Namespace) -> int:
    from trackgen.core.models import GenerationInput

    request = GenerationInput(
        origin_country_id=args.origin,
        destination_country_id=args.destination,
        weight=args.weight,
        created_at=args.created_at,
        customer_id=args.customer_id,
        customer_name=args.customer_name,
        customer_slug=args.customer_slug,
    )
    response = await service.next_tracking_number(request)
    print(response.model_dump_json(indent=2))
    return 0


async def _cmd_search(service, args: argparse.Namespace) -> int:
    response = await service.search(
        tracking_number=args.tracking_number,
        customer_name=args.customer_name,
        customer_slug=args.customer_slug,
        origin_country_id=args.origin,
        destination_country_id=args.destination,
    )
    print(response.model_dump_json(indent=2))
    return 0


async def _cmd_list(service, args: argparse.Namespace) -> int:
    response = await service.list_tracking_numbers(args.page, args.size)
    print(response.model_dump_json(indent=2))
    return 0


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage; stdout is reserved for command output."""
    from trackgen.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format="text" if verbose else settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
