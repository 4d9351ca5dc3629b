"""Command-line entry point: run a single scan or serve the dashboard API.

Usage:
    tokenscan burns PLS
    tokenscan burns INC --address 0x2fa878ab3f87cc1c9737fc071108f904c0b0c95d
    tokenscan holders 0x... --csv holders.csv
    tokenscan serve
"""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path

from loguru import logger

from tokenscan import export
from tokenscan.api.routers.scans import (
    burn_response,
    holders_response,
    liquidity_response,
    volume_response,
)
from tokenscan.config.settings import settings
from tokenscan.parsers.exceptions import ScanCancelledError, UpstreamError, ValidationError
from tokenscan.parsers.scan_types import CancelToken
from tokenscan.parsers.services import ScanServices, build_services
from tokenscan.utils.logger import setup_logger

EXIT_UPSTREAM = 1
EXIT_VALIDATION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tokenscan", description="Token burn/holder/liquidity/volume scanner")
    sub = parser.add_subparsers(dest="command", required=True)

    burns = sub.add_parser("burns", help="Tokens held at burn addresses")
    burns.add_argument("name", help=f"Token name/symbol ({settings.native_token_symbol} for the native coin)")
    burns.add_argument("--address", default=None, help="Token contract (required unless native)")

    for command, help_text in (
        ("holders", "Top holder distribution"),
        ("liquidity", "Liquidity per trading pair"),
        ("volume", "24h volume share per trading pair"),
    ):
        cmd = sub.add_parser(command, help=help_text)
        cmd.add_argument("address", help="Token contract address")
        cmd.add_argument("--name", default="token", help="Token name for the export file name")

    for cmd in sub.choices.values():
        cmd.add_argument("--csv", type=Path, default=None, help="Write the export file here")

    sub.add_parser("serve", help="Run the dashboard API")
    return parser


async def run_scan(args: argparse.Namespace, services: ScanServices, cancel: CancelToken) -> tuple[dict, str]:
    """Run the scan named by ``args`` and return (json summary, export text)."""
    if args.command == "burns":
        burns = await services.burns.scan(args.name, args.address, cancel=cancel)
        return burn_response(burns).model_dump(), export.burns_to_text(burns, args.address)

    if args.command == "holders":
        last_logged = 0

        def on_progress(processed: int, target: int) -> None:
            nonlocal last_logged
            if processed - last_logged >= 50 or processed == target:
                last_logged = processed
                logger.info(f"[HOLDERS] {processed}/{target}")

        holders = await services.holders.get_token_holders(
            args.address, on_progress=on_progress, cancel=cancel
        )
        return holders_response(holders).model_dump(), export.holders_to_csv(holders)

    if args.command == "liquidity":
        liquidity = await services.liquidity.get_pairs_data(args.address, cancel=cancel)
        return liquidity_response(liquidity).model_dump(), export.liquidity_to_csv(liquidity)

    volume = await services.volume.get_volume_data(args.address, cancel=cancel)
    return volume_response(volume).model_dump(), export.volume_to_csv(volume)


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(json_logs=settings.json_logs, level=settings.log_level, log_dir=settings.log_dir or None)

    if args.command == "serve":
        from tokenscan.api.server import run_dashboard_server

        await run_dashboard_server()
        return 0

    cancel = CancelToken()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, cancel.cancel)

    services = build_services(settings)
    try:
        summary, text = await run_scan(args, services, cancel)
    except ValidationError as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_VALIDATION
    except ScanCancelledError:
        logger.warning("Scan cancelled")
        return EXIT_UPSTREAM
    except UpstreamError as e:
        logger.error(f"Upstream unavailable, try again later ({type(e).__name__})")
        logger.debug(f"Upstream failure detail: {e!r}")
        return EXIT_UPSTREAM
    finally:
        await services.close()

    print(json.dumps(summary, indent=2))
    if args.csv is not None:
        args.csv.write_text(text)
        logger.info(f"Export written to {args.csv}")
    return 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
