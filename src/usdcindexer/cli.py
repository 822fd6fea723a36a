"""Command-line entry point.

Usage:
    usdc-indexer --wallet <ADDRESS> [--rpc-url URL] [--hours 24] [--service]
    python -m usdcindexer --wallet <ADDRESS>
"""

import argparse
import asyncio
import logging
from datetime import timedelta

from dependency_injector import providers

from usdcindexer.config import Settings, settings as default_settings
from usdcindexer.container import Container
from usdcindexer.exceptions import ConfigurationError
from usdcindexer.infra.blockchain.solana.backfill import TransferBackfill, validate_wallet_address
from usdcindexer.parser.types import BackfillResult
from usdcindexer.report.json_writer import write_transfers
from usdcindexer.report.summary import format_summary
from usdcindexer.workers.scheduler import run_periodically

logger = logging.getLogger("usdcindexer.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="usdc-indexer", description="Index USDC transfers for a Solana wallet")
    parser.add_argument("-w", "--wallet", required=True, help="Wallet address to index")
    parser.add_argument(
        "-r",
        "--rpc-url",
        default=default_settings.solana_rpc_url,
        help="Solana RPC endpoint URL",
    )
    parser.add_argument("--hours", type=int, default=default_settings.lookback_hours, help="Hours to look back")
    parser.add_argument(
        "--service",
        action="store_true",
        help="Keep running and re-index every hour",
    )
    parser.add_argument("-o", "--output", default=default_settings.output_path, help="JSON output file")
    parser.add_argument("--log-level", default=default_settings.log_level, help="Logging level (INFO, DEBUG, ...)")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Overlay CLI flags on environment settings."""
    if args.hours <= 0:
        raise ConfigurationError(f"--hours must be positive, got {args.hours}")
    base = base or default_settings
    return base.model_copy(update={
        "solana_rpc_url": args.rpc_url,
        "lookback_hours": args.hours,
        "output_path": args.output,
    })


async def run_once(container: Container, wallet: str) -> BackfillResult:
    """One independent indexing cycle: backfill, report, write JSON."""
    cfg = container.settings()

    async with container.http_client() as http_client:
        rpc = container.rpc_client(http_client=http_client)
        backfill = TransferBackfill(
            rpc,
            wallet,
            page_size=cfg.page_size,
            page_delay=cfg.page_delay_seconds,
        )
        result = await backfill.run(timedelta(hours=cfg.lookback_hours))

    for line in format_summary(result.transfers):
        logger.info(line)
    write_transfers(cfg.output_path, result.transfers)
    return result


async def run(args: argparse.Namespace) -> int:
    cfg = build_settings(args)
    wallet = validate_wallet_address(args.wallet)

    container = Container()
    container.settings.override(providers.Object(cfg))

    logger.info("Target wallet: %s", wallet)
    logger.info("RPC endpoint: %s", cfg.solana_rpc_url)
    logger.info("Hours to index: %d", cfg.lookback_hours)

    if args.service:
        logger.info("Running as a service, re-indexing every %.0fs", cfg.service_interval_seconds)
        await run_periodically(lambda: run_once(container, wallet), cfg.service_interval_seconds)
        return EXIT_OK

    try:
        await run_once(container, wallet)
    except Exception:
        logger.exception("Indexing failed")
        return EXIT_FAILED
    logger.info("Indexing completed successfully")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
