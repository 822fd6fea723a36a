"""Solana USDC backfill — pages a wallet's signatures back to a time boundary."""

import asyncio
import logging
from collections.abc import Collection
from datetime import UTC, datetime, timedelta

import base58
from pydantic import ValidationError

from usdcindexer.domain.enums import BackfillStop, TransferDirection
from usdcindexer.domain.mints import USDC_MINTS
from usdcindexer.exceptions import ConfigurationError, TransientFetchError
from usdcindexer.infra.blockchain.solana.rpc_client import MAX_SIGNATURES_LIMIT, SolanaRPCClient
from usdcindexer.parser.reconciler import reconcile_transaction
from usdcindexer.parser.types import BackfillResult, TransferEvent

logger = logging.getLogger(__name__)

PUBKEY_LENGTH = 32


def validate_wallet_address(address: str) -> str:
    """Return the address if it is a base58 Solana public key, else raise ConfigurationError."""
    address = (address or "").strip()
    if not address:
        raise ConfigurationError("Wallet address must be non-empty")
    try:
        decoded = base58.b58decode(address)
    except ValueError as e:
        raise ConfigurationError(f"Invalid wallet address: {address}") from e
    if len(decoded) != PUBKEY_LENGTH:
        raise ConfigurationError(f"Invalid wallet address: {address} (decodes to {len(decoded)} bytes)")
    return address


def _to_datetime(block_time: int | None) -> datetime | None:
    if block_time is None:
        return None
    return datetime.fromtimestamp(block_time, tz=UTC)


class TransferBackfill:
    """Rebuilds a wallet's USDC transfers over a lookback window.

    Walks getSignaturesForAddress newest-first with a `before` cursor and stops
    once a page reaches past the window or history runs out. Failed
    signatures are skipped; a transaction that cannot be fetched is logged and
    skipped without ending the run.
    """

    def __init__(
        self,
        rpc: SolanaRPCClient,
        wallet: str,
        *,
        tracked_mints: Collection[str] = USDC_MINTS,
        page_size: int = MAX_SIGNATURES_LIMIT,
        page_delay: float = 0.1,
    ) -> None:
        self._rpc = rpc
        self._wallet = validate_wallet_address(wallet)
        self._tracked_mints = frozenset(tracked_mints)
        if page_size <= 0:
            raise ConfigurationError(f"page_size must be positive, got {page_size}")
        # The node never returns more than its limit; a larger size would make every page look short
        self._page_size = min(page_size, MAX_SIGNATURES_LIMIT)
        self._page_delay = page_delay

    @property
    def wallet(self) -> str:
        return self._wallet

    async def backfill(self, lookback: timedelta, now: datetime | None = None) -> list[TransferEvent]:
        """Transfers within `lookback` of `now`, newest-first."""
        result = await self.run(lookback, now=now)
        return result.transfers

    async def run(self, lookback: timedelta, now: datetime | None = None) -> BackfillResult:
        if now is None:
            now = datetime.now(UTC)
        target_time = now - lookback

        logger.info("Starting USDC backfill for %s back to %s", self._wallet, target_time.isoformat())

        transfers: list[TransferEvent] = []
        before: str | None = None
        pages = seen = failed = errors = 0

        while True:
            try:
                batch = await self._rpc.get_signatures(self._wallet, before=before, limit=self._page_size)
            except TransientFetchError:
                logger.exception("Failed to fetch signature page (before=%s); keeping partial results", before)
                errors += 1
                stop = BackfillStop.FETCH_ERROR
                break

            if not batch:
                logger.info("No more signatures for %s", self._wallet)
                stop = BackfillStop.EXHAUSTED
                break

            pages += 1
            logger.info("Processing page %d (%d signatures)", pages, len(batch))

            page_transfers: list[TransferEvent] = []
            oldest_in_page = now

            for sig_info in batch:
                block_time = _to_datetime(sig_info.get("blockTime"))
                if block_time is not None:
                    oldest_in_page = min(oldest_in_page, block_time)
                    if block_time < target_time:
                        logger.info("Reached target time at %s", sig_info["signature"])
                        break

                seen += 1
                if sig_info.get("err") is not None:
                    logger.debug("Skipping failed transaction %s: %s", sig_info["signature"], sig_info["err"])
                    failed += 1
                    continue

                try:
                    events = await self._process_transaction(sig_info)
                except TransientFetchError as e:
                    logger.warning("Error processing transaction %s: %s", sig_info["signature"], e)
                    errors += 1
                    continue
                page_transfers.extend(events)

            transfers.extend(page_transfers)

            if oldest_in_page < target_time:
                stop = BackfillStop.BOUNDARY
                break

            if len(batch) < self._page_size:
                logger.info("Fetched all available signatures for %s", self._wallet)
                stop = BackfillStop.EXHAUSTED
                break

            before = batch[-1]["signature"]
            await asyncio.sleep(self._page_delay)

        # The boundary page can still carry entries older than the window
        in_window = [t for t in transfers if t.timestamp >= target_time]

        logger.info(
            "Found %d USDC transfers for %s (%s, %d pages, %d failed skipped, %d fetch errors)",
            len(in_window), self._wallet, stop.value, pages, failed, errors,
        )
        return BackfillResult(
            transfers=in_window,
            stop_reason=stop,
            target_time=target_time,
            pages_fetched=pages,
            signatures_seen=seen,
            failed_skipped=failed,
            fetch_errors=errors,
        )

    async def _process_transaction(self, sig_info: dict) -> list[TransferEvent]:
        signature = sig_info["signature"]
        tx_data = await self._rpc.get_transaction(signature)
        if tx_data is None:
            logger.warning("Transaction %s not available from RPC node", signature)
            return []
        if not isinstance(tx_data, dict):
            raise TransientFetchError(f"Malformed transaction {signature}: expected object, got {type(tx_data).__name__}")

        try:
            return self._build_events(signature, sig_info, tx_data)
        except (ValidationError, TypeError, ValueError, AttributeError) as e:
            raise TransientFetchError(f"Malformed transaction {signature}: {e}") from e

    def _build_events(self, signature: str, sig_info: dict, tx_data: dict) -> list[TransferEvent]:
        block_time = tx_data.get("blockTime")
        if block_time is None:
            block_time = sig_info.get("blockTime")
        timestamp = _to_datetime(block_time)
        if timestamp is None:
            logger.debug("Transaction %s has no block time, skipping", signature)
            return []

        events: list[TransferEvent] = []
        for candidate in reconcile_transaction(tx_data, self._tracked_mints):
            if candidate.from_owner == self._wallet:
                direction = TransferDirection.SENT
            elif candidate.to_owner == self._wallet:
                direction = TransferDirection.RECEIVED
            else:
                continue

            events.append(TransferEvent(
                signature=signature,
                timestamp=timestamp,
                amount=candidate.amount,
                direction=direction,
                from_address=candidate.from_owner,
                to_address=candidate.to_owner,
            ))

        return events
