"""Console summary of a backfill: per-transfer lines and totals in USDC."""

from decimal import Decimal

from pydantic import BaseModel

from usdcindexer.domain.enums import TransferDirection
from usdcindexer.domain.mints import USDC_DECIMALS, USDC_SYMBOL
from usdcindexer.parser.types import TransferEvent

_SCALE = Decimal(10) ** USDC_DECIMALS


def to_ui_amount(raw_amount: int) -> Decimal:
    """Raw units -> USDC."""
    return Decimal(raw_amount) / _SCALE


class TransferSummary(BaseModel):
    count: int = 0
    total_sent: int = 0
    total_received: int = 0

    @property
    def net_change(self) -> int:
        return self.total_received - self.total_sent


def summarize(transfers: list[TransferEvent]) -> TransferSummary:
    summary = TransferSummary(count=len(transfers))
    for t in transfers:
        if t.direction == TransferDirection.SENT:
            summary.total_sent += t.amount
        else:
            summary.total_received += t.amount
    return summary


def format_transfer(transfer: TransferEvent) -> str:
    if transfer.direction == TransferDirection.SENT:
        counterparty = f"To: {transfer.to_address[:8]}"
    else:
        counterparty = f"From: {transfer.from_address[:8]}"
    return (
        f"{transfer.direction.value:<8} | {transfer.timestamp:%Y-%m-%d %H:%M:%S} UTC | "
        f"{to_ui_amount(transfer.amount)} {USDC_SYMBOL} | {counterparty} | {transfer.signature}"
    )


def format_summary(transfers: list[TransferEvent]) -> list[str]:
    """Lines for the console report."""
    if not transfers:
        return [f"No {USDC_SYMBOL} transfers found in the specified time period."]

    summary = summarize(transfers)
    lines = [f"{USDC_SYMBOL} transfer summary ({summary.count} transfers):"]
    lines.extend(format_transfer(t) for t in transfers)
    lines.append(f"Total received: {to_ui_amount(summary.total_received)} {USDC_SYMBOL}")
    lines.append(f"Total sent: {to_ui_amount(summary.total_sent)} {USDC_SYMBOL}")
    lines.append(f"Net change: {to_ui_amount(summary.net_change)} {USDC_SYMBOL}")
    return lines
