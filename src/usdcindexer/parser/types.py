"""Core data types for balance-diff reconciliation and backfill results."""

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from usdcindexer.domain.enums import BackfillStop, TransferDirection

logger = logging.getLogger(__name__)


class BalanceSnapshotEntry(BaseModel):
    """One entry of a transaction's preTokenBalances / postTokenBalances."""

    account_index: int
    mint: str
    owner: str | None = None
    raw_amount: int = 0  # smallest unit, from uiTokenAmount.amount

    @classmethod
    def from_rpc(cls, token_balance: dict[str, Any]) -> "BalanceSnapshotEntry":
        """Build from the RPC token balance dict.

        The amount arrives as a decimal string so u64 balances survive JSON;
        an unparsable amount is treated as 0.
        """
        ui_amount = token_balance.get("uiTokenAmount") or {}
        raw = ui_amount.get("amount", "0")
        try:
            amount = int(raw)
        except (TypeError, ValueError):
            logger.debug("Unparsable token amount %r at index %s", raw, token_balance.get("accountIndex"))
            amount = 0

        return cls(
            account_index=int(token_balance.get("accountIndex", -1)),
            mint=token_balance.get("mint", ""),
            owner=token_balance.get("owner"),
            raw_amount=amount,
        )


class BalanceChange(BaseModel):
    """Net change of one token account within a single transaction."""

    account_index: int
    delta: int  # post - pre, never 0
    owner: str = ""


class TransferCandidate(BaseModel):
    """A debit/credit pair matched by magnitude. Not yet tied to a transaction."""

    mint: str
    amount: int = Field(gt=0)
    from_owner: str
    to_owner: str


class TransferEvent(BaseModel):
    """A USDC transfer touching the tracked wallet."""

    model_config = ConfigDict(populate_by_name=True)

    signature: str
    timestamp: datetime
    amount: int = Field(gt=0)  # raw units (10^-6 USDC)
    direction: TransferDirection
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class BackfillResult(BaseModel):
    """Outcome of one backfill run: the transfers plus pagination stats."""

    transfers: list[TransferEvent] = []
    stop_reason: BackfillStop
    target_time: datetime
    pages_fetched: int = 0
    signatures_seen: int = 0
    failed_skipped: int = 0
    fetch_errors: int = 0
