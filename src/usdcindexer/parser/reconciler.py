"""Derive token transfers from a Solana transaction's pre/post token balances."""

from collections.abc import Collection, Iterable

from usdcindexer.domain.mints import USDC_MINTS
from usdcindexer.parser.types import BalanceChange, BalanceSnapshotEntry, TransferCandidate


def reconcile_transaction(
    tx_data: dict,
    tracked_mints: Collection[str] = USDC_MINTS,
) -> list[TransferCandidate]:
    """Extract transfer candidates from a getTransaction result."""
    meta = tx_data.get("meta", {}) or {}
    pre = [BalanceSnapshotEntry.from_rpc(tb) for tb in meta.get("preTokenBalances") or []]
    post = [BalanceSnapshotEntry.from_rpc(tb) for tb in meta.get("postTokenBalances") or []]
    return reconcile(pre, post, tracked_mints)


def reconcile(
    pre: Iterable[BalanceSnapshotEntry],
    post: Iterable[BalanceSnapshotEntry],
    tracked_mints: Collection[str] = USDC_MINTS,
) -> list[TransferCandidate]:
    """Pair balance decreases with equal increases, per tracked mint.

    Accounts whose mint is not tracked are ignored entirely. Returns an empty
    list when nothing pairs up.
    """
    pre_map = {entry.account_index: entry for entry in pre}
    post_map = {entry.account_index: entry for entry in post}

    # An index may exist on one side only (account created or closed in the TX)
    mint_accounts: dict[str, list[int]] = {}
    for account_index in sorted(pre_map.keys() | post_map.keys()):
        snapshot = pre_map.get(account_index) or post_map[account_index]
        if snapshot.mint not in tracked_mints:
            continue
        mint_accounts.setdefault(snapshot.mint, []).append(account_index)

    transfers: list[TransferCandidate] = []
    for mint, indices in mint_accounts.items():
        changes = balance_changes(pre_map, post_map, indices)
        for decrease, increase in match_transfers(changes):
            transfers.append(TransferCandidate(
                mint=mint,
                amount=-decrease.delta,
                from_owner=decrease.owner,
                to_owner=increase.owner,
            ))

    return transfers


def balance_changes(
    pre_map: dict[int, BalanceSnapshotEntry],
    post_map: dict[int, BalanceSnapshotEntry],
    indices: Iterable[int],
) -> list[BalanceChange]:
    """Net change per account index. Unchanged accounts are left out."""
    changes: list[BalanceChange] = []
    for account_index in indices:
        pre_entry = pre_map.get(account_index)
        post_entry = post_map.get(account_index)
        pre_amount = pre_entry.raw_amount if pre_entry else 0
        post_amount = post_entry.raw_amount if post_entry else 0

        delta = post_amount - pre_amount
        if delta == 0:
            continue

        owner = (post_entry.owner if post_entry else None) or (pre_entry.owner if pre_entry else None) or ""
        changes.append(BalanceChange(account_index=account_index, delta=delta, owner=owner))

    return changes


def match_transfers(changes: list[BalanceChange]) -> list[tuple[BalanceChange, BalanceChange]]:
    """Exact-magnitude pairing of decreases with increases.

    Decreases are consumed last-in-first-out; each takes the first unconsumed
    increase of the same magnitude. This is a heuristic, not a ledger: fees
    that shrink the credited amount, one-to-many payments and two unrelated
    equal transfers in one transaction are dropped or may be cross-paired.
    Unmatched changes produce nothing.
    """
    decreases = [c for c in changes if c.delta < 0]
    increases = [c for c in changes if c.delta > 0]

    pairs: list[tuple[BalanceChange, BalanceChange]] = []
    while decreases:
        decrease = decreases.pop()
        amount = -decrease.delta
        match = next((i for i, inc in enumerate(increases) if inc.delta == amount), None)
        if match is None:
            continue
        pairs.append((decrease, increases.pop(match)))

    return pairs
