"""Writes the transfer ledger as a JSON array."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from usdcindexer.parser.types import TransferEvent

logger = logging.getLogger(__name__)


def transfers_to_json(transfers: Iterable[TransferEvent]) -> str:
    return json.dumps([t.to_json_dict() for t in transfers], indent=2)


def write_transfers(path: str | Path, transfers: list[TransferEvent]) -> Path:
    """Overwrite `path` with the transfers. An empty run writes `[]`."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(transfers_to_json(transfers) + "\n", encoding="utf-8")
    logger.info("Saved %d transfers to %s", len(transfers), path)
    return path
