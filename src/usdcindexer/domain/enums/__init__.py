from usdcindexer.domain.enums.backfill import BackfillStop
from usdcindexer.domain.enums.direction import TransferDirection

__all__ = [
    "BackfillStop",
    "TransferDirection",
]
