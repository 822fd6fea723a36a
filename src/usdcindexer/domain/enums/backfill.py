from enum import Enum


class BackfillStop(str, Enum):
    """Why a backfill run stopped paginating."""

    EXHAUSTED = "EXHAUSTED"  # empty or short page
    BOUNDARY = "BOUNDARY"  # crossed the lookback window
    FETCH_ERROR = "FETCH_ERROR"  # signature page could not be fetched
