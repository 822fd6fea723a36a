"""Fixed-interval runner for service mode."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


async def run_periodically(
    job: Callable[[], Awaitable[object]],
    interval_seconds: float,
    *,
    max_cycles: int | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> int:
    """Invoke `job` every `interval_seconds` until cancelled or `max_cycles` is reached.

    Each cycle is independent: a failing cycle is logged and the schedule
    continues. Returns the number of cycles that failed.
    """
    cycle = 0
    failures = 0
    while max_cycles is None or cycle < max_cycles:
        cycle += 1
        try:
            await job()
            logger.info("Indexing cycle %d completed at %s", cycle, datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC"))
        except Exception:
            failures += 1
            logger.exception("Indexing cycle %d failed, will retry next cycle", cycle)

        if max_cycles is not None and cycle >= max_cycles:
            break
        logger.info("Sleeping %.0fs before next indexing cycle", interval_seconds)
        await sleep(interval_seconds)

    return failures
