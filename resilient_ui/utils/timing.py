# resilient_ui/utils/timing.py
from __future__ import annotations

import asyncio
import time


def now_ms() -> int:
    """Monotonic time in milliseconds."""
    return time.monotonic_ns() // 1_000_000


async def async_sleep_ms(ms: float) -> None:
    """Non-blocking sleep for `ms` milliseconds."""
    if ms <= 0:
        return
    await asyncio.sleep(ms / 1000.0)
