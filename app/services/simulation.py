from __future__ import annotations

import asyncio
import random
from typing import Any

from app.config import get_settings

_rng: Any | None = None


def set_random(rng: Any | None) -> None:
    global _rng
    _rng = rng


def get_random() -> Any:
    global _rng
    if _rng is None:
        _rng = random.Random()
    return _rng


def roll(upper: int) -> int:
    """Uniform integer in ``[0, upper)``."""

    return get_random().randrange(upper)


def chance(percent: int) -> bool:
    return roll(100) < percent


async def simulate_delay(seconds: float) -> None:
    if seconds <= 0 or not get_settings().simulate_latency:
        return
    await asyncio.sleep(seconds)
