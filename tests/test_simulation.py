import asyncio

from app.config import get_settings
from app.services import simulation


async def test_delay_is_skipped_when_latency_disabled(monkeypatch) -> None:
    calls = []

    async def fake_sleep(seconds: float) -> None:
        calls.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    await simulation.simulate_delay(0.2)
    assert calls == []


async def test_delay_sleeps_when_latency_enabled(monkeypatch) -> None:
    monkeypatch.setenv("SIMULATE_LATENCY", "true")
    get_settings.cache_clear()
    calls = []

    async def fake_sleep(seconds: float) -> None:
        calls.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    await simulation.simulate_delay(0.2)
    await simulation.simulate_delay(0)
    assert calls == [0.2]


def test_chance_uses_injected_random(use_random) -> None:
    use_random(19)
    assert simulation.chance(20)
    assert not simulation.chance(10)
    assert simulation.roll(5) == 4
