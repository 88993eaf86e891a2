import asyncio

import pytest

from conftest import FakeProvider
from weather_aggregator.weather.aggregator import aggregate
from weather_aggregator.weather.errors import (
    AllProvidersFailedError, ProviderParseError, ProviderUnavailableError
)
from weather_aggregator.weather.models import ProviderReading


class BarrierProvider(FakeProvider):
    """Only answers once every provider sharing the barrier has started."""

    def __init__(self, base, barrier_count, started, provider_id):
        super().__init__(base, provider_id=provider_id)
        self.barrier_count = barrier_count
        self.started = started

    async def fetch(self, location, day):
        self.started.append(self.provider_id)
        while len(self.started) < self.barrier_count:
            await asyncio.sleep(0.01)
        return ProviderReading(provider_id=self.provider_id, day=day, temperature_celsius=self.base)


@pytest.mark.asyncio
async def test_mean_of_two_readings(moscow):
    providers = [FakeProvider(10.0, provider_id="a"), FakeProvider(20.0, provider_id="b")]

    result = await aggregate(moscow, 0, providers)

    assert result.temperature_celsius == 15.0
    assert result.sample_count == 2
    assert result.providers == ["a", "b"]
    assert result.city == "Moscow"
    assert result.day == 0


@pytest.mark.asyncio
async def test_failed_provider_is_excluded(moscow):
    providers = [
        FakeProvider(12.0, provider_id="ok"),
        FakeProvider(error=ProviderUnavailableError("down", "request failed"), provider_id="down"),
    ]

    result = await aggregate(moscow, 0, providers)

    assert result.temperature_celsius == 12.0
    assert result.sample_count == 1
    assert result.providers == ["ok"]


@pytest.mark.asyncio
async def test_all_providers_failing_raises(moscow):
    providers = [
        FakeProvider(error=ProviderUnavailableError("a", "request timed out"), provider_id="a"),
        FakeProvider(error=ProviderParseError("b", "unexpected response format"), provider_id="b"),
    ]

    with pytest.raises(AllProvidersFailedError) as exc_info:
        await aggregate(moscow, 2, providers)

    error = exc_info.value
    assert error.city == "Moscow"
    assert error.day == 2
    assert [f.kind for f in error.failures] == ["provider_unavailable", "provider_parse_error"]
    assert "Moscow" in str(error)
    assert "a=provider_unavailable" in str(error)


@pytest.mark.asyncio
async def test_unexpected_error_is_raised_after_every_call_finishes(moscow):
    finished = []

    class SlowProvider(FakeProvider):
        async def fetch(self, location, day):
            reading = await super().fetch(location, day)
            finished.append(self.provider_id)
            return reading

    providers = [
        FakeProvider(error=RuntimeError("bug in provider"), provider_id="broken"),
        SlowProvider(5.0, provider_id="slow", delay=0.05),
    ]

    with pytest.raises(RuntimeError, match="bug in provider"):
        await aggregate(moscow, 0, providers)

    assert finished == ["slow"]


@pytest.mark.asyncio
async def test_slow_provider_times_out(moscow):
    providers = [FakeProvider(8.0, provider_id="fast"), FakeProvider(30.0, provider_id="slow", delay=5)]

    result = await aggregate(moscow, 0, providers, timeout=0.05)

    assert result.temperature_celsius == 8.0
    assert result.sample_count == 1


@pytest.mark.asyncio
async def test_providers_run_concurrently(moscow):
    started = []
    providers = [BarrierProvider(float(i), 3, started, f"p{i}") for i in range(3)]

    # Sequential calls would never get past the barrier
    result = await asyncio.wait_for(aggregate(moscow, 1, providers), timeout=2)

    assert result.sample_count == 3
    assert result.temperature_celsius == pytest.approx(1.0)


@pytest.mark.asyncio
@pytest.mark.parametrize("healthy", [1, 2, 3])
async def test_sample_count_bounds(moscow, healthy):
    providers = [FakeProvider(1.0, provider_id=f"ok{i}") for i in range(healthy)]
    providers += [
        FakeProvider(error=ProviderUnavailableError(f"bad{i}", "down"), provider_id=f"bad{i}")
        for i in range(3 - healthy)
    ]

    result = await aggregate(moscow, 0, providers)

    assert 1 <= result.sample_count <= len(providers)
    assert result.sample_count == healthy


@pytest.mark.asyncio
async def test_empty_provider_list_is_rejected(moscow):
    with pytest.raises(ValueError):
        await aggregate(moscow, 0, [])
