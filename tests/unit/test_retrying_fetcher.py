# tests/unit/test_retrying_fetcher.py
from decimal import Decimal

import pytest

from chain_metrics.domain.models import BlockSample
from chain_metrics.errors import FetchError, SourceError
from chain_metrics.services.fetch.retrying_fetcher import RetryingFetcher
from fake_source import FakeSource, T0

def make_fetcher(source, retries=5):
    sleeps = []
    return RetryingFetcher(source, retries=retries, sleep=sleeps.append), sleeps

def test_latest_recovers_after_transient_failures():
    src = FakeSource(BlockSample(100, T0), fail={"latest": 2})
    fetcher, sleeps = make_fetcher(src)
    assert fetcher.fetch_latest(max_attempts=3) == BlockSample(100, T0)
    assert src.calls == ["latest", "latest", "latest"]
    assert len(sleeps) == 2

def test_latest_gives_up_after_max_attempts():
    src = FakeSource(BlockSample(100, T0), fail={"latest": -1})
    fetcher, sleeps = make_fetcher(src, retries=5)
    with pytest.raises(FetchError) as ei:
        fetcher.fetch_latest()
    err = ei.value
    assert err.height == "latest"
    assert err.attempts == 5
    assert isinstance(err.last_cause, SourceError)
    assert "latest" in str(err) and "5 attempt" in str(err)
    assert src.calls.count("latest") == 5
    # no sleep after the final attempt
    assert len(sleeps) == 4

def test_at_height_reports_height():
    src = FakeSource(BlockSample(100, T0), fail={42: -1})
    fetcher, _ = make_fetcher(src)
    with pytest.raises(FetchError) as ei:
        fetcher.fetch_at_height(42, max_attempts=2)
    assert ei.value.height == 42
    assert ei.value.attempts == 2
    assert src.calls == [42, 42]

def test_supply_is_retried():
    src = FakeSource(BlockSample(100, T0), supplies={100: 7}, fail={("supply", 100): 1})
    fetcher, _ = make_fetcher(src)
    assert fetcher.fetch_supply_at(100) == Decimal(7)
    assert src.calls == [("supply", 100), ("supply", 100)]

def test_non_transport_errors_are_not_retried():
    class Broken(FakeSource):
        def block_at(self, height):
            self.calls.append(height)
            raise KeyError(height)

    src = Broken(BlockSample(100, T0))
    fetcher, sleeps = make_fetcher(src)
    with pytest.raises(KeyError):
        fetcher.fetch_at_height(5)
    assert src.calls == [5]
    assert sleeps == []

def test_single_attempt_does_not_sleep():
    src = FakeSource(BlockSample(100, T0), fail={"latest": -1})
    fetcher, sleeps = make_fetcher(src)
    with pytest.raises(FetchError):
        fetcher.fetch_latest(max_attempts=1)
    assert src.calls == ["latest"]
    assert sleeps == []

def test_rejects_zero_attempts():
    fetcher, _ = make_fetcher(FakeSource(BlockSample(1, T0)))
    with pytest.raises(ValueError):
        fetcher.fetch_latest(max_attempts=0)

def test_backoff_is_capped():
    src = FakeSource(BlockSample(100, T0), fail={"latest": -1})
    sleeps = []
    fetcher = RetryingFetcher(src, retries=6, backoff_cap=2.0, sleep=sleeps.append)
    with pytest.raises(FetchError):
        fetcher.fetch_latest()
    # min(2**a, cap) + jitter in [0, 1)
    assert all(0 <= s < 3.0 for s in sleeps)

def test_supply_and_block_failures_are_told_apart():
    src = FakeSource(BlockSample(100, T0), supplies={20: 1}, fail={("supply", 20): -1, 20: -1})
    fetcher, _ = make_fetcher(src, retries=1)

    with pytest.raises(FetchError) as supply_err:
        fetcher.fetch_supply_at(20)
    with pytest.raises(FetchError) as block_err:
        fetcher.fetch_at_height(20)

    assert supply_err.value.what == "supply"
    assert block_err.value.what == "block"
    assert "failed to fetch supply at height 20" in str(supply_err.value)
    assert "failed to fetch block at height 20" in str(block_err.value)
