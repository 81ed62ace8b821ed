# src/chain_metrics/services/estimate/height_estimator.py
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional, Sequence

from ...domain.models import BlockSample, HeightProjection, RateEstimate, WindowFailed, WindowResult
from ...errors import ChainMetricsError, ClockInconsistency, InsufficientHistory, InvalidTargetTime
from ..fetch.retrying_fetcher import RetryingFetcher

DEFAULT_WINDOWS = (10_000, 50_000, 75_000, 100_000)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(dt: datetime) -> datetime:
    # naive datetimes are taken to be UTC already
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt

def round_half_away(x: float) -> int:
    """Nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(x).quantize(Decimal(1), rounding=ROUND_HALF_UP))

def estimate_rate(current: BlockSample, historical: BlockSample, window: int) -> RateEstimate:
    seconds = (current.time - historical.time).total_seconds()
    if seconds <= 0:
        raise ClockInconsistency(historical.height, current.height, seconds)
    return RateEstimate(
        window=window,
        blocks_per_second=window / seconds,
        avg_block_time_seconds=seconds / window,
        sampled_duration_seconds=seconds,
    )

def project_height(current: BlockSample, rate: RateEstimate, seconds_until_target: float) -> HeightProjection:
    blocks = round_half_away(rate.blocks_per_second * seconds_until_target)
    return HeightProjection(
        window=rate.window,
        projected_height=current.height + blocks,
        blocks_until_target=blocks,
        rate=rate,
    )

class HeightEstimator:
    def __init__(
        self,
        fetcher: RetryingFetcher,
        windows: Sequence[int] = DEFAULT_WINDOWS,
        *,
        max_workers: int = 1,
        clock: Callable[[], datetime] = utc_now,
    ):
        windows = tuple(int(w) for w in windows)
        if not windows:
            raise ValueError("at least one window is required")
        if any(w <= 0 for w in windows):
            raise ValueError(f"windows must be positive block counts, got {windows}")
        self.fetcher = fetcher
        self.windows = windows
        self.max_workers = max(1, int(max_workers))
        self.clock = clock

    def _sample_window(self, current: BlockSample, window: int, seconds_until_target: float) -> WindowResult:
        try:
            historical_height = current.height - window
            if historical_height < 0:
                raise InsufficientHistory(window, current.height)
            historical = self.fetcher.fetch_at_height(historical_height)
            rate = estimate_rate(current, historical, window)
            return project_height(current, rate, seconds_until_target)
        except ChainMetricsError as e:
            logging.warning("window=%d failed: %s", window, e)
            return WindowFailed(window=window, cause=e)

    def estimate(self, target: datetime, now: Optional[datetime] = None) -> List[WindowResult]:
        """One result per configured window, in configured order.

        Only a failure to read the tip aborts the run; per-window faults come
        back as WindowFailed entries. `now` defaults to the estimator's clock
        and is read once for all windows.
        """
        target = as_utc(target)
        now = as_utc(now) if now is not None else self.clock()
        if target <= now:
            raise InvalidTargetTime(target, now)

        current = self.fetcher.fetch_latest()
        seconds_until_target = (target - now).total_seconds()
        logging.info("tip height=%d time=%s, %.0fs until target",
                     current.height, current.time.isoformat(), seconds_until_target)

        def run(window: int) -> WindowResult:
            return self._sample_window(current, window, seconds_until_target)

        workers = min(self.max_workers, len(self.windows))
        if workers == 1:
            return [run(w) for w in self.windows]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(run, self.windows))
