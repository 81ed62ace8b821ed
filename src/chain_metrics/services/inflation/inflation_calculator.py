# src/chain_metrics/services/inflation/inflation_calculator.py
import logging
import math
from typing import Optional

from ...domain.block_range import BlockRange
from ...domain.models import InflationResult
from ...errors import ClockInconsistency, InvalidRange, InvalidSupply
from ..fetch.retrying_fetcher import RetryingFetcher

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

def annualize(period_rate: float, elapsed_seconds: float) -> tuple:
    """
    (rate_per_second, apr, apy) for a rate observed over elapsed_seconds.
    APR extrapolates linearly; APY compounds once per observed period.
    """
    rate_per_second = period_rate / elapsed_seconds
    apr = rate_per_second * SECONDS_PER_YEAR
    try:
        apy = (1 + rate_per_second * elapsed_seconds) ** (SECONDS_PER_YEAR / elapsed_seconds) - 1
    except OverflowError:
        apy = math.inf
    return rate_per_second, apr, apy

class InflationCalculator:
    def __init__(self, fetcher: RetryingFetcher):
        self.fetcher = fetcher

    def resolve_range(self, start: int, end: Optional[int] = None) -> BlockRange:
        """
        start < 0 means "the last |start| blocks before end"; end defaults to
        the tip. start == 0 is rejected (genesis vs unset is ambiguous).
        """
        if start == 0:
            raise InvalidRange(start, end, "start block cannot equal 0")
        if end is None:
            end = self.fetcher.fetch_latest().height
        if start < 0:
            start = end + start
            if start <= 0:
                raise InvalidRange(start, end, "relative start reaches below the first block")
        if end <= start:
            raise InvalidRange(start, end, "end must be greater than start")
        return BlockRange(start, end)

    def calculate(self, start: int, end: Optional[int] = None) -> InflationResult:
        rng = self.resolve_range(start, end)
        logging.info("inflation over blocks %d..%d (%d blocks)", rng.start, rng.end, rng.length)

        start_supply = self.fetcher.fetch_supply_at(rng.start)
        end_supply = self.fetcher.fetch_supply_at(rng.end)
        start_block = self.fetcher.fetch_at_height(rng.start)
        end_block = self.fetcher.fetch_at_height(rng.end)

        minted = end_supply - start_supply
        if minted < 0:
            logging.warning("supply decreased by %s over blocks %d..%d", -minted, rng.start, rng.end)

        elapsed = (end_block.time - start_block.time).total_seconds()
        if elapsed <= 0:
            raise ClockInconsistency(rng.start, rng.end, elapsed)
        if start_supply <= 0:
            raise InvalidSupply(rng.start, start_supply)
        if end_supply < 0:
            raise InvalidSupply(rng.end, end_supply)

        period_rate = float(minted / start_supply)
        rate_per_second, apr, apy = annualize(period_rate, elapsed)

        return InflationResult(
            start_height=rng.start,
            end_height=rng.end,
            start_supply=start_supply,
            end_supply=end_supply,
            minted_amount=minted,
            elapsed_seconds=elapsed,
            period_rate=period_rate,
            rate_per_second=rate_per_second,
            apr=apr,
            apy=apy,
        )
