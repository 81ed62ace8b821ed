from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Union

from ..errors import ChainMetricsError

@dataclass(frozen=True)
class BlockSample:
    height: int
    time: datetime          # UTC, tz-aware

@dataclass(frozen=True)
class RateEstimate:
    window: int                       # blocks looked back from the tip
    blocks_per_second: float
    avg_block_time_seconds: float
    sampled_duration_seconds: float   # always > 0

@dataclass(frozen=True)
class HeightProjection:
    window: int
    projected_height: int
    blocks_until_target: int
    rate: RateEstimate

    @property
    def avg_block_time_seconds(self) -> float:
        return self.rate.avg_block_time_seconds

@dataclass(frozen=True)
class WindowFailed:
    window: int
    cause: ChainMetricsError

    @property
    def failure_kind(self) -> str:
        return type(self.cause).__name__

    @property
    def reason(self) -> str:
        return str(self.cause)

WindowResult = Union[HeightProjection, WindowFailed]

@dataclass(frozen=True)
class InflationResult:
    """Realized inflation over [start_height, end_height]."""
    start_height: int
    end_height: int
    start_supply: Decimal
    end_supply: Decimal
    minted_amount: Decimal      # may be negative (supply-reducing events)
    elapsed_seconds: float
    period_rate: float          # minted / start supply, over the sampled period
    rate_per_second: float
    apr: float
    apy: float
