# src/chain_metrics/services/fetch/retrying_fetcher.py
import logging
import random
import time
from decimal import Decimal
from typing import Callable, Optional, TypeVar, Union

from ...domain.models import BlockSample
from ...errors import FetchError, SourceError
from ...ports.block_source import BlockSource

T = TypeVar("T")

LATEST = "latest"
BLOCK = "block"
SUPPLY = "supply"

class RetryingFetcher:
    """Bounded-retry reads on top of a BlockSource. Nothing is cached."""
    def __init__(
        self,
        source: BlockSource,
        *,
        retries: int = 5,
        backoff_cap: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.source = source
        self.retries = retries
        self.backoff_cap = backoff_cap
        self._sleep = sleep

    def _with_retries(self, what: str, height: Union[int, str], read: Callable[[], T],
                      max_attempts: Optional[int]) -> T:
        attempts = self.retries if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {attempts}")

        last_err: Optional[SourceError] = None
        for a in range(attempts):
            try:
                return read()
            except SourceError as e:
                last_err = e
                logging.warning("fetch %s height=%s attempt=%d/%d failed: %s", what, height, a + 1, attempts, e)
                if a + 1 < attempts:
                    self._sleep(min(2 ** a, self.backoff_cap) + random.random())
        raise FetchError(height, attempts, last_err, what=what) from last_err

    def fetch_latest(self, max_attempts: Optional[int] = None) -> BlockSample:
        return self._with_retries(BLOCK, LATEST, self.source.latest_block, max_attempts)

    def fetch_at_height(self, height: int, max_attempts: Optional[int] = None) -> BlockSample:
        return self._with_retries(BLOCK, height, lambda: self.source.block_at(height), max_attempts)

    def fetch_supply_at(self, height: int, max_attempts: Optional[int] = None) -> Decimal:
        return self._with_retries(SUPPLY, height, lambda: self.source.supply_at(height), max_attempts)
