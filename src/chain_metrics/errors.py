from datetime import datetime
from decimal import Decimal
from typing import Optional, Union


class ChainMetricsError(RuntimeError):
    pass

class SourceError(ChainMetricsError):
    """A single remote read failed (transport, HTTP status or payload)."""
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class FetchError(ChainMetricsError):
    """Every attempt to read a block or supply value failed."""
    def __init__(self, height: Union[int, str], attempts: int, last_cause: Optional[BaseException],
                 what: str = "block"):
        self.height = height
        self.attempts = attempts
        self.last_cause = last_cause
        self.what = what    # "block" | "supply"
        super().__init__(
            f"failed to fetch {what} at height {height} after {attempts} attempt(s): {last_cause}"
        )

class InvalidTargetTime(ChainMetricsError):
    """Target instant is not in the future."""
    def __init__(self, target: datetime, now: datetime):
        self.target = target
        self.now = now
        super().__init__(
            f"desired estimation time ({target.isoformat()}) has already happened "
            f"(now {now.isoformat()}). are you using UTC?"
        )

class InvalidRange(ChainMetricsError):
    def __init__(self, start: int, end: Optional[int], reason: str):
        self.start = start
        self.end = end
        super().__init__(f"invalid block range [{start}, {end}]: {reason}")

class InsufficientHistory(ChainMetricsError):
    def __init__(self, window: int, current_height: int):
        self.window = window
        self.current_height = current_height
        super().__init__(
            f"window of {window} blocks reaches below genesis (tip is {current_height})"
        )

class ClockInconsistency(ChainMetricsError):
    """Block timestamps do not increase across a range."""
    def __init__(self, start_height: int, end_height: int, elapsed_seconds: float):
        self.start_height = start_height
        self.end_height = end_height
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            f"block {end_height} is {elapsed_seconds:.3f}s after block {start_height}; "
            f"expected a positive duration"
        )

class InvalidSupply(ChainMetricsError):
    def __init__(self, height: int, supply: Decimal):
        self.height = height
        self.supply = supply
        super().__init__(f"supply at height {height} is {supply}; cannot express a rate over it")
