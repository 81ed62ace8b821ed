# src/chain_metrics/domain/block_range.py
from dataclasses import dataclass

@dataclass(frozen=True)
class BlockRange:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start
