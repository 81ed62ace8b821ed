# tests/unit/fake_source.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Optional

from chain_metrics.domain.models import BlockSample
from chain_metrics.errors import SourceError
from chain_metrics.ports.block_source import BlockSource

T0 = datetime(2030, 1, 1, tzinfo=timezone.utc)

class FakeSource(BlockSource):
    """
    In-memory chain. `fail` maps a key ("latest", height, ("supply", height))
    to how many times it should raise SourceError before answering; -1 means
    always.
    """
    def __init__(self, tip: BlockSample, blocks: Optional[Dict[int, BlockSample]] = None,
                 supplies: Optional[Dict[int, Decimal]] = None, fail: Optional[dict] = None):
        self.tip = tip
        self.blocks = dict(blocks or {})
        self.blocks.setdefault(tip.height, tip)
        self.supplies = {h: Decimal(str(v)) for h, v in (supplies or {}).items()}
        self.fail = dict(fail or {})
        self.calls = []

    def _maybe_fail(self, key):
        left = self.fail.get(key, 0)
        if left == 0:
            return
        if left > 0:
            self.fail[key] = left - 1
        raise SourceError(f"boom {key}")

    def latest_block(self) -> BlockSample:
        self.calls.append("latest")
        self._maybe_fail("latest")
        return self.tip

    def block_at(self, height: int) -> BlockSample:
        self.calls.append(height)
        self._maybe_fail(height)
        if height not in self.blocks:
            raise SourceError(f"no block {height}")
        return self.blocks[height]

    def supply_at(self, height: int) -> Decimal:
        self.calls.append(("supply", height))
        self._maybe_fail(("supply", height))
        return self.supplies[height]

def constant_rate_chain(tip_height: int, seconds_per_block: float, tip_time: datetime = T0) -> FakeSource:
    """A chain whose blocks are exactly seconds_per_block apart, sampled lazily."""
    tip = BlockSample(tip_height, tip_time)

    class _Chain(FakeSource):
        def block_at(self, height: int) -> BlockSample:
            self.calls.append(height)
            self._maybe_fail(height)
            if height < 0 or height > tip_height:
                raise SourceError(f"no block {height}")
            return BlockSample(height, tip_time - timedelta(seconds=(tip_height - height) * seconds_per_block))

    return _Chain(tip)
