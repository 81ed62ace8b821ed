# src/chain_metrics/ports/block_source.py
from abc import ABC, abstractmethod
from decimal import Decimal
from ..domain.models import BlockSample

class BlockSource(ABC):
    """Single-shot reads from a ledger node. Failures raise SourceError."""
    @abstractmethod
    def latest_block(self) -> BlockSample: ...
    @abstractmethod
    def block_at(self, height: int) -> BlockSample: ...
    @abstractmethod
    def supply_at(self, height: int) -> Decimal: ...
