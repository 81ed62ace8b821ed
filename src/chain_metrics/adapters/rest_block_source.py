# src/chain_metrics/adapters/rest_block_source.py
import json
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from ..domain.models import BlockSample
from ..errors import SourceError
from ..ports.block_source import BlockSource
from .chain_rest_client import ChainRestClient

BLOCKS_PATH = "/cosmos/base/tendermint/v1beta1/blocks"
SUPPLY_PATH = "/cosmos/bank/v1beta1/supply/by_denom"

# RFC 3339 with up to nanosecond fractions; datetime keeps microseconds
_RFC3339 = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})$"
)

def parse_block_time(raw: str) -> datetime:
    m = _RFC3339.match(raw.strip()) if isinstance(raw, str) else None
    if m is None:
        raise SourceError(f"unparseable block time: {raw!r}")
    frac = (m.group("frac") or "0")[:6].ljust(6, "0")
    tz = "+00:00" if m.group("tz") == "Z" else m.group("tz")
    dt = datetime.fromisoformat(f"{m.group('base')}.{frac}{tz}")
    return dt.astimezone(timezone.utc)

class RestBlockSource(BlockSource):
    def __init__(self, client: ChainRestClient, denom: str, *, timeout_sec: Optional[float] = None):
        self.client = client
        self.denom = denom
        self.timeout_sec = timeout_sec

    # ---------- low-level GET ----------
    def _get_json(self, path: str, *, params: Optional[Dict[str, Any]] = None,
                  height: Optional[int] = None) -> Dict[str, Any]:
        try:
            r = self.client.get(path, params=params, height=height, timeout=self.timeout_sec)
        except httpx.HTTPError as e:
            raise SourceError(f"GET {path}: {e}") from e
        status = getattr(r, "status_code", None)
        if status != 200:
            raise SourceError(f"GET {path}: HTTP {status}: {r.text[:200]}", status_code=status)
        try:
            data = json.loads(r.text)
        except ValueError as e:
            raise SourceError(f"GET {path}: invalid JSON: {r.text[:200]!r}") from e
        if not isinstance(data, dict):
            raise SourceError(f"GET {path}: unexpected payload: {str(data)[:200]}")
        return data

    # ---------- parse ----------
    def _parse_block(self, data: Dict[str, Any]) -> BlockSample:
        # newer SDKs return sdk_block alongside (or instead of) block
        block = data.get("sdk_block") or data.get("block") or {}
        header = block.get("header") if isinstance(block, dict) else None
        if not isinstance(header, dict):
            raise SourceError(f"block response without header: {str(data)[:200]}")
        try:
            height = int(header["height"])
        except (KeyError, TypeError, ValueError) as e:
            raise SourceError(f"block header without valid height: {header.get('height')!r}") from e
        return BlockSample(height=height, time=parse_block_time(header.get("time")))

    # ---------- BlockSource ----------
    def latest_block(self) -> BlockSample:
        return self._parse_block(self._get_json(f"{BLOCKS_PATH}/latest"))

    def block_at(self, height: int) -> BlockSample:
        return self._parse_block(self._get_json(f"{BLOCKS_PATH}/{int(height)}"))

    def supply_at(self, height: int) -> Decimal:
        data = self._get_json(SUPPLY_PATH, params={"denom": self.denom}, height=height)
        coin = data.get("amount")
        amount = coin.get("amount") if isinstance(coin, dict) else None
        try:
            supply = Decimal(str(amount))
        except InvalidOperation as e:
            raise SourceError(f"supply of {self.denom} at {height} is not a number: {amount!r}") from e
        if not supply.is_finite():
            raise SourceError(f"supply of {self.denom} at {height} is not finite: {amount!r}")
        return supply
