# src/chain_metrics/adapters/chain_rest_client.py
from typing import Dict, Any, Optional
import httpx

HEIGHT_HEADER = "x-cosmos-block-height"

class ChainRestClient:
    """Minimal client for a Cosmos-SDK node's REST (gRPC-gateway) endpoints."""
    def __init__(self, base_url: str, timeout: float = 15.0, transport: Optional[httpx.BaseTransport] = None):
        self._base = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self._base, timeout=timeout, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base

    def get(self, path: str, *, params: Optional[Dict[str, Any]] = None,
            height: Optional[int] = None, timeout: Optional[float] = None) -> httpx.Response:
        # queries against historical state are pinned with the height header
        headers = {HEIGHT_HEADER: str(int(height))} if height is not None else None
        kwargs: Dict[str, Any] = {"params": params, "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return self._client.get(path, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self): return self
    def __exit__(self, exc_type, exc, tb): self.close()
