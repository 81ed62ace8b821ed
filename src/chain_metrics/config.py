# src/chain_metrics/config.py
import os
from typing import Any, Tuple

from pydantic import BaseModel, Field, field_validator

def _env(name: str, default: str):
    # env strings are coerced by the field types below
    return Field(default_factory=lambda: os.getenv(name, default), validate_default=True)

class Config(BaseModel):
    node_url: str = _env("CHAIN_NODE_URL", "https://api.data.nemo.io")
    timeout_sec: float = _env("CHAIN_TIMEOUT_SEC", "15")
    retries: int = _env("CHAIN_RETRIES", "5")
    backoff_cap_sec: float = _env("CHAIN_BACKOFF_CAP_SEC", "5")
    denom: str = _env("CHAIN_DENOM", "unemo")
    windows: Tuple[int, ...] = _env("CHAIN_WINDOWS", "10000,50000,75000,100000")
    max_workers: int = _env("CHAIN_MAX_WORKERS", "4")
    log_level: str = _env("CHAIN_LOG_LEVEL", "WARNING")

    @field_validator("windows", mode="before")
    @classmethod
    def _split_windows(cls, v: Any) -> Any:
        if isinstance(v, str):
            return tuple(int(p) for p in v.split(",") if p.strip())
        return v

    @field_validator("windows")
    @classmethod
    def _positive_windows(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        if not v or any(w <= 0 for w in v):
            raise ValueError("windows must be a non-empty list of positive block counts")
        return v

    @field_validator("retries", "max_workers")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()

def load_config(**overrides: Any) -> Config:
    """Environment defaults; non-None keyword overrides (e.g. CLI flags) win."""
    return Config(**{k: v for k, v in overrides.items() if v is not None})
