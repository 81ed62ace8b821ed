from datetime import datetime
from typing import Optional, Dict, Any, List
from ..domain.models import HeightProjection, InflationResult, WindowResult
from ..services.estimate.height_estimator import HeightEstimator, as_utc
from ..services.inflation.inflation_calculator import InflationCalculator

def _window_row(r: WindowResult) -> Dict[str, Any]:
    if isinstance(r, HeightProjection):
        return {
            "window": r.window,
            "ok": True,
            "projected_height": r.projected_height,
            "blocks_until_target": r.blocks_until_target,
            "avg_block_time_seconds": r.avg_block_time_seconds,
            "sampled_duration_seconds": r.rate.sampled_duration_seconds,
        }
    return {"window": r.window, "ok": False, "failure_kind": r.failure_kind, "reason": r.reason}

def _inflation_row(res: InflationResult) -> Dict[str, Any]:
    return {
        "start_height": res.start_height,
        "end_height": res.end_height,
        "start_supply": res.start_supply,
        "end_supply": res.end_supply,
        "minted_amount": res.minted_amount,
        "elapsed_seconds": res.elapsed_seconds,
        "apr": res.apr,
        "apy": res.apy,
    }

def run_estimate(estimator: HeightEstimator, target: datetime) -> Dict[str, Any]:
    target = as_utc(target)
    now = estimator.clock()
    results: List[WindowResult] = estimator.estimate(target, now=now)
    return {
        "command": "estimate-block-height",
        "target": target,
        "seconds_until_target": (target - now).total_seconds(),
        "windows": [_window_row(r) for r in results],
    }

def run_inflation(calculator: InflationCalculator, start: int, end: Optional[int] = None) -> Dict[str, Any]:
    res = calculator.calculate(start, end)
    return {"command": "inflation-avg", **_inflation_row(res)}
