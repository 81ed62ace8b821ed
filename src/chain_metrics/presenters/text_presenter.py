import math
import sys
from typing import Any, Dict, TextIO
from ..ports.presenter import Presenter

TARGET_FORMAT = "%Y-%m-%dT%H:%M"

class TextPresenter(Presenter):
    """Human-readable report, one line per window / one block for inflation."""
    def __init__(self, out: TextIO = sys.stdout):
        self.out = out

    def _line(self, text: str = "") -> None:
        print(text, file=self.out)

    def render(self, result: Dict[str, Any]) -> None:
        if result.get("command") == "estimate-block-height":
            self._render_estimate(result)
        else:
            self._render_inflation(result)

    def _render_estimate(self, result: Dict[str, Any]) -> None:
        secs = result["seconds_until_target"]
        self._line(
            f"estimating height at time {result['target'].strftime(TARGET_FORMAT)} "
            f"({int(math.floor(secs + 0.5))} seconds from now):"
        )
        for row in result["windows"]:
            if row["ok"]:
                self._line(
                    f"{row['window']:>8} block avg: height = {row['projected_height']} "
                    f"({row['blocks_until_target']} blocks, {row['avg_block_time_seconds']:.3f}s avg "
                    f"over {row['sampled_duration_seconds'] / 3600:.1f}h)"
                )
            else:
                self._line(f"{row['window']:>8} block avg: failed ({row['failure_kind']}: {row['reason']})")

    def _render_inflation(self, result: Dict[str, Any]) -> None:
        self._line(f"blocks:  {result['start_height']} -> {result['end_height']} "
                   f"({result['elapsed_seconds'] / 86400:.2f} days)")
        self._line(f"supply:  {result['start_supply']} -> {result['end_supply']}")
        self._line(f"minted:  {result['minted_amount']}")
        self._line(f"APR:     {result['apr'] * 100:.4f}%")
        self._line(f"APY:     {result['apy'] * 100:.4f}%")
