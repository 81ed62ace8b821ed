from ..ports.presenter import Presenter
from typing import Any, Dict, TextIO
import json
import math
import sys

def _finite(obj: Any) -> Any:
    # strict JSON has no Infinity / NaN tokens; emit them as strings
    if isinstance(obj, float) and not math.isfinite(obj):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _finite(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_finite(v) for v in obj]
    return obj

class JsonPresenter(Presenter):
    def __init__(self, out: TextIO = sys.stdout):
        self.out = out

    def render(self, result: Dict[str, Any]) -> None:
        # Decimal / datetime fall back to str
        print(json.dumps(_finite(result), default=str, ensure_ascii=False, allow_nan=False), file=self.out)
