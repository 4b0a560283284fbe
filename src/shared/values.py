from __future__ import annotations

import math
from typing import Any, Optional


def coerce_float(value: Any) -> Optional[float]:
    """Numeric backend value as float; ``None`` for blanks, junk and NaN/inf."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", "").strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
