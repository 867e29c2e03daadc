from __future__ import annotations

import math
from typing import Optional

from .models.common import DisplayMode

MISSING = "-"


def format_value(value: Optional[float], mode: DisplayMode, symbol: str = "€") -> str:
    """Render a metric for display; undefined values render as a dash."""
    if value is None or not math.isfinite(value):
        return MISSING
    if mode == DisplayMode.PERCENT:
        return f"{value:.1f}%"
    if mode == DisplayMode.CURRENCY:
        sign = "-" if value < 0 else ""
        return f"{sign}{symbol}{abs(value):,.0f}"
    return f"{value:,.2f}"


def format_delta(delta: Optional[float], mode: DisplayMode, symbol: str = "€") -> str:
    if delta is None or not math.isfinite(delta):
        return MISSING
    if delta == 0:
        return "On benchmark"
    if mode == DisplayMode.PERCENT:
        return f"{delta:+.1f} pts"
    sign = "+" if delta > 0 else ""
    return sign + format_value(delta, mode, symbol)
