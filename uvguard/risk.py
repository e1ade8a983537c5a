"""UV index to risk band mapping used by the display layer."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Optional


class RiskBand(str, Enum):
    """WHO exposure categories with their display colours."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very high"
    EXTREME = "extreme"


RISK_COLORS = {
    RiskBand.LOW: "#4CAF50",        # green
    RiskBand.MODERATE: "#FFC107",   # yellow
    RiskBand.HIGH: "#FF9800",       # orange
    RiskBand.VERY_HIGH: "#F44336",  # red
    RiskBand.EXTREME: "#673AB7",    # violet
}
UNKNOWN_COLOR = "#9E9E9E"

# Lower bounds (inclusive) of each band above LOW.
_THRESHOLDS = (
    (11.0, RiskBand.EXTREME),
    (8.0, RiskBand.VERY_HIGH),
    (6.0, RiskBand.HIGH),
    (3.0, RiskBand.MODERATE),
)


def _as_number(uv_index: Any) -> Optional[float]:
    if isinstance(uv_index, bool):
        return None
    try:
        value = float(uv_index)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def risk_band(uv_index: Any) -> Optional[RiskBand]:
    """Return the band for `uv_index`, or None if it is not a number."""
    value = _as_number(uv_index)
    if value is None:
        return None
    for lower, band in _THRESHOLDS:
        if value >= lower:
            return band
    return RiskBand.LOW


def risk_level(uv_index: Any) -> Optional[str]:
    band = risk_band(uv_index)
    return band.value if band else None


def get_risk_color(uv_index: Any) -> str:
    """Hex colour for a UV index; grey when the value is not numeric."""
    band = risk_band(uv_index)
    return RISK_COLORS[band] if band else UNKNOWN_COLOR
