from __future__ import annotations

import math
import re
from typing import Sequence

from ..reference import ZONES
from ..schemas import FiringRecord, ZoneOffsetSet

RECENT_WINDOW = 5

# Potter's rules of thumb, deg F
HOT_OR_SOFT_ADJUSTMENT = 12
DEGREES_PER_CONE = 18

OFFSET_MIN = 0
OFFSET_MAX = 100

_CONE_NUMBER = re.compile(r"cone\s*(\d+)")


def round_half_up(value: float) -> int:
    """Round .5 toward +inf (so -4.5 -> -4), unlike Python's banker's rounding."""
    return math.floor(value + 0.5)


def resolve_result_text(record: FiringRecord, zone: str) -> str:
    """Zone-specific witness text when present, otherwise the overall result, lower-cased."""
    zone_text = record.zone_results.get(zone)
    return (zone_text or record.overall_result).lower()


def classify_adjustment(text: str, target_cone: str) -> int | None:
    """
    Degrees of correction implied by one witness result, or None when the text
    carries no usable signal.

    Precedence (first match wins): "hot"/"soft" -> +12, "perfect"/"good" -> 0,
    then an explicit "cone N" compared against the target at 18 deg per cone.
    An explicit cone equal to the target without any wording contributes nothing.
    """
    if "cone" not in text:
        return None

    if "hot" in text or "soft" in text:
        return HOT_OR_SOFT_ADJUSTMENT
    if "perfect" in text or "good" in text:
        return 0

    match = _CONE_NUMBER.search(text)
    if not match:
        return None

    actual = int(match.group(1))
    target = int(target_cone)  # "04" reads as 4
    if actual > target:
        return (actual - target) * DEGREES_PER_CONE
    if actual < target:
        return -(target - actual) * DEGREES_PER_CONE
    return None


def suggest_zone_offset(history: Sequence[FiringRecord], zone: str, current: int) -> int:
    recent = list(history)[-RECENT_WINDOW:]

    adjustments: list[int] = []
    for record in recent:
        adjustment = classify_adjustment(resolve_result_text(record, zone), record.target_cone)
        if adjustment is not None:
            adjustments.append(adjustment)

    if not adjustments:
        return current

    suggested = current + round_half_up(sum(adjustments) / len(adjustments))
    return max(OFFSET_MIN, min(OFFSET_MAX, suggested))


def suggest_offsets(history: Sequence[FiringRecord], current_offsets: ZoneOffsetSet) -> ZoneOffsetSet | None:
    """
    Suggested next offset per zone from the last five logged firings.

    `history` is in append order (oldest first). Returns None when there is no
    history at all; otherwise every zone is filled in, echoing the current
    offset for zones without a usable signal.
    """
    if not history:
        return None

    return ZoneOffsetSet(
        **{zone: suggest_zone_offset(history, zone, current_offsets.get(zone)) for zone in ZONES}
    )
