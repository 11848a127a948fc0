from __future__ import annotations

from collections import Counter
from typing import Sequence

from ..reference import FIRING_TYPES, ZONES
from ..schemas import FiringAnalytics, FiringRecord, FiringTypeShare
from .offset_advisor import round_half_up

ZONE_TREND_WINDOW = 10


def is_successful(record: FiringRecord) -> bool:
    text = record.overall_result.lower()
    if "perfect" in text or "good" in text:
        return True
    return "cone" in text and record.target_cone in text and "hot" not in text


def success_rate(history: Sequence[FiringRecord]) -> int:
    """Share of firings read as on target, as a whole percentage (0 for no history)."""
    if not history:
        return 0
    hits = sum(1 for record in history if is_successful(record))
    return round_half_up(hits / len(history) * 100)


def _top_clay_body(newest_first: Sequence[FiringRecord]) -> str:
    counts = Counter(record.clay_body for record in newest_first if record.clay_body)
    if not counts:
        return "None"
    # Ties resolve to the body seen last when scanning newest first
    best = None
    for body, count in counts.items():
        if best is None or count >= counts[best]:
            best = body
    return best.split(" ")[0]


def firing_analytics(history: Sequence[FiringRecord]) -> FiringAnalytics:
    total = len(history)
    if total == 0:
        return FiringAnalytics(total_firings=0, success_rate=0)

    newest_first = list(reversed(history))
    recent = newest_first[:ZONE_TREND_WINDOW]

    type_counts = Counter(record.firing_type.value for record in history)

    return FiringAnalytics(
        total_firings=total,
        success_rate=success_rate(history),
        average_middle_offset=round_half_up(sum(r.zone_offsets.middle for r in history) / total),
        top_clay_body=_top_clay_body(newest_first),
        zone_average_offsets={
            zone: round_half_up(sum(r.zone_offsets.get(zone) for r in recent) / len(recent))
            for zone in ZONES
        },
        firing_type_counts={
            firing_type: FiringTypeShare(
                count=type_counts.get(firing_type, 0),
                percent=round_half_up(type_counts.get(firing_type, 0) / total * 100),
            )
            for firing_type in FIRING_TYPES
        },
    )
