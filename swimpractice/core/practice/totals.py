"""
Practice-level totals for the builder and run screens.
"""

from collections.abc import Iterable

from .models import PracticeSet, Stroke

# Rough pace used for planning: 1.5 seconds per unit of distance
SECONDS_PER_UNIT = 1.5


def practice_total_distance(sets: Iterable[PracticeSet]) -> int:
    return sum(s.total_distance for s in sets)


def stroke_breakdown(sets: Iterable[PracticeSet]) -> dict[Stroke, int]:
    """
    Total distance per stroke across the practice.

    Keys appear in the order each stroke is first prescribed.
    """
    breakdown: dict[Stroke, int] = {}
    for practice_set in sets:
        for item in practice_set.items:
            breakdown[item.stroke] = breakdown.get(item.stroke, 0) + item.total_distance
    return breakdown


def estimate_duration_minutes(sets: Iterable[PracticeSet]) -> int:
    """Whole minutes the practice should take at the planning pace."""
    return round(practice_total_distance(sets) * SECONDS_PER_UNIT / 60)
