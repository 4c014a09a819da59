"""Summary statistics for the generated testing schedules.

Both helpers only read already-built schedules. Hour totals are rounded half
up (``90 min -> 2 h``) rather than with Python's banker's rounding so the
numbers shown in reports match what testers expect.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Sequence

from backend.schedule_models import ComponentCategory, CriterionScheduleItem


def minutes_to_hours(minutes: float) -> int:
    """Convert minutes to whole hours, rounding .5 up."""
    return int(math.floor(minutes / 60 + 0.5))


def criterion_schedule_stats(schedule: Sequence[CriterionScheduleItem]) -> Dict[str, Any]:
    by_level: Dict[str, int] = {"A": 0, "AA": 0, "AAA": 0}
    by_principle: Dict[str, int] = {}
    total_techniques = 0
    total_failures = 0
    total_time = 0

    for item in schedule:
        by_level[item.sc_level] = by_level.get(item.sc_level, 0) + 1
        total_techniques += len(item.sufficient_techniques) + len(item.advisory_techniques)
        total_failures += len(item.failures)
        total_time += item.estimated_time

        # "1 Perceivable" -> "1"
        principle_num = item.principle.split(" ")[0]
        by_principle[principle_num] = by_principle.get(principle_num, 0) + 1

    return {
        "totalSC": len(schedule),
        "totalTechniques": total_techniques,
        "totalFailures": total_failures,
        "estimatedTimeHours": minutes_to_hours(total_time),
        "byLevel": by_level,
        "byPrinciple": by_principle,
    }


def component_schedule_stats(schedule: Iterable[ComponentCategory]) -> Dict[str, Any]:
    by_category: Dict[str, int] = {}
    total_categories = 0
    total_components = 0
    total_techniques = 0
    total_time = 0

    for category in schedule:
        total_categories += 1
        by_category[category.category] = len(category.components)
        total_components += len(category.components)
        total_techniques += sum(len(c.techniques) for c in category.components)
        total_time += category.total_time

    return {
        "totalCategories": total_categories,
        "totalComponents": total_components,
        "totalTechniques": total_techniques,
        "estimatedTimeHours": minutes_to_hours(total_time),
        "byCategory": by_category,
    }


__all__ = ["component_schedule_stats", "criterion_schedule_stats", "minutes_to_hours"]
