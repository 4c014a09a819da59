"""
Testing schedule service.

Thin orchestration over the pure builders: applies a ``ScheduleConfig``
(levels + advisory/failure visibility), computes statistics and offers the
sensory filter used by the testing UI.
"""

import dataclasses
import logging
from typing import List, Optional, Sequence

from backend.schedule_generator import (
    DEFAULT_TECHNIQUES_BASE_URL,
    generate_component_schedule,
    generate_criterion_schedule,
)
from backend.schedule_models import ComponentCategory, CriterionScheduleItem, ScheduleConfig
from backend.utils.schedule_stats import component_schedule_stats, criterion_schedule_stats
from backend.wcag_dataset import WCAGDataset

logger = logging.getLogger(__name__)


def apply_technique_visibility(
    schedule: Sequence[CriterionScheduleItem], config: ScheduleConfig
) -> List[CriterionScheduleItem]:
    """Empty the advisory/failure lists the caller asked to hide.

    Estimated time and testing steps are left as built; only the lists that
    exporters and statistics read are gated.
    """
    if config.include_advisory and config.include_failures:
        return list(schedule)

    changes = {}
    if not config.include_advisory:
        changes["advisory_techniques"] = ()
    if not config.include_failures:
        changes["failures"] = ()
    return [dataclasses.replace(item, **changes) for item in schedule]


def filter_by_sensory(
    schedule: Sequence[CriterionScheduleItem],
    *,
    sight: Optional[bool] = None,
    hearing: Optional[bool] = None,
    motor: Optional[bool] = None,
) -> List[CriterionScheduleItem]:
    """Keep items whose sensory flags equal every requirement that is not None."""
    filtered = []
    for item in schedule:
        if sight is not None and item.requires_sight != sight:
            continue
        if hearing is not None and item.requires_hearing != hearing:
            continue
        if motor is not None and item.requires_motor != motor:
            continue
        filtered.append(item)
    return filtered


class TestingScheduleService:
    """Generates schedules from one loaded dataset; holds no per-call state."""

    __test__ = False  # not a pytest test class

    def __init__(self, dataset: WCAGDataset, techniques_base_url: str = DEFAULT_TECHNIQUES_BASE_URL):
        self.dataset = dataset
        self.techniques_base_url = techniques_base_url

    def generate_criterion_schedule(self, config: ScheduleConfig) -> List[CriterionScheduleItem]:
        schedule = generate_criterion_schedule(
            self.dataset.data, config.levels, base_url=self.techniques_base_url
        )
        logger.info(
            "[ScheduleService] Criterion schedule: %d items (levels=%s)",
            len(schedule),
            ",".join(config.levels),
        )
        return apply_technique_visibility(schedule, config)

    def generate_component_schedule(self, config: ScheduleConfig) -> List[ComponentCategory]:
        schedule = generate_component_schedule(self.dataset.data, config.levels)
        logger.info(
            "[ScheduleService] Component schedule: %d categories (levels=%s)",
            len(schedule),
            ",".join(config.levels),
        )
        return schedule

    @staticmethod
    def criterion_stats(schedule: Sequence[CriterionScheduleItem]) -> dict:
        return criterion_schedule_stats(schedule)

    @staticmethod
    def component_stats(schedule: Sequence[ComponentCategory]) -> dict:
        return component_schedule_stats(schedule)

    filter_by_sensory = staticmethod(filter_by_sensory)
