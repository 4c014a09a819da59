"""
Statistics helpers and the schedule service (visibility + sensory filtering).
"""

import pytest

from backend.schedule_models import (
    ComponentCategory,
    ComponentScheduleItem,
    CriterionScheduleItem,
    ScheduleConfig,
    TechniqueEntry,
)
from backend.schedule_service import TestingScheduleService, apply_technique_visibility, filter_by_sensory
from backend.tests.utils.wcag_trees import (
    criterion,
    direct,
    guideline,
    principle,
    technique,
    tree,
)
from backend.utils.schedule_stats import (
    component_schedule_stats,
    criterion_schedule_stats,
    minutes_to_hours,
)
from backend.wcag_dataset import WCAGDataset


def _item(number, level="A", minutes=10, principle_label="1 Perceivable", **flags):
    return CriterionScheduleItem(
        id=f"sc-{number}",
        sc_number=number,
        sc_title=f"Criterion {number}",
        sc_level=level,
        guideline="1.1 Text Alternatives",
        principle=principle_label,
        description="",
        estimated_time=minutes,
        **flags,
    )


@pytest.mark.parametrize("minutes, hours", [(0, 0), (29, 0), (30, 1), (89, 1), (90, 2), (150, 3)])
def test_minutes_to_hours_rounds_half_up(minutes, hours):
    assert minutes_to_hours(minutes) == hours


def test_criterion_stats():
    schedule = [
        _item("1.1.1", "A", 45),
        _item("1.4.3", "AA", 45),
        _item("2.1.1", "A", 30, principle_label="2 Operable"),
    ]
    stats = criterion_schedule_stats(schedule)

    assert stats["totalSC"] == 3
    assert stats["estimatedTimeHours"] == 2
    assert stats["byLevel"] == {"A": 2, "AA": 1, "AAA": 0}
    assert stats["byPrinciple"] == {"1": 2, "2": 1}


def test_component_stats():
    entry = TechniqueEntry("H37", "html", "Alt text")
    schedule = [
        ComponentCategory(
            "Images & Graphics",
            "Images",
            components=(ComponentScheduleItem("Images", "img", (entry, entry), 10),),
            total_time=10,
        ),
        ComponentCategory(
            "Forms & Inputs",
            "Forms",
            components=(
                ComponentScheduleItem("Form Inputs", "input", (entry,), 5),
                ComponentScheduleItem("Form Inputs", "select", (entry,), 5),
            ),
            total_time=10,
        ),
    ]
    stats = component_schedule_stats(schedule)

    assert stats == {
        "totalCategories": 2,
        "totalComponents": 3,
        "totalTechniques": 4,
        "estimatedTimeHours": 0,
        "byCategory": {"Images & Graphics": 1, "Forms & Inputs": 2},
    }


def _service():
    data = tree(
        principle(
            "1",
            "Perceivable",
            [
                guideline(
                    "1.1",
                    "Text Alternatives",
                    [
                        criterion(
                            "1.1.1",
                            "Non-text Content",
                            sufficient=[direct(technique("H37", "Using alt attributes on img elements"))],
                            advisory=[technique("C9", "Using CSS to include decorative images", "css")],
                            failure=[technique("F65", "Omitting the alt attribute", "failures")],
                        )
                    ],
                )
            ],
        ),
        principle(
            "2",
            "Operable",
            [guideline("2.1", "Keyboard Accessible", [criterion("2.1.1", "Keyboard")])],
            principle_id="operable",
        ),
    )
    return TestingScheduleService(WCAGDataset(data), techniques_base_url="https://example.test/t")


def test_service_hides_advisory_and_failures_on_request():
    service = _service()
    full = service.generate_criterion_schedule(ScheduleConfig())
    trimmed = service.generate_criterion_schedule(
        ScheduleConfig(include_advisory=False, include_failures=False)
    )

    assert len(full[0].advisory_techniques) == 1
    assert len(full[0].failures) == 1
    assert trimmed[0].advisory_techniques == ()
    assert trimmed[0].failures == ()
    assert trimmed[0].estimated_time == full[0].estimated_time
    assert trimmed[0].testing_steps == full[0].testing_steps
    assert trimmed[0].sufficient_techniques[0].url == "https://example.test/t/html/H37"


def test_visibility_is_a_no_op_by_default():
    schedule = [_item("1.1.1")]
    assert apply_technique_visibility(schedule, ScheduleConfig()) == schedule


def test_service_stats_follow_visibility():
    service = _service()
    schedule = service.generate_criterion_schedule(ScheduleConfig(include_failures=False))
    stats = service.criterion_stats(schedule)
    assert stats["totalFailures"] == 0
    assert stats["totalTechniques"] == 2


def test_service_component_schedule_respects_levels():
    service = _service()
    assert service.generate_component_schedule(ScheduleConfig(levels=("AAA",))) == []
    (category,) = service.generate_component_schedule(ScheduleConfig(levels=("A",)))
    assert category.category == "Images & Graphics"


def test_filter_by_sensory():
    schedule = [
        _item("1.1.1", requires_sight=True),
        _item("1.2.2", requires_sight=True, requires_hearing=True),
        _item("2.1.1", requires_motor=True),
    ]

    assert filter_by_sensory(schedule) == schedule
    assert [i.sc_number for i in filter_by_sensory(schedule, sight=True)] == ["1.1.1", "1.2.2"]
    assert [i.sc_number for i in filter_by_sensory(schedule, sight=True, hearing=False)] == ["1.1.1"]
    assert [i.sc_number for i in filter_by_sensory(schedule, motor=False)] == ["1.1.1", "1.2.2"]
    assert TestingScheduleService.filter_by_sensory(schedule, hearing=True) == [schedule[1]]
