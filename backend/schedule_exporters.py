"""
Schedule exporters.

Renders the in-memory schedules as:

* Markdown narrative reports (one per schedule type);
* pretty-printed JSON, with matching parsers for backup/restore;
* a CSV of recorded test results laid over the criterion schedule.
"""

import csv
import io
import json
from typing import Iterable, List, Mapping, Optional, Sequence

from backend.schedule_models import (
    ComponentCategory,
    CriterionScheduleItem,
    RecordedResult,
    TechniqueReference,
)
from backend.utils.schedule_stats import (
    component_schedule_stats,
    criterion_schedule_stats,
    minutes_to_hours,
)

MAX_SUFFICIENT_LISTED = 5
MAX_ADVISORY_LISTED = 3

NOT_TESTED = "Not Tested"
CSV_HEADERS = [
    "SC Number",
    "SC Title",
    "Level",
    "Conformance Status",
    "Notes",
    "Tested By",
    "Date",
    "Tools Used",
]


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


def _technique_lines(
    techniques: Sequence[TechniqueReference], limit: Optional[int] = None
) -> List[str]:
    shown = techniques if limit is None else techniques[:limit]
    lines = [f"- [{tech.id}]({tech.url}): {tech.title}" for tech in shown]
    if limit is not None and len(techniques) > limit:
        lines.append(f"- ... and {len(techniques) - limit} more")
    return lines


def export_criterion_schedule_markdown(schedule: Sequence[CriterionScheduleItem]) -> str:
    """Narrative report grouped by principle and guideline."""
    stats = criterion_schedule_stats(schedule)
    lines: List[str] = [
        "# WCAG 2.2 Testing Schedule - Success Criteria Based",
        "",
        "> Generated from WCAG 2.2 JSON data",
        "",
        "## Schedule Statistics",
        "",
        f"- **Total Success Criteria**: {stats['totalSC']}",
        f"- **Total Techniques**: {stats['totalTechniques']}",
        f"- **Total Failures to Check**: {stats['totalFailures']}",
        f"- **Estimated Time**: {stats['estimatedTimeHours']} hours",
        "",
        "### By Conformance Level",
        f"- Level A: {stats['byLevel'].get('A', 0)} criteria",
        f"- Level AA: {stats['byLevel'].get('AA', 0)} criteria",
        f"- Level AAA: {stats['byLevel'].get('AAA', 0)} criteria",
        "",
        "---",
        "",
    ]

    current_principle = None
    current_guideline = None

    for index, item in enumerate(schedule, start=1):
        if item.principle != current_principle:
            current_principle = item.principle
            lines.extend(["", f"## {current_principle}", ""])

        if item.guideline != current_guideline:
            current_guideline = item.guideline
            lines.extend([f"### {current_guideline}", ""])

        lines.append(f"#### {index}. {item.sc_number} {item.sc_title} (Level {item.sc_level})")
        lines.append("")
        lines.append(f"**Estimated Time**: {item.estimated_time} minutes")
        lines.append("")
        lines.append("**Description**:")
        lines.append(item.description)
        lines.append("")

        if item.components_to_test:
            lines.append("**Components to Test**: " + ", ".join(item.components_to_test))
            lines.append("")

        if item.sufficient_techniques:
            lines.append("**Sufficient Techniques**:")
            lines.extend(_technique_lines(item.sufficient_techniques, MAX_SUFFICIENT_LISTED))
            lines.append("")

        if item.advisory_techniques:
            lines.append("**Advisory Techniques**:")
            lines.extend(_technique_lines(item.advisory_techniques, MAX_ADVISORY_LISTED))
            lines.append("")

        if item.failures:
            lines.append("**Common Failures to Check**:")
            lines.extend(_technique_lines(item.failures))
            lines.append("")

        lines.append("**Testing Steps**:")
        for step in item.testing_steps:
            # sub-steps are pre-indented "  - ..." lines
            lines.append(step if step.startswith(" ") else f"- {step}")
        lines.append("")

        lines.extend(["---", ""])

    return "\n".join(lines)


def export_component_schedule_markdown(schedule: Sequence[ComponentCategory]) -> str:
    """Narrative report grouped by category and component."""
    stats = component_schedule_stats(schedule)
    lines: List[str] = [
        "# WCAG 2.2 Testing Schedule - Component/Technique Based",
        "",
        "> Generated from WCAG 2.2 JSON data",
        "",
        "## Schedule Statistics",
        "",
        f"- **Total Categories**: {stats['totalCategories']}",
        f"- **Total Components**: {stats['totalComponents']}",
        f"- **Total Techniques**: {stats['totalTechniques']}",
        f"- **Estimated Time**: {stats['estimatedTimeHours']} hours",
        "",
        "---",
        "",
    ]

    for category in schedule:
        lines.extend([f"## {category.category}", "", category.description, ""])
        lines.extend([f"**Total Time**: {minutes_to_hours(category.total_time)} hours", ""])

        for component in category.components:
            lines.append(f"### {component.component}")
            if component.html_element:
                lines.append(f"**HTML Element**: `<{component.html_element}>`")
            lines.append(f"**Estimated Time**: {component.estimated_time} minutes")
            lines.append("")
            lines.extend(["**Techniques to Test**:", ""])

            for tech in component.techniques:
                lines.extend([f"#### {tech.technique_id}: {tech.title}", ""])
                lines.append("**Related Success Criteria**:")
                for sc in tech.related_sc:
                    lines.append(f"- {sc.sc_number} {sc.sc_title} (Level {sc.level})")
                lines.append("")
                lines.append("**Testing Instructions**:")
                lines.append("```")
                lines.append(tech.testing_instructions)
                lines.append("```")
                lines.append("")

            lines.extend(["---", ""])

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def criterion_schedule_to_json(schedule: Iterable[CriterionScheduleItem]) -> str:
    return json.dumps([item.to_dict() for item in schedule], indent=2, ensure_ascii=False)


def component_schedule_to_json(schedule: Iterable[ComponentCategory]) -> str:
    return json.dumps([category.to_dict() for category in schedule], indent=2, ensure_ascii=False)


def criterion_schedule_from_json(text: str) -> List[CriterionScheduleItem]:
    return [CriterionScheduleItem.from_dict(payload) for payload in json.loads(text)]


def component_schedule_from_json(text: str) -> List[ComponentCategory]:
    return [ComponentCategory.from_dict(payload) for payload in json.loads(text)]


# ---------------------------------------------------------------------------
# Results CSV
# ---------------------------------------------------------------------------


def export_results_csv(
    schedule: Sequence[CriterionScheduleItem],
    results: Mapping[str, RecordedResult],
) -> str:
    """One row per schedule item; criteria without a recorded result are "Not Tested"."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for item in schedule:
        result = results.get(item.id)
        if result is None:
            writer.writerow([item.sc_number, item.sc_title, item.sc_level, NOT_TESTED, "", "", "", ""])
            continue
        writer.writerow(
            [
                item.sc_number,
                item.sc_title,
                item.sc_level,
                result.conformance,
                result.observations or result.custom_notes or "",
                result.tested_by or "",
                result.tested_date.isoformat() if result.tested_date else "",
                ", ".join(result.tools),
            ]
        )

    return buffer.getvalue().rstrip("\n")


__all__ = [
    "component_schedule_from_json",
    "component_schedule_to_json",
    "criterion_schedule_from_json",
    "criterion_schedule_to_json",
    "export_component_schedule_markdown",
    "export_criterion_schedule_markdown",
    "export_results_csv",
]
