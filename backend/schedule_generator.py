"""
Testing Schedule Generator

Re-projects the WCAG principles -> guidelines -> success criteria tree into two
ready-to-use testing schedules:

1. a success-criterion schedule (one item per criterion, sorted by number);
2. a component schedule (techniques merged per UI component, grouped into
   categories).

Both builders are pure: they read the source tree, never mutate it, and
return fresh immutable structures on every call.
"""

import logging
import re
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from backend.component_classifier import ComponentMatch, classify_technique, get_component_category
from backend.schedule_models import (
    CONFORMANCE_LEVELS,
    ComponentCategory,
    ComponentScheduleItem,
    CriterionScheduleItem,
    RelatedCriterion,
    TechniqueEntry,
    TechniqueReference,
)
from backend.wcag_dataset import (
    CriterionContext,
    iter_criteria_for_levels,
    iter_sufficient_records,
    validate_source_tree,
)

logger = logging.getLogger(__name__)

DEFAULT_TECHNIQUES_BASE_URL = "https://www.w3.org/WAI/WCAG22/Techniques"

TECHNIQUE_CATEGORIES = ("sufficient", "advisory", "failure")

SIGHT_PRINCIPLES = {"perceivable"}
MOTOR_PRINCIPLES = {"operable"}
HEARING_GUIDELINES = {"time-based-media", "audio-content"}

BASE_CRITERION_MINUTES = 10
SUFFICIENT_MINUTES = 5
ADVISORY_MINUTES = 3
FAILURE_MINUTES = 2
COMPONENT_TECHNIQUE_MINUTES = 5

MAX_LISTED_STEPS = 3

_TAG_RE = re.compile(r"<[^>]*>")
_HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


# ---------------------------------------------------------------------------
# Small pure helpers
# ---------------------------------------------------------------------------


def strip_html(html: Optional[str]) -> str:
    """Drop tags and decode the handful of entities found in criterion text.

    Only ``&nbsp; &amp; &lt; &gt; &quot;`` are decoded; any other entity is
    left as-is.
    """
    if not html:
        return ""
    text = _TAG_RE.sub("", html)
    for entity, replacement in _HTML_ENTITIES:
        text = text.replace(entity, replacement)
    return text.strip()


def criterion_sort_key(number: str) -> Tuple[Tuple[int, Any], ...]:
    """Sort key for dotted criterion numbers so "1.2.1" < "1.10.1".

    Numeric segments compare as integers; a non-numeric segment sorts after
    any numeric one at the same position.
    """
    key: List[Tuple[int, Any]] = []
    for part in str(number or "").split("."):
        try:
            key.append((0, int(part)))
        except ValueError:
            key.append((1, part))
    return tuple(key)


def calculate_estimated_time(sufficient_count: int, advisory_count: int, failure_count: int) -> int:
    """Minutes needed to test one criterion."""
    return (
        BASE_CRITERION_MINUTES
        + sufficient_count * SUFFICIENT_MINUTES
        + advisory_count * ADVISORY_MINUTES
        + failure_count * FAILURE_MINUTES
    )


def _is_complete_record(record: Mapping[str, Any]) -> bool:
    return bool(record.get("id") and record.get("technology") and record.get("title"))


def _composed_label(node: Mapping[str, Any]) -> str:
    return f"{node.get('num', '')} {node.get('handle', '')}"


# ---------------------------------------------------------------------------
# Technique normalizer
# ---------------------------------------------------------------------------


def technique_url(technique_id: str, technology: str, category: str, base_url: str) -> str:
    base = base_url.rstrip("/")
    if category == "failure":
        return f"{base}/failures/{technique_id}"
    return f"{base}/{technology}/{technique_id}"


def _to_reference(record: Mapping[str, Any], category: str, base_url: str) -> TechniqueReference:
    technique_id = str(record["id"])
    technology = str(record["technology"])
    return TechniqueReference(
        id=technique_id,
        technology=technology,
        title=str(record["title"]),
        url=technique_url(technique_id, technology, category, base_url),
    )


def normalize_techniques(
    techniques: Optional[Mapping[str, Any]],
    category: str,
    base_url: str = DEFAULT_TECHNIQUES_BASE_URL,
) -> List[TechniqueReference]:
    """Flatten one technique category of a criterion into ordered references.

    Incomplete records are dropped. Sufficient techniques coming from direct
    lists and from groups are de-duplicated by id (first occurrence wins);
    advisory and failure lists are filtered and mapped as-is.
    """
    if category not in TECHNIQUE_CATEGORIES:
        raise ValueError(f"Unknown technique category: {category}")
    if not isinstance(techniques, Mapping):
        return []

    if category == "sufficient":
        seen = set()
        references: List[TechniqueReference] = []
        for record in iter_sufficient_records(techniques):
            if not _is_complete_record(record) or record["id"] in seen:
                continue
            seen.add(record["id"])
            references.append(_to_reference(record, category, base_url))
        return references

    raw = techniques.get(category)
    if not isinstance(raw, list):
        return []
    return [
        _to_reference(record, category, base_url)
        for record in raw
        if isinstance(record, Mapping) and _is_complete_record(record)
    ]


# ---------------------------------------------------------------------------
# Criterion schedule
# ---------------------------------------------------------------------------


def generate_testing_steps(
    criterion: Mapping[str, Any],
    techniques: Sequence[TechniqueReference],
    failures: Sequence[TechniqueReference],
) -> List[str]:
    steps = [
        f"Read and understand {criterion.get('num', '')} {criterion.get('handle', '')}",
        "Identify all relevant components on the page",
    ]

    if techniques:
        steps.append("Test using at least one sufficient technique:")
        steps.extend(f"  - {tech.id}: {tech.title}" for tech in techniques[:MAX_LISTED_STEPS])

    if failures:
        steps.append("Check for common failures:")
        steps.extend(f"  - {failure.id}: {failure.title}" for failure in failures[:MAX_LISTED_STEPS])

    steps.append("Document results and take screenshots of any issues")
    steps.append("Record assistive technology and browser used for testing")
    return steps


# (keywords searched in the raw title, component name); HTML techniques only
_HTML_TITLE_COMPONENTS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("img", "image"), "Images"),
    (("form", "input", "label"), "Forms"),
    (("link", "anchor"), "Links"),
    (("button",), "Buttons"),
    (("heading",), "Headings"),
    (("table",), "Tables"),
    (("video", "audio"), "Media"),
)


def identify_components(techniques: Iterable[TechniqueReference]) -> List[str]:
    """Guess which page components a criterion touches from its techniques."""
    components: "OrderedDict[str, None]" = OrderedDict()

    for tech in techniques:
        if not tech.id:
            continue
        technique_id = tech.id.upper()

        if technique_id.startswith("H"):
            for keywords, component in _HTML_TITLE_COMPONENTS:
                if any(keyword in tech.title for keyword in keywords):
                    components[component] = None

        if technique_id.startswith("ARIA"):
            components["ARIA Components"] = None

    return list(components)


def build_criterion_item(
    ctx: CriterionContext, base_url: str = DEFAULT_TECHNIQUES_BASE_URL
) -> CriterionScheduleItem:
    """Turn one criterion (with its parents) into a schedule item."""
    principle, guideline, criterion = ctx.principle, ctx.guideline, ctx.criterion
    techniques = criterion.get("techniques")

    sufficient = normalize_techniques(techniques, "sufficient", base_url)
    advisory = normalize_techniques(techniques, "advisory", base_url)
    failures = normalize_techniques(techniques, "failure", base_url)

    return CriterionScheduleItem(
        id=str(criterion.get("id", "")),
        sc_number=str(criterion.get("num", "")),
        sc_title=str(criterion.get("handle", "")),
        sc_level=str(criterion.get("level", "")),
        guideline=_composed_label(guideline),
        principle=_composed_label(principle),
        description=strip_html(criterion.get("content")),
        sufficient_techniques=tuple(sufficient),
        advisory_techniques=tuple(advisory),
        failures=tuple(failures),
        testing_steps=tuple(generate_testing_steps(criterion, sufficient, failures)),
        components_to_test=tuple(identify_components(sufficient)),
        estimated_time=calculate_estimated_time(len(sufficient), len(advisory), len(failures)),
        requires_sight=principle.get("id") in SIGHT_PRINCIPLES,
        requires_hearing=guideline.get("id") in HEARING_GUIDELINES,
        requires_motor=principle.get("id") in MOTOR_PRINCIPLES,
    )


def generate_criterion_schedule(
    wcag_data: Mapping[str, Any],
    levels: Iterable[str] = CONFORMANCE_LEVELS,
    *,
    base_url: str = DEFAULT_TECHNIQUES_BASE_URL,
) -> List[CriterionScheduleItem]:
    """Build the success-criterion schedule for the requested levels."""
    validate_source_tree(wcag_data)
    levels = tuple(levels)

    schedule = [
        build_criterion_item(ctx, base_url) for ctx in iter_criteria_for_levels(wcag_data, levels)
    ]
    schedule.sort(key=lambda item: criterion_sort_key(item.sc_number))

    logger.debug(
        "[ScheduleGenerator] Built %d criterion items for levels %s",
        len(schedule),
        ",".join(levels),
    )
    return schedule


# ---------------------------------------------------------------------------
# Component schedule
# ---------------------------------------------------------------------------


def generate_technique_instructions(technique: Mapping[str, Any], match: ComponentMatch) -> str:
    lines = [
        f"Test {technique.get('id')}: {technique.get('title')}",
        "",
        "Steps:",
        f"1. Locate all {match.target_label} elements",
        "2. Verify implementation matches technique requirements",
        "3. Test with keyboard navigation",
        "4. Test with screen reader",
        "5. Document any issues found",
    ]
    return "\n".join(lines)


class _ComponentAccumulator:
    """Mutable working record for one component while the tree is walked."""

    def __init__(self, match: ComponentMatch):
        self.match = match
        self.entries: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    def add(
        self,
        technique: Mapping[str, Any],
        related: RelatedCriterion,
        collapse_duplicate_criteria: bool,
    ) -> None:
        technique_id = str(technique["id"])
        entry = self.entries.get(technique_id)
        if entry is None:
            self.entries[technique_id] = {
                "technology": str(technique["technology"]),
                "title": str(technique["title"]),
                "related": [related],
                "instructions": generate_technique_instructions(technique, self.match),
            }
            return

        if collapse_duplicate_criteria and any(
            existing.sc_number == related.sc_number for existing in entry["related"]
        ):
            return
        entry["related"].append(related)

    def freeze(self) -> ComponentScheduleItem:
        techniques = tuple(
            TechniqueEntry(
                technique_id=technique_id,
                technology=entry["technology"],
                title=entry["title"],
                related_sc=tuple(entry["related"]),
                testing_instructions=entry["instructions"],
            )
            for technique_id, entry in self.entries.items()
        )
        return ComponentScheduleItem(
            component=self.match.component,
            html_element=self.match.html_element,
            techniques=techniques,
            estimated_time=len(techniques) * COMPONENT_TECHNIQUE_MINUTES,
        )


def group_components(components: Iterable[ComponentScheduleItem]) -> List[ComponentCategory]:
    """Assign components to their fixed categories and total the time per category."""
    grouped: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for component in components:
        category = get_component_category(component.component)
        bucket = grouped.setdefault(
            category["name"],
            {"description": category["description"], "components": []},
        )
        bucket["components"].append(component)

    categories = [
        ComponentCategory(
            category=name,
            description=bucket["description"],
            components=tuple(bucket["components"]),
            total_time=sum(c.estimated_time for c in bucket["components"]),
        )
        for name, bucket in grouped.items()
    ]
    categories.sort(key=lambda c: c.category.casefold())
    return categories


def generate_component_schedule(
    wcag_data: Mapping[str, Any],
    levels: Iterable[str] = CONFORMANCE_LEVELS,
    *,
    collapse_duplicate_criteria: bool = False,
) -> List[ComponentCategory]:
    """Build the component/technique schedule for the requested levels.

    Sufficient techniques are read without the cross-group de-duplication used
    for the criterion schedule; merging happens on the component key instead.
    With ``collapse_duplicate_criteria`` left off, a technique listed twice for
    one criterion records that criterion twice in ``relatedSC``.
    """
    validate_source_tree(wcag_data)
    levels = tuple(levels)
    accumulators: "OrderedDict[str, _ComponentAccumulator]" = OrderedDict()

    for ctx in iter_criteria_for_levels(wcag_data, levels):
        criterion = ctx.criterion
        related = RelatedCriterion(
            sc_number=str(criterion.get("num", "")),
            sc_title=str(criterion.get("handle", "")),
            level=str(criterion.get("level", "")),
        )
        for technique in iter_sufficient_records(criterion.get("techniques")):
            if not _is_complete_record(technique):
                continue
            match = classify_technique(technique)
            accumulator = accumulators.get(match.merge_key)
            if accumulator is None:
                accumulator = accumulators[match.merge_key] = _ComponentAccumulator(match)
            accumulator.add(technique, related, collapse_duplicate_criteria)

    categories = group_components(acc.freeze() for acc in accumulators.values())
    logger.debug(
        "[ScheduleGenerator] Built %d components in %d categories for levels %s",
        len(accumulators),
        len(categories),
        ",".join(levels),
    )
    return categories


__all__ = [
    "DEFAULT_TECHNIQUES_BASE_URL",
    "calculate_estimated_time",
    "criterion_sort_key",
    "generate_component_schedule",
    "generate_criterion_schedule",
    "generate_technique_instructions",
    "generate_testing_steps",
    "identify_components",
    "normalize_techniques",
    "strip_html",
]
