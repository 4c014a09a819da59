"""Immutable data containers for the generated testing schedules.

Every container is a frozen dataclass whose collections are tuples, so a
schedule handed to the UI or an exporter cannot be changed after the build.
``to_dict`` emits the camelCase payload used by the frontend and the JSON
export; ``from_dict`` rebuilds an equal object from that payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple

CONFORMANCE_LEVELS: Tuple[str, ...] = ("A", "AA", "AAA")


@dataclass(frozen=True)
class TechniqueReference:
    """A technique cited by a success criterion, with its documentation URL."""

    id: str
    technology: str
    title: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "technology": self.technology,
            "title": self.title,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TechniqueReference":
        return cls(
            id=payload["id"],
            technology=payload["technology"],
            title=payload["title"],
            url=payload["url"],
        )


@dataclass(frozen=True)
class CriterionScheduleItem:
    """One success criterion with everything a tester needs to evaluate it."""

    id: str
    sc_number: str
    sc_title: str
    sc_level: str
    guideline: str
    principle: str
    description: str
    sufficient_techniques: Tuple[TechniqueReference, ...] = ()
    advisory_techniques: Tuple[TechniqueReference, ...] = ()
    failures: Tuple[TechniqueReference, ...] = ()
    testing_steps: Tuple[str, ...] = ()
    components_to_test: Tuple[str, ...] = ()
    estimated_time: int = 0
    requires_sight: bool = False
    requires_hearing: bool = False
    requires_motor: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "scNumber": self.sc_number,
            "scTitle": self.sc_title,
            "scLevel": self.sc_level,
            "guideline": self.guideline,
            "principle": self.principle,
            "description": self.description,
            "sufficientTechniques": [t.to_dict() for t in self.sufficient_techniques],
            "advisoryTechniques": [t.to_dict() for t in self.advisory_techniques],
            "failures": [t.to_dict() for t in self.failures],
            "testingSteps": list(self.testing_steps),
            "componentsToTest": list(self.components_to_test),
            "estimatedTime": self.estimated_time,
            "requiresSight": self.requires_sight,
            "requiresHearing": self.requires_hearing,
            "requiresMotor": self.requires_motor,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CriterionScheduleItem":
        return cls(
            id=payload["id"],
            sc_number=payload["scNumber"],
            sc_title=payload["scTitle"],
            sc_level=payload["scLevel"],
            guideline=payload["guideline"],
            principle=payload["principle"],
            description=payload.get("description", ""),
            sufficient_techniques=tuple(
                TechniqueReference.from_dict(t) for t in payload.get("sufficientTechniques", [])
            ),
            advisory_techniques=tuple(
                TechniqueReference.from_dict(t) for t in payload.get("advisoryTechniques", [])
            ),
            failures=tuple(TechniqueReference.from_dict(t) for t in payload.get("failures", [])),
            testing_steps=tuple(payload.get("testingSteps", [])),
            components_to_test=tuple(payload.get("componentsToTest", [])),
            estimated_time=int(payload.get("estimatedTime", 0)),
            requires_sight=bool(payload.get("requiresSight", False)),
            requires_hearing=bool(payload.get("requiresHearing", False)),
            requires_motor=bool(payload.get("requiresMotor", False)),
        )


@dataclass(frozen=True)
class RelatedCriterion:
    sc_number: str
    sc_title: str
    level: str

    def to_dict(self) -> Dict[str, Any]:
        return {"scNumber": self.sc_number, "scTitle": self.sc_title, "level": self.level}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RelatedCriterion":
        return cls(
            sc_number=payload["scNumber"],
            sc_title=payload["scTitle"],
            level=payload["level"],
        )


@dataclass(frozen=True)
class TechniqueEntry:
    """A technique tested on one component, with every criterion citing it."""

    technique_id: str
    technology: str
    title: str
    related_sc: Tuple[RelatedCriterion, ...] = ()
    testing_instructions: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "techniqueId": self.technique_id,
            "technology": self.technology,
            "title": self.title,
            "relatedSC": [sc.to_dict() for sc in self.related_sc],
            "testingInstructions": self.testing_instructions,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TechniqueEntry":
        return cls(
            technique_id=payload["techniqueId"],
            technology=payload["technology"],
            title=payload["title"],
            related_sc=tuple(RelatedCriterion.from_dict(sc) for sc in payload.get("relatedSC", [])),
            testing_instructions=payload.get("testingInstructions", ""),
        )


@dataclass(frozen=True)
class ComponentScheduleItem:
    component: str
    html_element: Optional[str] = None
    techniques: Tuple[TechniqueEntry, ...] = ()
    estimated_time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "htmlElement": self.html_element,
            "techniques": [t.to_dict() for t in self.techniques],
            "estimatedTime": self.estimated_time,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ComponentScheduleItem":
        return cls(
            component=payload["component"],
            html_element=payload.get("htmlElement"),
            techniques=tuple(TechniqueEntry.from_dict(t) for t in payload.get("techniques", [])),
            estimated_time=int(payload.get("estimatedTime", 0)),
        )


@dataclass(frozen=True)
class ComponentCategory:
    category: str
    description: str
    components: Tuple[ComponentScheduleItem, ...] = ()
    total_time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "components": [c.to_dict() for c in self.components],
            "totalTime": self.total_time,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ComponentCategory":
        return cls(
            category=payload["category"],
            description=payload.get("description", ""),
            components=tuple(
                ComponentScheduleItem.from_dict(c) for c in payload.get("components", [])
            ),
            total_time=int(payload.get("totalTime", 0)),
        )


@dataclass(frozen=True)
class ScheduleConfig:
    """Per-call generation options; the builders themselves only see ``levels``."""

    levels: Tuple[str, ...] = CONFORMANCE_LEVELS
    include_advisory: bool = True
    include_failures: bool = True


@dataclass(frozen=True)
class RecordedResult:
    """A tester's verdict for one criterion, keyed externally by criterion id."""

    conformance: str
    observations: str = ""
    custom_notes: str = ""
    tested_by: Optional[str] = None
    tested_date: Optional[date] = None
    tools: Tuple[str, ...] = field(default_factory=tuple)
