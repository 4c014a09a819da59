"""
WCAG source dataset access.

Loads the principles -> guidelines -> success criteria document, checks the
top-level shape once, and exposes read-only traversal helpers used by the
schedule builders and the API routes. Technique records inside a criterion
are deliberately not validated here: incomplete records are tolerated and
dropped later by the technique normalizer.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

TechniqueRecord = Mapping[str, Any]


class WCAGDatasetError(ValueError):
    """Raised when the source document does not have the expected tree shape."""


@dataclass(frozen=True)
class CriterionContext:
    """A success criterion together with the principle and guideline owning it."""

    principle: Mapping[str, Any]
    guideline: Mapping[str, Any]
    criterion: Mapping[str, Any]


# ---------------------------------------------------------------------------
# Sufficient technique shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DirectTechniques:
    """A flat list of technique records listed straight under a sufficient entry."""

    records: Tuple[TechniqueRecord, ...]

    def iter_records(self) -> Iterator[TechniqueRecord]:
        return iter(self.records)


@dataclass(frozen=True)
class GroupedTechniques:
    """Named groups ("situations") each carrying their own technique records."""

    groups: Tuple[Mapping[str, Any], ...]

    def iter_records(self) -> Iterator[TechniqueRecord]:
        for group in self.groups:
            for record in _as_list(group.get("techniques")):
                if isinstance(record, Mapping):
                    yield record


SufficientSource = Union[DirectTechniques, GroupedTechniques]


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def read_sufficient_sources(techniques: Optional[Mapping[str, Any]]) -> List[SufficientSource]:
    """Split a criterion's ``sufficient`` section into direct and grouped sources.

    One entry may carry both a ``techniques`` list and ``groups``; the direct
    source is always emitted before the grouped one for the same entry.
    """
    if not isinstance(techniques, Mapping):
        return []

    sources: List[SufficientSource] = []
    for entry in _as_list(techniques.get("sufficient")):
        if not isinstance(entry, Mapping):
            continue
        direct = [r for r in _as_list(entry.get("techniques")) if isinstance(r, Mapping)]
        if direct:
            sources.append(DirectTechniques(tuple(direct)))
        groups = [g for g in _as_list(entry.get("groups")) if isinstance(g, Mapping)]
        if groups:
            sources.append(GroupedTechniques(tuple(groups)))
    return sources


def iter_sufficient_records(techniques: Optional[Mapping[str, Any]]) -> Iterator[TechniqueRecord]:
    """Yield every sufficient technique record, duplicates included."""
    for source in read_sufficient_sources(techniques):
        yield from source.iter_records()


# ---------------------------------------------------------------------------
# Tree validation / traversal
# ---------------------------------------------------------------------------


def validate_source_tree(data: Any) -> None:
    """Fail fast when principles, guidelines or success criteria arrays are missing."""
    if not isinstance(data, Mapping):
        raise WCAGDatasetError("WCAG dataset must be a JSON object")

    principles = data.get("principles")
    if not isinstance(principles, list):
        raise WCAGDatasetError("WCAG dataset is missing a 'principles' array")

    for p_index, principle in enumerate(principles):
        if not isinstance(principle, Mapping):
            raise WCAGDatasetError(f"Principle #{p_index} is not an object")
        guidelines = principle.get("guidelines")
        if not isinstance(guidelines, list):
            raise WCAGDatasetError(
                f"Principle {principle.get('num', p_index)} is missing a 'guidelines' array"
            )
        for g_index, guideline in enumerate(guidelines):
            if not isinstance(guideline, Mapping):
                raise WCAGDatasetError(
                    f"Guideline #{g_index} of principle {principle.get('num', p_index)} is not an object"
                )
            if not isinstance(guideline.get("successcriteria"), list):
                raise WCAGDatasetError(
                    f"Guideline {guideline.get('num', g_index)} is missing a 'successcriteria' array"
                )


def iter_criteria(data: Mapping[str, Any]) -> Iterator[CriterionContext]:
    """Walk the tree in document order, yielding each criterion with its parents."""
    for principle in data["principles"]:
        for guideline in principle["guidelines"]:
            for criterion in guideline["successcriteria"]:
                if isinstance(criterion, Mapping):
                    yield CriterionContext(principle, guideline, criterion)


def iter_criteria_for_levels(
    data: Mapping[str, Any], levels: Iterable[str]
) -> Iterator[CriterionContext]:
    """Same as :func:`iter_criteria` but skipping criteria outside ``levels``."""
    allowed = set(levels)
    for ctx in iter_criteria(data):
        if ctx.criterion.get("level") in allowed:
            yield ctx


class WCAGDataset:
    """Read-only wrapper around a validated WCAG source document."""

    def __init__(self, data: Mapping[str, Any], source: Optional[str] = None):
        validate_source_tree(data)
        self.data = data
        self.source = source

    @property
    def principles(self) -> List[Mapping[str, Any]]:
        return list(self.data["principles"])

    def iter_criteria(self) -> Iterator[CriterionContext]:
        return iter_criteria(self.data)

    def get_criterion(self, criterion_id: str) -> Optional[CriterionContext]:
        """Look up a criterion by its id ("non-text-content") or number ("1.1.1")."""
        for ctx in self.iter_criteria():
            if criterion_id in (ctx.criterion.get("id"), ctx.criterion.get("num")):
                return ctx
        return None

    def count_by_level(self) -> Dict[str, int]:
        counts = {"A": 0, "AA": 0, "AAA": 0}
        for ctx in self.iter_criteria():
            level = ctx.criterion.get("level")
            if level in counts:
                counts[level] += 1
        return counts

    def total_criteria(self) -> int:
        return sum(1 for _ in self.iter_criteria())


def load_wcag_dataset(path: Union[str, Path]) -> WCAGDataset:
    """Read and validate the dataset file at ``path``."""
    dataset_path = Path(path)
    try:
        raw = json.loads(dataset_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise WCAGDatasetError(f"Could not read WCAG dataset at {dataset_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise WCAGDatasetError(f"WCAG dataset at {dataset_path} is not valid JSON: {exc}") from exc

    dataset = WCAGDataset(raw, source=str(dataset_path))
    logger.info(
        "[WCAGDataset] Loaded %d success criteria from %s",
        dataset.total_criteria(),
        dataset_path,
    )
    return dataset
