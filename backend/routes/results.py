"""Export of tester-recorded results laid over the criterion schedule."""

import logging
from datetime import date
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.schedule_exporters import export_results_csv
from backend.schedule_models import RecordedResult, ScheduleConfig
from backend.utils.app_helpers import (
    InvalidLevelError,
    attachment_response,
    get_schedule_service,
    parse_levels,
)
from backend.wcag_dataset import WCAGDatasetError

logger = logging.getLogger("a11y-schedule-results")

router = APIRouter(prefix="/api/results", tags=["results"])

# Excel needs the BOM to detect UTF-8
CSV_BOM = "\ufeff"

ConformanceStatus = Literal[
    "Supports",
    "Partially Supports",
    "Does Not Support",
    "Not Applicable",
]


class RecordedResultPayload(BaseModel):
    conformance: ConformanceStatus
    observations: Optional[str] = ""
    customNotes: Optional[str] = ""
    testedBy: Optional[str] = None
    testedDate: Optional[date] = None
    tools: List[str] = Field(default_factory=list)

    def to_result(self) -> RecordedResult:
        return RecordedResult(
            conformance=self.conformance,
            observations=self.observations or "",
            custom_notes=self.customNotes or "",
            tested_by=self.testedBy,
            tested_date=self.testedDate,
            tools=tuple(self.tools),
        )


class ResultsExportPayload(BaseModel):
    levels: Optional[List[str]] = None
    # keyed by success criterion id, e.g. "non-text-content"
    results: Dict[str, RecordedResultPayload] = Field(default_factory=dict)
    filename: Optional[str] = None


@router.post("/csv")
async def export_results(payload: ResultsExportPayload = Body(...)):
    try:
        levels = parse_levels(payload.levels)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        logger.exception("a11y-schedule-backend:dataset unavailable")
        return JSONResponse({"error": f"WCAG dataset unavailable: {exc}"}, status_code=500)

    schedule = service.generate_criterion_schedule(ScheduleConfig(levels=levels))
    results = {criterion_id: item.to_result() for criterion_id, item in payload.results.items()}

    known_ids = {item.id for item in schedule}
    unmatched = sorted(set(results) - known_ids)
    if unmatched:
        logger.info(
            "[Results] %d recorded result(s) have no matching criterion in the schedule: %s",
            len(unmatched),
            ", ".join(unmatched),
        )

    csv_text = export_results_csv(schedule, results)
    filename = payload.filename or f"wcag-test-results-{'-'.join(levels).lower()}.csv"
    return attachment_response(CSV_BOM + csv_text, filename, "text/csv")
