"""Routes generating the criterion and component testing schedules."""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.schedule_exporters import (
    component_schedule_to_json,
    criterion_schedule_to_json,
    export_component_schedule_markdown,
    export_criterion_schedule_markdown,
)
from backend.schedule_models import ScheduleConfig
from backend.utils.app_helpers import (
    InvalidLevelError,
    SafeJSONResponse,
    _optional_flag,
    _truthy,
    attachment_response,
    get_schedule_service,
    parse_levels,
)
from backend.wcag_dataset import WCAGDatasetError

logger = logging.getLogger("a11y-schedule-schedules")

router = APIRouter(prefix="/api", tags=["schedules"])


def _build_config(
    levels: Optional[str],
    include_advisory: Optional[str] = None,
    include_failures: Optional[str] = None,
) -> ScheduleConfig:
    return ScheduleConfig(
        levels=parse_levels(levels),
        include_advisory=True if include_advisory is None else _truthy(include_advisory),
        include_failures=True if include_failures is None else _truthy(include_failures),
    )


def _levels_slug(config: ScheduleConfig) -> str:
    return "-".join(config.levels).lower()


def _dataset_error_response(exc: Exception) -> JSONResponse:
    logger.exception("a11y-schedule-backend:dataset unavailable")
    return JSONResponse({"error": f"WCAG dataset unavailable: {exc}"}, status_code=500)


@router.get("/criteria/{criterion_id}")
async def get_criterion(criterion_id: str):
    """Return a raw criterion (by id or number) with its principle/guideline labels."""
    try:
        service = get_schedule_service()
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    ctx = service.dataset.get_criterion(criterion_id)
    if ctx is None:
        return JSONResponse({"error": f"Success criterion {criterion_id} not found"}, status_code=404)

    return SafeJSONResponse(
        {
            "principle": f"{ctx.principle.get('num', '')} {ctx.principle.get('handle', '')}",
            "guideline": f"{ctx.guideline.get('num', '')} {ctx.guideline.get('handle', '')}",
            "criterion": dict(ctx.criterion),
        }
    )


@router.get("/schedules/criteria")
async def get_criterion_schedule(
    levels: Optional[str] = None,
    includeAdvisory: Optional[str] = None,
    includeFailures: Optional[str] = None,
    sight: Optional[str] = None,
    hearing: Optional[str] = None,
    motor: Optional[str] = None,
):
    try:
        config = _build_config(levels, includeAdvisory, includeFailures)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    schedule = service.generate_criterion_schedule(config)
    schedule = service.filter_by_sensory(
        schedule,
        sight=_optional_flag(sight),
        hearing=_optional_flag(hearing),
        motor=_optional_flag(motor),
    )
    return SafeJSONResponse(
        {
            "levels": config.levels,
            "stats": service.criterion_stats(schedule),
            "schedule": schedule,
        }
    )


@router.get("/schedules/components")
async def get_component_schedule(levels: Optional[str] = None):
    try:
        config = _build_config(levels)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    schedule = service.generate_component_schedule(config)
    return SafeJSONResponse(
        {
            "levels": config.levels,
            "stats": service.component_stats(schedule),
            "categories": schedule,
        }
    )


@router.get("/schedules/criteria/markdown")
async def download_criterion_markdown(
    levels: Optional[str] = None,
    includeAdvisory: Optional[str] = None,
    includeFailures: Optional[str] = None,
):
    try:
        config = _build_config(levels, includeAdvisory, includeFailures)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    markdown = export_criterion_schedule_markdown(service.generate_criterion_schedule(config))
    return attachment_response(
        markdown, f"wcag-testing-schedule-criteria-{_levels_slug(config)}.md", "text/markdown"
    )


@router.get("/schedules/components/markdown")
async def download_component_markdown(levels: Optional[str] = None):
    try:
        config = _build_config(levels)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    markdown = export_component_schedule_markdown(service.generate_component_schedule(config))
    return attachment_response(
        markdown, f"wcag-testing-schedule-components-{_levels_slug(config)}.md", "text/markdown"
    )


@router.get("/schedules/criteria/export")
async def export_criterion_json(
    levels: Optional[str] = None,
    includeAdvisory: Optional[str] = None,
    includeFailures: Optional[str] = None,
):
    try:
        config = _build_config(levels, includeAdvisory, includeFailures)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    payload = criterion_schedule_to_json(service.generate_criterion_schedule(config))
    return attachment_response(
        payload, f"wcag-testing-schedule-criteria-{_levels_slug(config)}.json", "application/json"
    )


@router.get("/schedules/components/export")
async def export_component_json(levels: Optional[str] = None):
    try:
        config = _build_config(levels)
        service = get_schedule_service()
    except InvalidLevelError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except WCAGDatasetError as exc:
        return _dataset_error_response(exc)

    payload = component_schedule_to_json(service.generate_component_schedule(config))
    return attachment_response(
        payload, f"wcag-testing-schedule-components-{_levels_slug(config)}.json", "application/json"
    )
