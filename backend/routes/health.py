"""Health and diagnostics routes."""

from fastapi import APIRouter

from backend.utils.app_helpers import get_schedule_service, get_wcag_data_path
from backend.wcag_dataset import WCAGDatasetError

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Return service status and whether the WCAG dataset could be loaded."""
    payload = {"status": "ok", "dataset": str(get_wcag_data_path())}
    try:
        service = get_schedule_service()
    except WCAGDatasetError as exc:
        payload.update({"status": "degraded", "error": str(exc)})
        return payload

    payload["criteria"] = service.dataset.total_criteria()
    payload["byLevel"] = service.dataset.count_by_level()
    return payload
