"""Helper utilities shared by the FastAPI app and its routers."""

import json
import logging
import os
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

from dotenv import load_dotenv
from fastapi.responses import JSONResponse, Response
from werkzeug.utils import secure_filename

from backend.schedule_generator import DEFAULT_TECHNIQUES_BASE_URL
from backend.schedule_models import CONFORMANCE_LEVELS
from backend.schedule_service import TestingScheduleService
from backend.wcag_dataset import load_wcag_dataset

load_dotenv()

logger = logging.getLogger("a11y-schedule-backend")

BACKEND_DIR = Path(__file__).resolve().parent.parent
DEFAULT_WCAG_DATA_PATH = BACKEND_DIR / "data" / "wcag22_sample.json"
DEFAULT_LEVELS: Tuple[str, ...] = ("A", "AA")

WCAG_DATA_PATH_ENV = "WCAG_DATA_PATH"
TECHNIQUES_BASE_URL_ENV = "WCAG_TECHNIQUES_BASE_URL"
DEFAULT_LEVELS_ENV = "SCHEDULE_DEFAULT_LEVELS"

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")


class InvalidLevelError(ValueError):
    """Raised when a requested conformance level is not A, AA or AAA."""


def to_json_safe(data):
    """
    Recursively convert data into JSON-safe types:
    - datetime/date -> ISO string
    - tuple/set -> list
    - objects exposing to_dict() -> their dict payload
    """
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    elif hasattr(data, "to_dict"):
        return to_json_safe(data.to_dict())
    elif isinstance(data, dict):
        return {k: to_json_safe(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple, set)):
        return [to_json_safe(v) for v in data]
    else:
        return data


class SafeJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        safe = to_json_safe(content)
        return json.dumps(safe, ensure_ascii=False).encode("utf-8")


def _truthy(value):
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "y", "on"}


def _optional_flag(value: Optional[str]) -> Optional[bool]:
    """Tri-state query flag: missing/blank -> None, otherwise truthiness."""
    if value is None or not str(value).strip():
        return None
    return _truthy(value)


def _parse_level_values(raw: Any) -> Tuple[str, ...]:
    values: Iterable[str]
    if isinstance(raw, str):
        values = raw.split(",")
    else:
        values = raw

    requested = {str(v).strip().upper() for v in values if str(v).strip()}
    unknown = sorted(requested - set(CONFORMANCE_LEVELS))
    if unknown:
        raise InvalidLevelError(
            f"Unknown conformance level(s): {', '.join(unknown)}. Use A, AA or AAA."
        )
    return tuple(level for level in CONFORMANCE_LEVELS if level in requested)


def parse_levels(raw: Optional[Any]) -> Tuple[str, ...]:
    """Parse "A,AA" (or a list) into an ordered tuple of conformance levels.

    Missing or blank input falls back to :func:`get_default_levels`.
    """
    if raw is None:
        return get_default_levels()
    return _parse_level_values(raw) or get_default_levels()


def get_default_levels() -> Tuple[str, ...]:
    """Resolve default levels: SCHEDULE_DEFAULT_LEVELS env var, then A + AA."""
    env_value = os.getenv(DEFAULT_LEVELS_ENV)
    if env_value:
        try:
            levels = _parse_level_values(env_value)
        except InvalidLevelError:
            logger.warning(
                "[Config] Ignoring invalid %s=%r, using %s",
                DEFAULT_LEVELS_ENV,
                env_value,
                ",".join(DEFAULT_LEVELS),
            )
        else:
            if levels:
                return levels
    return DEFAULT_LEVELS


def get_wcag_data_path(override: Optional[str] = None) -> Path:
    """Dataset path: explicit override, WCAG_DATA_PATH env var, bundled sample."""
    if override:
        return Path(override)
    env_value = os.getenv(WCAG_DATA_PATH_ENV)
    if env_value:
        return Path(env_value)
    return DEFAULT_WCAG_DATA_PATH


def get_techniques_base_url(override: Optional[str] = None) -> str:
    return override or os.getenv(TECHNIQUES_BASE_URL_ENV) or DEFAULT_TECHNIQUES_BASE_URL


@lru_cache(maxsize=4)
def _cached_service(data_path: str, base_url: str) -> TestingScheduleService:
    dataset = load_wcag_dataset(data_path)
    return TestingScheduleService(dataset, techniques_base_url=base_url)


def get_schedule_service() -> TestingScheduleService:
    """Return the service for the configured dataset (loaded once per path)."""
    return _cached_service(str(get_wcag_data_path()), get_techniques_base_url())


def reset_schedule_service_cache() -> None:
    _cached_service.cache_clear()


def attachment_response(content: str, filename: str, media_type: str) -> Response:
    """Wrap generated text as a downloadable UTF-8 attachment."""
    safe_name = secure_filename(filename) or "download.txt"
    headers = {"Content-Disposition": f'attachment; filename="{safe_name}"'}
    return Response(
        content=content.encode("utf-8"),
        media_type=f"{media_type}; charset=utf-8",
        headers=headers,
    )
