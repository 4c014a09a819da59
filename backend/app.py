# backend/app.py

# Standard library imports
import logging
import os
import sys
from pathlib import Path

# Third-party imports
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Ensure project root in sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Local application imports
from backend.routes import health_router, results_router, schedules_router
from backend.utils.app_helpers import FRONTEND_URL, get_wcag_data_path


# ----------------------
# Logging & Config
# ----------------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("a11y-schedule-backend")

load_dotenv()


# ----------------------
# FastAPI app + CORS
# ----------------------
app = FastAPI(title="WCAG Testing Schedule API")

origins = [
    FRONTEND_URL,
    "http://localhost:3000",  # local dev
    "http://localhost:5173",  # vite dev server
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(dict.fromkeys(origins)),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(schedules_router)
app.include_router(results_router)

logger.info("[Backend] Serving testing schedules from %s", get_wcag_data_path())


# ----------------------
# Error handlers (basic)
# ----------------------
@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    path = request.url.path
    hint = "Use /api/health for the health endpoint." if path == "/health" else None
    logger.warning("a11y-schedule-backend: route not found: %s", path)
    payload = {"error": "Route not found", "path": path}
    if hint:
        payload["hint"] = hint
    return JSONResponse(status_code=404, content=payload)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ----------------------
# Run locally with: python -m backend.app
# ----------------------
if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 5000))
    uvicorn.run("backend.app:app", host="0.0.0.0", port=port, reload=True)
