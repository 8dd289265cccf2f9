# routers/health.py

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from core.config import settings
from core.responses import success_response

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)

_STARTED_AT = time.monotonic()


# -----------------------------------------------------
# GET /health
# No auth required
# -----------------------------------------------------
@router.get("", summary="App health check")
def health():
    """
    Lightweight health check for uptime monitors.
    """
    return success_response(
        "Service is healthy",
        {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.ENV,
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
        },
    )
