# core/responses.py

"""
Standard API response envelope.

Every response body has the shape:

    {"success": bool, "message": str, "data": ..., "timestamp": ISO-8601}

Error bodies additionally carry ``error`` (populated only outside
production) and, for validation failures, ``errors``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from core.config import settings


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(message: str = "Success", data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "message": message,
            "data": jsonable_encoder(data),
            "timestamp": _timestamp(),
        },
    )


def error_response(
    message: str = "Internal server error",
    status_code: int = 500,
    error: Any = None,
    errors: Optional[List[Dict[str, Any]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "message": message,
        "data": None,
        "error": None if settings.is_production else jsonable_encoder(error),
        "timestamp": _timestamp(),
    }
    if errors is not None:
        content["errors"] = jsonable_encoder(errors)

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def validation_message(errors: List[Dict[str, Any]], message: str = "Validation failed") -> str:
    """Fold per-field problems into one human-readable message."""
    if not errors:
        return message
    parts = [f"{err.get('field') or 'Field'}: {err.get('message')}" for err in errors]
    return f"{message}: {', '.join(parts)}"
