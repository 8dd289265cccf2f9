# core/rate_limiter.py

from typing import Dict, List, Optional, Tuple
from fastapi import HTTPException, Request
from collections import defaultdict
from threading import Lock
import time

from core.config import settings


# Simple in-memory sliding-window limiter (per process).
# Behind several workers each one counts separately.
# Idle identifiers are swept at most once per window.
_rate_limit_store: Dict[str, List[float]] = defaultdict(list)
_lock = Lock()
_last_sweep = 0.0


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record a request for ``identifier`` unless the window is full.

    Returns:
        Tuple of (allowed: bool, remaining: int)
    """
    global _last_sweep

    now = time.time()
    window_start = now - window_seconds

    with _lock:
        if now - _last_sweep >= window_seconds:
            _sweep_idle(window_start)
            _last_sweep = now

        requests = [ts for ts in _rate_limit_store.get(identifier, ()) if ts > window_start]

        if len(requests) >= max_requests:
            _rate_limit_store[identifier] = requests
            return False, 0

        requests.append(now)
        _rate_limit_store[identifier] = requests
        return True, max_requests - len(requests)


def _sweep_idle(window_start: float):
    """Drop identifiers with no request inside the window. Caller holds the lock."""
    idle = [key for key, stamps in _rate_limit_store.items() if not stamps or stamps[-1] <= window_start]
    for key in idle:
        del _rate_limit_store[key]


def reset_rate_limits():
    global _last_sweep

    with _lock:
        _rate_limit_store.clear()
        _last_sweep = 0.0


def get_rate_limit_identifier(request: Request, scope: Optional[str] = None) -> str:
    """
    Key requests by client IP (first X-Forwarded-For hop when proxied),
    optionally namespaced by ``scope`` so limits don't bleed across routes.
    """
    client_ip = request.client.host if request.client else "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    return f"{scope}:ip:{client_ip}" if scope else f"ip:{client_ip}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    """
    Raises:
        HTTPException: 429 Too Many Requests if limit exceeded
    """
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many requests, please try again later.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining


def login_rate_limit(request: Request) -> int:
    """FastAPI dependency applied to POST /auth/login."""
    return require_rate_limit(
        request,
        identifier=get_rate_limit_identifier(request, scope="login"),
        max_requests=settings.LOGIN_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    )
