# tests/test_rate_limiter.py

"""
Tests for the in-memory rate limiter.
"""

from unittest.mock import Mock, patch

import pytest
from fastapi import HTTPException

from core import rate_limiter
from core.rate_limiter import (
    check_rate_limit,
    get_rate_limit_identifier,
    require_rate_limit,
    reset_rate_limits,
)


def _request(host="10.0.0.1", forwarded=None):
    request = Mock()
    request.client.host = host
    request.headers = {"X-Forwarded-For": forwarded} if forwarded else {}
    return request


def test_allows_up_to_limit():
    results = [check_rate_limit("k", max_requests=3, window_seconds=60) for _ in range(4)]

    assert [allowed for allowed, _ in results] == [True, True, True, False]
    assert [remaining for _, remaining in results] == [2, 1, 0, 0]


def test_window_slides():
    with patch("core.rate_limiter.time.time", return_value=1000.0):
        check_rate_limit("k", max_requests=1, window_seconds=10)
        assert check_rate_limit("k", max_requests=1, window_seconds=10)[0] is False

    with patch("core.rate_limiter.time.time", return_value=1011.0):
        assert check_rate_limit("k", max_requests=1, window_seconds=10)[0] is True


def test_reset_clears_counts():
    check_rate_limit("k", max_requests=1, window_seconds=60)
    reset_rate_limits()
    assert check_rate_limit("k", max_requests=1, window_seconds=60)[0] is True


def test_identifier_prefers_forwarded_for():
    assert get_rate_limit_identifier(_request()) == "ip:10.0.0.1"
    assert get_rate_limit_identifier(_request(forwarded="1.2.3.4, 5.6.7.8"), scope="login") == "login:ip:1.2.3.4"


def test_require_rate_limit_raises_429():
    request = _request()
    require_rate_limit(request, max_requests=1, window_seconds=30)

    with pytest.raises(HTTPException) as exc:
        require_rate_limit(request, max_requests=1, window_seconds=30)

    assert exc.value.status_code == 429
    assert exc.value.headers["Retry-After"] == "30"


def test_idle_identifiers_are_evicted():
    with patch("core.rate_limiter.time.time", return_value=1000.0):
        check_rate_limit("a", max_requests=5, window_seconds=10)
        check_rate_limit("b", max_requests=5, window_seconds=10)

    assert {"a", "b"} <= set(rate_limiter._rate_limit_store)

    with patch("core.rate_limiter.time.time", return_value=1100.0):
        check_rate_limit("c", max_requests=5, window_seconds=10)

    assert set(rate_limiter._rate_limit_store) == {"c"}


def test_active_identifiers_survive_sweep():
    with patch("core.rate_limiter.time.time", return_value=1000.0):
        check_rate_limit("old", max_requests=5, window_seconds=10)

    with patch("core.rate_limiter.time.time", return_value=1008.0):
        check_rate_limit("recent", max_requests=5, window_seconds=10)

    with patch("core.rate_limiter.time.time", return_value=1012.0):
        check_rate_limit("c", max_requests=5, window_seconds=10)

    assert set(rate_limiter._rate_limit_store) == {"recent", "c"}
