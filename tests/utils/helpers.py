from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import httpx

from storefront.core.security import create_access_token

# Thursday 2026-10-15 14:30 UTC; "week" is Mon 12th to Sun 18th, "month" is
# October, and the previous month-length range is Aug 31st to Sep 30th.
FIXED_NOW = datetime(2026, 10, 15, 14, 30, tzinfo=UTC)


def clock_at(moment: datetime) -> Callable[[], datetime]:
    return lambda: moment


fixed_clock = clock_at(FIXED_NOW)


def access_token_for(user: Any) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})


def set_access_token_cookie(client: httpx.AsyncClient, access_token: str) -> None:
    client.cookies.set("access_token", access_token)


def assert_envelope_success(data: dict[str, Any], cached: bool | None = False) -> None:
    assert data["success"] is True
    assert data["errors"] is None
    assert data["meta"]["cached"] is cached
    assert "timestamp" in data["meta"]


def assert_envelope_error(data: dict[str, Any], code: str) -> None:
    assert data["success"] is False
    assert data["data"] is None
    assert data["errors"]["code"] == code
    assert "timestamp" in data["meta"]
