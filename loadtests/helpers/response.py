"""Response error extraction for load test observability.

Parses Ratings API error responses into human-readable messages.
Handles these response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- Review validation (400): {"error": {"field": ["msg", ...]}}
- Refusals and failures (403/404/409/502/503): {"error": "msg"}, with a
  "reason" key on 403 eligibility refusals
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _field_errors(error: dict) -> str:
    parts = []
    for field, messages in error.items():
        if isinstance(messages, list):
            messages = "; ".join(str(m) for m in messages)
        parts.append(f"{field}: {messages}")
    return " | ".join(parts)


def extract_error_detail(response: Response) -> str:
    """A compact error string for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        detail = _field_errors(error) if isinstance(error, dict) else str(error)
        if body.get("reason"):
            detail = f"{detail} ({body['reason']})"
        return detail

    return str(body)[:300]
