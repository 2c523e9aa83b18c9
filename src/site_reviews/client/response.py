"""Error extraction for Site Reviews API responses.

Handles the response shapes a widget can meet:

- Domain errors (400/404/409/429/500): {"error": "msg", "errors": {...}}
- Framework validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpx import Response

SUBMIT_FAILED_MESSAGE = "Could not submit review."


def extract_error_detail(response: Response, default: str = SUBMIT_FAILED_MESSAGE) -> str:
    """Extract a human-readable error message from an API error response.

    Falls back to ``default`` for unparseable bodies and unknown shapes.
    """
    try:
        body = response.json()
    except ValueError:
        return default

    if not isinstance(body, dict):
        return default

    if isinstance(body.get("error"), str) and body["error"]:
        return body["error"]

    # Framework validation errors: {"detail": [{"loc": [...], "msg": "..."}]}
    if isinstance(body.get("detail"), list):
        parts = [err.get("msg", "") for err in body["detail"] if isinstance(err, dict)]
        return " | ".join(part for part in parts if part) or default

    return default
