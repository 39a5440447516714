"""
Validation utilities for guest submissions.
Ensures data integrity and provides clear error messages.
"""
import html
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException


def clean_text(value: Optional[str]) -> str:
    """Trim a free-text field; None becomes an empty string."""
    return (value or "").strip()


def require_fields(payload: Dict[str, Any], fields: Iterable[str], message: str) -> None:
    """
    Ensure every named field is a non-empty string after trimming.

    Raises:
        HTTPException: 400 with `message` if any field is missing or blank
    """
    for name in fields:
        value = payload.get(name)
        if not isinstance(value, str) or not value.strip():
            raise HTTPException(status_code=400, detail=message)


def ensure_max_length(value: str, limit: int, label: str) -> None:
    """
    Raises:
        HTTPException: 400 if value is longer than `limit` characters
    """
    if len(value) > limit:
        raise HTTPException(
            status_code=400,
            detail=f"{label} cannot exceed {limit} characters",
        )


def escape_html(value: str) -> str:
    """Escape HTML entities so stored guest text renders as plain text."""
    return html.escape(value, quote=True).replace("/", "&#x2F;")


def paginate(items: list, limit: int, offset: int) -> Dict[str, Any]:
    """
    Slice a fully-ordered result list.

    Returns the page, the total count and whether more items follow
    (offset + limit < total).
    """
    total = len(items)
    end = offset + limit
    return {
        "items": items[offset:end],
        "total": total,
        "hasMore": end < total,
    }
