# services/api/core/auth.py
from __future__ import annotations

import hmac
import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _extract_token(authorization: Optional[str], x_admin_key: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    if x_admin_key and x_admin_key.strip():
        return x_admin_key.strip()
    return None


def require_admin(
    settings: Annotated[Settings, Depends(get_settings)],
    authorization: Annotated[Optional[str], Header()] = None,
    x_admin_key: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Admin capability check. Every moderation/admin route declares this
    dependency explicitly.

    Accepts `Authorization: Bearer <key>` or `X-Admin-Key: <key>`.
    With no ADMIN_SECRET_KEY configured every request is refused.
    """
    token = _extract_token(authorization, x_admin_key)
    expected = settings.admin_secret_key

    if not expected or not token or not hmac.compare_digest(token.encode(), expected.encode()):
        logger.warning("Rejected admin request (missing or invalid credential)")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed or is missing.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return "admin"


Admin = Annotated[str, Depends(require_admin)]
