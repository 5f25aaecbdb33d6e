# cognito_session/auth/claims.py
"""
Read-only access to Cognito JWT claims.

Tokens here were just handed to us by Cognito; nothing in this module verifies
signatures. Use these helpers for display/bookkeeping only, never for
authorization decisions.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from jose import JWTError, jwt

COGNITO_USER_ID_ATTRIBUTE = "sub"


def get_unverified_claims(token: str) -> dict[str, Any]:
    """Decode the token payload without verification. Raises JWTError on malformed tokens."""
    claims = jwt.get_unverified_claims(token)
    if not isinstance(claims, dict):
        raise JWTError("Token payload is not a JSON object")
    return claims


def get_user_id_from_token(token: str) -> str | None:
    try:
        sub = get_unverified_claims(token).get(COGNITO_USER_ID_ATTRIBUTE)
    except JWTError:
        return None
    return str(sub) if sub else None


def get_token_expiration(token: str) -> datetime | None:
    try:
        exp = get_unverified_claims(token).get("exp")
    except JWTError:
        return None
    if exp is None:
        return None
    try:
        return datetime.fromtimestamp(int(exp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None
