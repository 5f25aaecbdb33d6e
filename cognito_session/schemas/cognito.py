"""
Pydantic schemas for raw Cognito (boto3) responses.

boto3 hands back plain dicts keyed in PascalCase; these models validate the
pieces we rely on and expose them in snake_case.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CognitoTokens(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_token: str = Field(..., alias="AccessToken", repr=False)
    id_token: str = Field(..., alias="IdToken", repr=False)
    refresh_token: Optional[str] = Field(None, alias="RefreshToken", repr=False)
    expires_in: int = Field(3600, alias="ExpiresIn")
    token_type: str = Field("Bearer", alias="TokenType")

    @classmethod
    def from_authentication_result(
        cls,
        result: dict[str, Any],
        *,
        refresh_token: str | None = None,
    ) -> CognitoTokens:
        """
        Build tokens from an InitiateAuth ``AuthenticationResult``.

        REFRESH_TOKEN_AUTH responses omit the refresh token, so callers pass the
        one they already hold.
        """
        payload = dict(result)
        if not payload.get("RefreshToken") and refresh_token:
            payload["RefreshToken"] = refresh_token
        return cls.model_validate(payload)


class CognitoCredentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_key_id: str = Field(..., alias="AccessKeyId")
    secret_key: str = Field(..., alias="SecretKey", repr=False)
    session_token: Optional[str] = Field(None, alias="SessionToken", repr=False)
    expiration: Optional[datetime] = Field(None, alias="Expiration")
