# cognito_session/auth/session.py
"""
Local session model.

A CognitoAuthSession is built per query and never persisted. Each piece of the
session (identity id, AWS credentials, user sub, user pool tokens) is carried
as an AuthSessionResult so a caller can tell "missing because signed out" from
"missing because something failed".
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from cognito_session.auth.exceptions import AuthError, SessionExpiredError

T = TypeVar("T")


class ResultType(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass(frozen=True)
class AuthSessionResult(Generic[T]):
    type: ResultType
    value: T | None = None
    error: AuthError | None = None

    @classmethod
    def success(cls, value: T | None) -> AuthSessionResult[T]:
        return cls(type=ResultType.SUCCESS, value=value, error=None)

    @classmethod
    def failure(cls, error: AuthError) -> AuthSessionResult[T]:
        return cls(type=ResultType.FAILURE, value=None, error=error)

    @property
    def is_success(self) -> bool:
        return self.type == ResultType.SUCCESS


@dataclass(frozen=True)
class UserPoolTokens:
    access_token: str
    id_token: str
    refresh_token: str | None = None

    def __repr__(self) -> str:
        # Never print raw tokens.
        return "UserPoolTokens(access_token=***, id_token=***, refresh_token=***)"


@dataclass(frozen=True)
class AWSCredentials:
    access_key_id: str
    secret_key: str
    session_token: str | None = None
    expiration: datetime | None = None

    def __repr__(self) -> str:
        return f"AWSCredentials(access_key_id={self.access_key_id!r}, expiration={self.expiration!r})"


class SessionStatus(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class CognitoAuthSession:
    """
    Snapshot of the current user's auth state.

    Attributes:
        is_signed_in: True when a user (user pool or federated) is signed in,
                      including the "signed in but expired" case.
        identity_id: Identity Pool id for this user or guest.
        aws_credentials: Temporary AWS credentials vended by the Identity Pool.
        user_sub: The user pool ``sub`` read from the access token.
        user_pool_tokens: Access/ID/refresh tokens from the user pool.
    """

    is_signed_in: bool
    identity_id: AuthSessionResult[str]
    aws_credentials: AuthSessionResult[AWSCredentials]
    user_sub: AuthSessionResult[str]
    user_pool_tokens: AuthSessionResult[UserPoolTokens]

    @property
    def status(self) -> SessionStatus:
        if not self.is_signed_in:
            return SessionStatus.SIGNED_OUT
        if isinstance(self.user_pool_tokens.error, SessionExpiredError):
            return SessionStatus.EXPIRED
        return SessionStatus.SIGNED_IN

    @property
    def id_token(self) -> str | None:
        """ID token when signed in with a successful token result, else None."""
        if not self.is_signed_in or not self.user_pool_tokens.is_success:
            return None
        tokens = self.user_pool_tokens.value
        return tokens.id_token if tokens else None


def expired_session() -> CognitoAuthSession:
    """Session reported when the provider says the stored tokens are no longer valid."""
    return CognitoAuthSession(
        is_signed_in=True,
        identity_id=AuthSessionResult.failure(SessionExpiredError()),
        aws_credentials=AuthSessionResult.failure(SessionExpiredError()),
        user_sub=AuthSessionResult.failure(SessionExpiredError()),
        user_pool_tokens=AuthSessionResult.failure(SessionExpiredError()),
    )
