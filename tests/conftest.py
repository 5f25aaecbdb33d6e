from __future__ import annotations

import os
import time

# Keep Settings() deterministic regardless of the developer's shell/.env.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("COGNITO_REGION", "us-east-1")
os.environ.setdefault("COGNITO_USER_POOL_ID", "us-east-1_TestPool")
os.environ.setdefault("COGNITO_APP_CLIENT_ID", "test-client-id")

import pytest
from botocore.exceptions import ClientError
from jose import jwt

from cognito_session.schemas.cognito import CognitoCredentials, CognitoTokens
from cognito_session.services.identity_client import (
    SignInResult,
    SignInState,
    UserState,
    UserStateDetails,
)


class FakeIdentityClient:
    """
    In-memory IdentityClient. Tests set the attributes they care about; every
    call is recorded in ``calls`` as ``(method_name, args)``.
    """

    def __init__(self) -> None:
        self.user_state = UserState.SIGNED_OUT
        self.state_error: Exception | None = None

        self.sign_in_result = SignInResult(sign_in_state=SignInState.DONE)
        self.sign_in_error: Exception | None = None

        self.tokens: CognitoTokens | None = None
        self.tokens_error: Exception | None = None

        self.credentials: CognitoCredentials | None = None
        self.credentials_error: Exception | None = None

        self.identity_id: str | None = None
        self.identity_id_error: Exception | None = None

        self.calls: list[tuple] = []

    def current_user_state(self) -> UserStateDetails:
        self.calls.append(("current_user_state", ()))
        if self.state_error:
            raise self.state_error
        return UserStateDetails(self.user_state)

    def sign_in(self, username, password, client_metadata=None) -> SignInResult:
        self.calls.append(("sign_in", (username, password, client_metadata)))
        if self.sign_in_error:
            raise self.sign_in_error
        return self.sign_in_result

    def get_tokens(self) -> CognitoTokens:
        self.calls.append(("get_tokens", ()))
        if self.tokens_error:
            raise self.tokens_error
        return self.tokens

    def fetch_tokens(self, on_result, on_error) -> None:
        self.calls.append(("fetch_tokens", ()))
        if self.tokens_error:
            on_error(self.tokens_error)
            return
        if self.tokens is None:
            on_error(RuntimeError("getTokens does not support retrieving tokens while signed-out"))
            return
        on_result(self.tokens)

    def get_aws_credentials(self):
        self.calls.append(("get_aws_credentials", ()))
        if self.credentials_error:
            raise self.credentials_error
        return self.credentials

    def get_identity_id(self):
        self.calls.append(("get_identity_id", ()))
        if self.identity_id_error:
            raise self.identity_id_error
        return self.identity_id

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_client():
    return FakeIdentityClient()


@pytest.fixture
def make_token():
    """Mint an (unverifiable, HS256) JWT carrying Cognito-style claims."""

    def _make(sub: str = "user-123", exp_offset: int = 3600, token_use: str = "id", **extra) -> str:
        now = int(time.time())
        claims = {
            "sub": sub,
            "token_use": token_use,
            "iat": now,
            "exp": now + exp_offset,
        }
        claims.update(extra)
        return jwt.encode(claims, "test-secret", algorithm="HS256")

    return _make


@pytest.fixture
def make_tokens(make_token):
    def _make(sub: str = "user-123", exp_offset: int = 3600, refresh_token: str | None = "REFRESH") -> CognitoTokens:
        return CognitoTokens(
            access_token=make_token(sub=sub, exp_offset=exp_offset, token_use="access"),
            id_token=make_token(sub=sub, exp_offset=exp_offset, token_use="id"),
            refresh_token=refresh_token,
        )

    return _make


@pytest.fixture
def guest_credentials():
    return CognitoCredentials(
        access_key_id="AKIATEST",
        secret_key="secret",
        session_token="session",
    )


@pytest.fixture
def client_error():
    def _make(code: str, message: str = "error", operation: str = "InitiateAuth") -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)

    return _make
