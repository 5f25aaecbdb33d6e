"""
Identity client boundary and its boto3 (Cognito) implementation.

SessionHelper only talks to the IdentityClient protocol. CognitoIdentityClient
wraps the Cognito User Pool (``cognito-idp``) and Identity Pool
(``cognito-identity``) APIs and keeps the signed-in user's tokens in memory.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Protocol

import boto3
from botocore.exceptions import ClientError

from cognito_session.auth.claims import get_token_expiration
from cognito_session.core.config import Settings, settings
from cognito_session.schemas.cognito import CognitoCredentials, CognitoTokens


logger = logging.getLogger(__name__)


# Error messages the session adapter keys off. Keep them stable.
TOKENS_FEDERATED_MESSAGE = "getTokens does not support retrieving tokens for federated sign-in"
TOKENS_USER_POOL_REQUIRED_MESSAGE = "You must be signed-in with Cognito Userpools to be able to use getTokens"
TOKENS_OAUTH2_MESSAGE = "Tokens are not supported for OAuth2"
IDENTITY_NOT_CONFIGURED_MESSAGE = "Cognito Identity not configured"
TOKENS_SIGNED_OUT_MESSAGE = "getTokens does not support retrieving tokens while signed-out"
CREDENTIALS_FAILED_MESSAGE = "Failed to get credentials from Cognito Identity"


class IdentityClientError(Exception):
    """Raised by identity clients; ``code`` is the Cognito error code when there is one."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


def _translate_error(exc: ClientError, message: str | None = None) -> IdentityClientError:
    error = exc.response.get("Error", {})
    code = error.get("Code", "CognitoClientError")
    return IdentityClientError(message or error.get("Message", str(exc)), code=code)


# ---------------------------------------------------------------------------
# Provider-side model
# ---------------------------------------------------------------------------


class UserState(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    GUEST = "GUEST"
    SIGNED_OUT_FEDERATED_TOKENS_INVALID = "SIGNED_OUT_FEDERATED_TOKENS_INVALID"
    SIGNED_OUT_USER_POOLS_TOKENS_INVALID = "SIGNED_OUT_USER_POOLS_TOKENS_INVALID"
    SIGNED_OUT = "SIGNED_OUT"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class UserStateDetails:
    user_state: UserState
    details: dict[str, str] = field(default_factory=dict)


class SignInState(str, Enum):
    SMS_MFA = "SMS_MFA"
    SOFTWARE_TOKEN_MFA = "SOFTWARE_TOKEN_MFA"
    CUSTOM_CHALLENGE = "CUSTOM_CHALLENGE"
    NEW_PASSWORD_REQUIRED = "NEW_PASSWORD_REQUIRED"
    PASSWORD_VERIFIER = "PASSWORD_VERIFIER"
    DEVICE_SRP_AUTH = "DEVICE_SRP_AUTH"
    DEVICE_PASSWORD_VERIFIER = "DEVICE_PASSWORD_VERIFIER"
    MFA_SETUP = "MFA_SETUP"
    DONE = "DONE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class UserCodeDeliveryDetails:
    destination: str
    delivery_medium: str | None = None
    attribute_name: str | None = None


@dataclass(frozen=True)
class SignInResult:
    sign_in_state: SignInState
    parameters: dict[str, str] | None = None
    code_details: UserCodeDeliveryDetails | None = None


class IdentityClient(Protocol):
    """The only surface of the identity provider that SessionHelper depends on."""

    def current_user_state(self) -> UserStateDetails: ...

    def sign_in(
        self,
        username: str,
        password: str,
        client_metadata: dict[str, str] | None = None,
    ) -> SignInResult: ...

    def get_tokens(self) -> CognitoTokens: ...

    def fetch_tokens(
        self,
        on_result: Callable[[CognitoTokens], None],
        on_error: Callable[[Exception], None],
    ) -> None: ...

    def get_aws_credentials(self) -> CognitoCredentials | None: ...

    def get_identity_id(self) -> str | None: ...


# ---------------------------------------------------------------------------
# Cognito implementation
# ---------------------------------------------------------------------------

_CHALLENGE_STATES: dict[str, SignInState] = {
    "SMS_MFA": SignInState.SMS_MFA,
    "SOFTWARE_TOKEN_MFA": SignInState.SOFTWARE_TOKEN_MFA,
    "CUSTOM_CHALLENGE": SignInState.CUSTOM_CHALLENGE,
    "NEW_PASSWORD_REQUIRED": SignInState.NEW_PASSWORD_REQUIRED,
    "PASSWORD_VERIFIER": SignInState.PASSWORD_VERIFIER,
    "DEVICE_SRP_AUTH": SignInState.DEVICE_SRP_AUTH,
    "DEVICE_PASSWORD_VERIFIER": SignInState.DEVICE_PASSWORD_VERIFIER,
    "MFA_SETUP": SignInState.MFA_SETUP,
}


def _code_details(parameters: dict[str, str] | None) -> UserCodeDeliveryDetails | None:
    if not parameters or not parameters.get("CODE_DELIVERY_DESTINATION"):
        return None
    return UserCodeDeliveryDetails(
        destination=parameters["CODE_DELIVERY_DESTINATION"],
        delivery_medium=parameters.get("CODE_DELIVERY_DELIVERY_MEDIUM"),
        attribute_name=parameters.get("CODE_DELIVERY_ATTRIBUTE_NAME"),
    )


class CognitoIdentityClient:
    """
    In-memory Cognito session backed by boto3.

    boto3 clients are created lazily (no network or credential lookups on
    construction) and can be injected for testing. Token and credential state
    is guarded by a lock so one instance can be shared across threads.
    """

    def __init__(
        self,
        *,
        region: str,
        app_client_id: str,
        user_pool_id: str = "",
        identity_pool_id: str = "",
        expiry_leeway_seconds: int = 60,
        idp_client: Any = None,
        identity_client: Any = None,
    ) -> None:
        self._region = region
        self._app_client_id = app_client_id
        self._user_pool_id = user_pool_id
        self._identity_pool_id = identity_pool_id
        self._leeway = timedelta(seconds=expiry_leeway_seconds)
        self._idp_client = idp_client
        self._identity_client = identity_client

        self._lock = threading.Lock()
        self._tokens: CognitoTokens | None = None
        self._federated_logins: dict[str, str] = {}
        self._identity_id: str | None = None
        self._credentials: CognitoCredentials | None = None

    @classmethod
    def from_settings(cls, config: Settings = settings) -> CognitoIdentityClient:
        return cls(
            region=config.COGNITO_REGION,
            app_client_id=config.COGNITO_APP_CLIENT_ID,
            user_pool_id=config.COGNITO_USER_POOL_ID,
            identity_pool_id=config.COGNITO_IDENTITY_POOL_ID,
            expiry_leeway_seconds=config.TOKEN_EXPIRY_LEEWAY_SECONDS,
        )

    # -- boto3 clients -----------------------------------------------------

    def _idp(self):
        if self._idp_client is None:
            if not self._region:
                raise RuntimeError("COGNITO_REGION is not configured")
            if not self._app_client_id:
                raise RuntimeError("COGNITO_APP_CLIENT_ID is not configured")
            self._idp_client = boto3.client("cognito-idp", region_name=self._region)
        return self._idp_client

    def _identity(self):
        if self._identity_client is None:
            if not self._region:
                raise RuntimeError("COGNITO_REGION is not configured")
            self._identity_client = boto3.client("cognito-identity", region_name=self._region)
        return self._identity_client

    # -- helpers -------------------------------------------------------------

    @property
    def _provider_name(self) -> str:
        if not self._region or not self._user_pool_id:
            return ""
        return f"cognito-idp.{self._region}.amazonaws.com/{self._user_pool_id}"

    def _is_expired(self, token: str) -> bool:
        expires_at = get_token_expiration(token)
        if expires_at is None:
            # Opaque tokens carry no exp claim; treat them as valid.
            return False
        return expires_at <= datetime.now(timezone.utc) + self._leeway

    def _credentials_expired(self, credentials: CognitoCredentials) -> bool:
        if credentials.expiration is None:
            return False
        expiration = credentials.expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        return expiration <= datetime.now(timezone.utc) + self._leeway

    def _logins(self) -> dict[str, str]:
        with self._lock:
            tokens = self._tokens
            logins = dict(self._federated_logins)
        if tokens is not None:
            if self._provider_name:
                logins[self._provider_name] = tokens.id_token
            else:
                logger.warning(
                    "Holding user pool tokens but COGNITO_REGION/COGNITO_USER_POOL_ID are not set; "
                    "identity pool credentials will be unauthenticated"
                )
        return logins

    def _refresh(self, tokens: CognitoTokens) -> CognitoTokens:
        if not tokens.refresh_token:
            raise IdentityClientError("No refresh token available", code="NotAuthorizedException")

        try:
            resp = self._idp().initiate_auth(
                ClientId=self._app_client_id,
                AuthFlow="REFRESH_TOKEN_AUTH",
                AuthParameters={"REFRESH_TOKEN": tokens.refresh_token},
            )
        except ClientError as exc:
            raise _translate_error(exc) from exc

        refreshed = CognitoTokens.from_authentication_result(
            resp.get("AuthenticationResult") or {},
            refresh_token=tokens.refresh_token,
        )
        with self._lock:
            self._tokens = refreshed
            # The logins map changed, so cached credentials are stale.
            self._credentials = None
        logger.info("Refreshed Cognito user pool tokens")
        return refreshed

    # -- IdentityClient --------------------------------------------------------

    def sign_in(
        self,
        username: str,
        password: str,
        client_metadata: dict[str, str] | None = None,
    ) -> SignInResult:
        """
        Run the USER_PASSWORD_AUTH flow.

        Cognito errors propagate as botocore ``ClientError`` so callers can map
        them by error code.
        """
        kwargs: dict[str, Any] = {
            "ClientId": self._app_client_id,
            "AuthFlow": "USER_PASSWORD_AUTH",
            "AuthParameters": {
                "USERNAME": username,
                "PASSWORD": password,
            },
        }
        if client_metadata:
            kwargs["ClientMetadata"] = dict(client_metadata)

        resp = self._idp().initiate_auth(**kwargs)

        auth_result = resp.get("AuthenticationResult")
        if auth_result:
            tokens = CognitoTokens.from_authentication_result(auth_result)
            with self._lock:
                self._tokens = tokens
                self._federated_logins = {}
                self._identity_id = None
                self._credentials = None
            return SignInResult(sign_in_state=SignInState.DONE)

        challenge = resp.get("ChallengeName") or ""
        parameters = resp.get("ChallengeParameters")
        state = _CHALLENGE_STATES.get(challenge, SignInState.UNKNOWN)
        if state == SignInState.UNKNOWN:
            logger.warning("Unrecognized Cognito challenge: %s", challenge or "none")
        return SignInResult(
            sign_in_state=state,
            parameters=parameters,
            code_details=_code_details(parameters),
        )

    def federated_sign_in(self, provider_key: str, token: str) -> None:
        """Record a federated login (e.g. ``accounts.google.com``) for the identity pool."""
        if not provider_key or not token:
            raise ValueError("provider_key and token are required")
        with self._lock:
            self._tokens = None
            self._federated_logins = {provider_key: token}
            self._identity_id = None
            self._credentials = None

    def sign_out(self) -> None:
        with self._lock:
            self._tokens = None
            self._federated_logins = {}
            self._identity_id = None
            self._credentials = None

    def current_user_state(self) -> UserStateDetails:
        with self._lock:
            tokens = self._tokens
            federated = dict(self._federated_logins)
            identity_id = self._identity_id

        if tokens is not None:
            if not self._is_expired(tokens.id_token):
                return UserStateDetails(UserState.SIGNED_IN, {"provider": "userpools"})
            try:
                self._refresh(tokens)
            except IdentityClientError as exc:
                if exc.code == "NotAuthorizedException":
                    logger.info("Cognito refresh token rejected; user pool tokens are invalid")
                    return UserStateDetails(UserState.SIGNED_OUT_USER_POOLS_TOKENS_INVALID)
                raise
            return UserStateDetails(UserState.SIGNED_IN, {"provider": "userpools"})

        if federated:
            provider, token = next(iter(federated.items()))
            if self._is_expired(token):
                return UserStateDetails(UserState.SIGNED_OUT_FEDERATED_TOKENS_INVALID, {"provider": provider})
            return UserStateDetails(UserState.SIGNED_IN, {"provider": provider})

        if self._identity_pool_id and identity_id:
            return UserStateDetails(UserState.GUEST)
        return UserStateDetails(UserState.SIGNED_OUT)

    def get_tokens(self) -> CognitoTokens:
        with self._lock:
            tokens = self._tokens
            federated = bool(self._federated_logins)

        if tokens is None:
            if federated:
                raise IdentityClientError(TOKENS_FEDERATED_MESSAGE)
            raise IdentityClientError(TOKENS_SIGNED_OUT_MESSAGE)

        if self._is_expired(tokens.id_token):
            tokens = self._refresh(tokens)
        return tokens

    def fetch_tokens(
        self,
        on_result: Callable[[CognitoTokens], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        try:
            tokens = self.get_tokens()
        except Exception as exc:
            on_error(exc)
            return
        on_result(tokens)

    def get_aws_credentials(self) -> CognitoCredentials | None:
        if not self._identity_pool_id:
            raise IdentityClientError(IDENTITY_NOT_CONFIGURED_MESSAGE)

        with self._lock:
            cached = self._credentials
            identity_id = self._identity_id
        if cached is not None and not self._credentials_expired(cached):
            return cached

        logins = self._logins()
        client = self._identity()
        try:
            if not identity_id:
                kwargs: dict[str, Any] = {"IdentityPoolId": self._identity_pool_id}
                if logins:
                    kwargs["Logins"] = logins
                identity_id = client.get_id(**kwargs)["IdentityId"]

            kwargs = {"IdentityId": identity_id}
            if logins:
                kwargs["Logins"] = logins
            resp = client.get_credentials_for_identity(**kwargs)
        except ClientError as exc:
            logger.warning("Cognito Identity credential fetch failed: %s", exc)
            raise _translate_error(exc, CREDENTIALS_FAILED_MESSAGE) from exc

        raw = resp.get("Credentials")
        if not raw:
            return None

        credentials = CognitoCredentials.model_validate(raw)
        with self._lock:
            self._identity_id = resp.get("IdentityId") or identity_id
            self._credentials = credentials
        return credentials

    def get_identity_id(self) -> str | None:
        with self._lock:
            return self._identity_id
