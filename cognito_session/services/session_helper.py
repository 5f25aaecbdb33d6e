"""
Session resolution, sign-in and a blocking ID-token getter on top of an
IdentityClient.

These are the only entry points other code should depend on:
- SessionHelper.fetch_auth_session(on_success, on_error)
- SessionHelper.sign_in(username, password, options, on_success, on_error)
- SessionHelper.get_auth_token()
"""
from __future__ import annotations

import logging
import threading
from typing import Callable

from cognito_session.auth.claims import get_user_id_from_token
from cognito_session.auth.exceptions import DEFAULT_RECOVERY_SUGGESTION, AuthError
from cognito_session.auth.session import CognitoAuthSession, expired_session
from cognito_session.auth.sign_in import AuthSignInResult, SignInOptions
from cognito_session.core.config import settings
from cognito_session.schemas.cognito import CognitoTokens
from cognito_session.services import session_adapter
from cognito_session.services.error_converter import lookup
from cognito_session.services.identity_client import IdentityClient, UserState
from cognito_session.services.sign_in_converter import convert_sign_in_result


logger = logging.getLogger(__name__)


SESSION_FETCH_FAILED_MESSAGE = "An error occurred while attempting to retrieve your user details"
SIGN_IN_FAILED_MESSAGE = "Sign in failed"

SIGNED_OUT_STATES = frozenset({UserState.SIGNED_OUT, UserState.GUEST})
EXPIRED_STATES = frozenset(
    {
        UserState.SIGNED_OUT_FEDERATED_TOKENS_INVALID,
        UserState.SIGNED_OUT_USER_POOLS_TOKENS_INVALID,
    }
)

SessionCallback = Callable[[CognitoAuthSession], None]
SignInCallback = Callable[[AuthSignInResult], None]
ErrorCallback = Callable[[AuthError], None]


class SessionHelper:
    def __init__(self, client: IdentityClient, *, token_timeout_seconds: float | None = None) -> None:
        self._client = client
        self._token_timeout = (
            token_timeout_seconds if token_timeout_seconds is not None else settings.AUTH_TOKEN_TIMEOUT_SECONDS
        )
        self.user_id: str | None = None

    # ------------------------------------------------------------------
    # Session resolution
    # ------------------------------------------------------------------

    def fetch_auth_session(self, on_success: SessionCallback, on_error: ErrorCallback) -> None:
        """
        Resolve the current session and deliver it to exactly one callback.

        An expired session is delivered to ``on_success``: the session is known,
        its sub-results are all SessionExpiredError failures. ``on_error`` is
        reserved for "could not determine the state at all".
        """
        try:
            session = self._resolve_session()
        except Exception as exc:
            logger.warning("Session fetch failed: %s", exc)
            on_error(AuthError(SESSION_FETCH_FAILED_MESSAGE, exc, DEFAULT_RECOVERY_SUGGESTION))
            return
        on_success(session)

    def _resolve_session(self) -> CognitoAuthSession:
        user_state = self._client.current_user_state().user_state
        logger.debug("Resolving session for user state %s", user_state)

        if user_state in SIGNED_OUT_STATES:
            return session_adapter.fetch_signed_out_session(self._client)
        if user_state in EXPIRED_STATES:
            return expired_session()
        return session_adapter.fetch_signed_in_session(self._client)

    # ------------------------------------------------------------------
    # Sign in
    # ------------------------------------------------------------------

    def sign_in(
        self,
        username: str,
        password: str,
        options: SignInOptions | None,
        on_success: SignInCallback,
        on_error: ErrorCallback,
    ) -> None:
        """
        Sign in with username/password.

        The identity client call blocks; callbacks fire before this returns.
        Client metadata is only forwarded for ``SignInOptions.cognito(...)``.
        """
        metadata = options.client_metadata() if options is not None else None

        try:
            result = self._client.sign_in(username, password, metadata)
            converted = convert_sign_in_result(result)
        except Exception as exc:
            error = lookup(exc, SIGN_IN_FAILED_MESSAGE)
            logger.info("Sign in failed: %s", error.message)
            on_error(error)
            return

        self._fetch_and_set_user_id(lambda: on_success(converted))

    def _fetch_and_set_user_id(self, on_complete: Callable[[], None]) -> None:
        """Best-effort token fetch after sign-in; ``on_complete`` runs exactly once regardless of the outcome."""
        completed = False

        def _complete() -> None:
            nonlocal completed
            if completed:
                return
            completed = True
            on_complete()

        def _on_result(tokens: CognitoTokens) -> None:
            self.user_id = get_user_id_from_token(tokens.id_token)
            _complete()

        def _on_error(exc: Exception) -> None:
            logger.debug("Token fetch after sign in failed: %s", exc)
            _complete()

        try:
            self._client.fetch_tokens(_on_result, _on_error)
        except Exception as exc:
            # Raised by the caller's own callback: surface it, don't complete twice.
            if completed:
                raise
            _on_error(exc)

    # ------------------------------------------------------------------
    # Blocking token getter
    # ------------------------------------------------------------------

    def get_auth_token(self) -> str | None:
        """
        Return the current user's ID token, or None.

        fetch_auth_session delivers through callbacks. With the synchronous
        identity clients in this package the callback has already run when
        fetch_auth_session returns. For a client that delivers later, this
        waits up to ``token_timeout_seconds`` and then gives up, returning None.
        """
        done = threading.Event()
        captured: dict[str, str | None] = {"token": None}

        def _on_success(session: CognitoAuthSession) -> None:
            captured["token"] = session.id_token
            done.set()

        def _on_error(error: AuthError) -> None:
            logger.info("Auth token unavailable: %s", error.message)
            captured["token"] = None
            done.set()

        self.fetch_auth_session(_on_success, _on_error)

        if not done.wait(self._token_timeout):
            logger.warning("Timed out after %.1fs waiting for auth session", self._token_timeout)
            return None
        return captured["token"]
