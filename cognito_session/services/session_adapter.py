"""
Build CognitoAuthSession snapshots from an IdentityClient.

The identity client does not categorize its errors, so the session state is
inferred from a known set of error messages. Every function here returns a
complete session; failures end up in the per-field results instead of being
raised.
"""
from __future__ import annotations

import logging

from jose import JWTError

from cognito_session.auth.claims import COGNITO_USER_ID_ATTRIBUTE, get_unverified_claims
from cognito_session.auth.exceptions import (
    AuthError,
    GuestAccess,
    InvalidAccountTypeError,
    SignedOutError,
    UnknownAuthError,
)
from cognito_session.auth.session import (
    AuthSessionResult,
    AWSCredentials,
    CognitoAuthSession,
    UserPoolTokens,
)
from cognito_session.schemas.cognito import CognitoCredentials, CognitoTokens
from cognito_session.services.identity_client import (
    IDENTITY_NOT_CONFIGURED_MESSAGE,
    TOKENS_FEDERATED_MESSAGE,
    TOKENS_OAUTH2_MESSAGE,
    TOKENS_SIGNED_OUT_MESSAGE,
    TOKENS_USER_POOL_REQUIRED_MESSAGE,
    IdentityClient,
)


logger = logging.getLogger(__name__)


INVALID_ACCOUNT_MESSAGES = frozenset(
    {
        TOKENS_FEDERATED_MESSAGE,
        TOKENS_USER_POOL_REQUIRED_MESSAGE,
        TOKENS_OAUTH2_MESSAGE,
        IDENTITY_NOT_CONFIGURED_MESSAGE,
    }
)

SIGNED_OUT_MESSAGES = frozenset({TOKENS_SIGNED_OUT_MESSAGE})


def _to_aws_credentials(credentials: CognitoCredentials) -> AWSCredentials:
    return AWSCredentials(
        access_key_id=credentials.access_key_id,
        secret_key=credentials.secret_key,
        session_token=credentials.session_token,
        expiration=credentials.expiration,
    )


def _to_user_pool_tokens(tokens: CognitoTokens) -> UserPoolTokens:
    return UserPoolTokens(
        access_token=tokens.access_token,
        id_token=tokens.id_token,
        refresh_token=tokens.refresh_token,
    )


# ---------------------------------------------------------------------------
# Signed out
# ---------------------------------------------------------------------------


def fetch_signed_out_session(client: IdentityClient) -> CognitoAuthSession:
    """
    Session for a signed-out (or guest) user.

    Getting AWS credentials tells us which kind of signed-out we are:
    - "Cognito Identity not configured": there is no identity pool at all
    - any other failure: guest access may be possible (or the device is offline)
    - credentials returned: guest access works, so also fetch the identity id
    """
    try:
        credentials = client.get_aws_credentials()
    except Exception as error:
        if IDENTITY_NOT_CONFIGURED_MESSAGE in str(error):
            return signed_out_session_without_identity_pool()
        logger.info("Guest credentials unavailable: %s", error)
        return signed_out_session_with_identity_pool()

    if credentials is None:
        # No guest credentials and no error: treat like a failed guest fetch.
        return signed_out_session_with_identity_pool()
    return _signed_out_session_with_credentials(client, credentials)


def _signed_out_session_with_credentials(
    client: IdentityClient,
    credentials: CognitoCredentials,
) -> CognitoAuthSession:
    try:
        identity_id_result = AuthSessionResult.success(client.get_identity_id())
    except Exception as exc:
        identity_id_result = AuthSessionResult.failure(
            AuthError(
                "Retrieved guest credentials but failed to retrieve Identity ID",
                exc,
                "This should never happen. See the attached exception for more details.",
            )
        )

    return CognitoAuthSession(
        is_signed_in=False,
        identity_id=identity_id_result,
        aws_credentials=AuthSessionResult.success(_to_aws_credentials(credentials)),
        user_sub=AuthSessionResult.failure(SignedOutError()),
        user_pool_tokens=AuthSessionResult.failure(SignedOutError()),
    )


def signed_out_session_without_identity_pool() -> CognitoAuthSession:
    return CognitoAuthSession(
        is_signed_in=False,
        identity_id=AuthSessionResult.failure(InvalidAccountTypeError()),
        aws_credentials=AuthSessionResult.failure(InvalidAccountTypeError()),
        user_sub=AuthSessionResult.failure(SignedOutError()),
        user_pool_tokens=AuthSessionResult.failure(SignedOutError()),
    )


def signed_out_session_with_identity_pool() -> CognitoAuthSession:
    return CognitoAuthSession(
        is_signed_in=False,
        identity_id=AuthSessionResult.failure(SignedOutError(GuestAccess.GUEST_ACCESS_POSSIBLE)),
        aws_credentials=AuthSessionResult.failure(SignedOutError(GuestAccess.GUEST_ACCESS_POSSIBLE)),
        user_sub=AuthSessionResult.failure(SignedOutError()),
        user_pool_tokens=AuthSessionResult.failure(SignedOutError()),
    )


# ---------------------------------------------------------------------------
# Signed in
# ---------------------------------------------------------------------------


def fetch_signed_in_session(client: IdentityClient) -> CognitoAuthSession:
    try:
        tokens = client.get_tokens()
    except Exception as error:
        message = str(error)
        if message in INVALID_ACCOUNT_MESSAGES:
            return _identity_pool_only_signed_in_session(client)
        if message in SIGNED_OUT_MESSAGES:
            return fetch_signed_out_session(client)
        logger.warning("Failed to fetch user pool tokens: %s", error)
        return _signed_in_session_with_user_pool_results(
            client,
            AuthSessionResult.failure(UnknownAuthError(error)),
            AuthSessionResult.failure(UnknownAuthError(error)),
        )

    return _signed_in_session_with_user_pool_results(
        client,
        _user_sub_result(tokens),
        AuthSessionResult.success(_to_user_pool_tokens(tokens)),
    )


def _user_sub_result(tokens: CognitoTokens) -> AuthSessionResult[str]:
    try:
        sub = get_unverified_claims(tokens.access_token)[COGNITO_USER_ID_ATTRIBUTE]
    except (JWTError, KeyError) as error:
        return AuthSessionResult.failure(UnknownAuthError(error))
    return AuthSessionResult.success(str(sub))


def _identity_pool_only_signed_in_session(client: IdentityClient) -> CognitoAuthSession:
    return _signed_in_session_with_user_pool_results(
        client,
        AuthSessionResult.failure(InvalidAccountTypeError()),
        AuthSessionResult.failure(InvalidAccountTypeError()),
    )


def _signed_in_session_with_user_pool_results(
    client: IdentityClient,
    user_sub_result: AuthSessionResult[str],
    tokens_result: AuthSessionResult[UserPoolTokens],
) -> CognitoAuthSession:
    try:
        credentials = client.get_aws_credentials()
    except Exception as error:
        if str(error) in INVALID_ACCOUNT_MESSAGES:
            wrapped: AuthError = InvalidAccountTypeError(error)
        else:
            wrapped = UnknownAuthError(error)
        return CognitoAuthSession(
            is_signed_in=True,
            identity_id=AuthSessionResult.failure(wrapped),
            aws_credentials=AuthSessionResult.failure(wrapped),
            user_sub=user_sub_result,
            user_pool_tokens=tokens_result,
        )

    if credentials is None:
        error = AuthError(
            "Could not fetch AWS Cognito credentials, but there was no error reported back from "
            "the identity client's get_aws_credentials call.",
            None,
            "This is a bug with the underlying identity client.",
        )
        return CognitoAuthSession(
            is_signed_in=True,
            identity_id=AuthSessionResult.failure(error),
            aws_credentials=AuthSessionResult.failure(error),
            user_sub=user_sub_result,
            user_pool_tokens=tokens_result,
        )

    credentials_result = AuthSessionResult.success(_to_aws_credentials(credentials))
    try:
        identity_id = client.get_identity_id()
    except Exception as error:
        identity_id_result: AuthSessionResult[str] = AuthSessionResult.failure(UnknownAuthError(error))
    else:
        if identity_id is not None:
            identity_id_result = AuthSessionResult.success(identity_id)
        else:
            identity_id_result = AuthSessionResult.failure(
                AuthError(
                    "The identity client returned AWS credentials but no identity id and no error",
                    None,
                    "This should never happen and is a bug with the identity client.",
                )
            )

    return CognitoAuthSession(
        is_signed_in=True,
        identity_id=identity_id_result,
        aws_credentials=credentials_result,
        user_sub=user_sub_result,
        user_pool_tokens=tokens_result,
    )
