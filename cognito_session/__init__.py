"""
cognito_session: a thin session/sign-in adapter over Amazon Cognito.

Typical use::

    client = CognitoIdentityClient.from_settings()
    helper = SessionHelper(client)
    token = helper.get_auth_token()
"""
from cognito_session.auth.exceptions import AuthError
from cognito_session.auth.session import CognitoAuthSession, SessionStatus
from cognito_session.auth.sign_in import AuthSignInResult, SignInOptions
from cognito_session.services.identity_client import CognitoIdentityClient, IdentityClient
from cognito_session.services.session_helper import SessionHelper

__version__ = "0.1.0"

__all__ = [
    "AuthError",
    "AuthSignInResult",
    "CognitoAuthSession",
    "CognitoIdentityClient",
    "IdentityClient",
    "SessionHelper",
    "SessionStatus",
    "SignInOptions",
]
