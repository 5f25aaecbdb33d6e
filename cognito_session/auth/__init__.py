# cognito_session/auth/__init__.py
"""
Local auth model for cognito_session.

This package contains:
- exceptions.py: AuthError hierarchy surfaced to callers
- session.py: CognitoAuthSession and its per-field results
- sign_in.py: AuthSignInResult, next-step descriptors and SignInOptions
- claims.py: read-only (unverified) JWT claim access
"""
from cognito_session.auth.exceptions import AuthError
from cognito_session.auth.session import CognitoAuthSession, SessionStatus
from cognito_session.auth.sign_in import AuthSignInResult, SignInOptions

__all__ = ["AuthError", "AuthSignInResult", "CognitoAuthSession", "SessionStatus", "SignInOptions"]
