"""
Map identity-client failures onto local AuthError types.
"""
from __future__ import annotations

from botocore.exceptions import ClientError

from cognito_session.auth import exceptions as auth_exc
from cognito_session.auth.exceptions import DEFAULT_RECOVERY_SUGGESTION, AuthError
from cognito_session.services.identity_client import IdentityClientError


ERROR_TYPES_BY_CODE: dict[str, type[auth_exc.ServiceError]] = {
    "UsernameExistsException": auth_exc.UsernameExistsError,
    "AliasExistsException": auth_exc.AliasExistsError,
    "InvalidPasswordException": auth_exc.InvalidPasswordError,
    "InvalidParameterException": auth_exc.InvalidParameterError,
    "ExpiredCodeException": auth_exc.CodeExpiredError,
    "CodeMismatchException": auth_exc.CodeMismatchError,
    "CodeDeliveryFailureException": auth_exc.CodeDeliveryFailureError,
    "LimitExceededException": auth_exc.LimitExceededError,
    "MFAMethodNotFoundException": auth_exc.MFAMethodNotFoundError,
    "NotAuthorizedException": auth_exc.NotAuthorizedError,
    "ResourceNotFoundException": auth_exc.ResourceNotFoundError,
    "SoftwareTokenMFANotFoundException": auth_exc.SoftwareTokenMFANotFoundError,
    "TooManyFailedAttemptsException": auth_exc.FailedAttemptsLimitExceededError,
    "TooManyRequestsException": auth_exc.TooManyRequestsError,
    "PasswordResetRequiredException": auth_exc.PasswordResetRequiredError,
    "UserNotConfirmedException": auth_exc.UserNotConfirmedError,
    "UserNotFoundException": auth_exc.UserNotFoundError,
}


def _error_code(error: BaseException) -> str | None:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    if isinstance(error, IdentityClientError):
        return error.code
    return None


def _error_message(error: BaseException) -> str | None:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Message")
    return str(error) or None


def lookup(error: BaseException, fallback_message: str) -> AuthError:
    """
    Translate ``error`` into an AuthError.

    AuthErrors pass through unchanged. Cognito errors with a known code map to
    their typed subclass (keeping the service's message). Everything else is
    wrapped in a plain AuthError carrying ``fallback_message``.
    """
    if isinstance(error, AuthError):
        return error

    code = _error_code(error)
    error_type = ERROR_TYPES_BY_CODE.get(code or "")
    if error_type is not None:
        return error_type(error, _error_message(error))

    return AuthError(fallback_message, error, DEFAULT_RECOVERY_SUGGESTION)
