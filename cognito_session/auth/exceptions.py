# cognito_session/auth/exceptions.py
"""
Local auth error types.

Every failure that crosses the SessionHelper boundary is an AuthError carrying:
- a human-readable message
- the original exception (also chained as ``__cause__`` when raised)
- a recovery suggestion for the caller
"""
from __future__ import annotations

from enum import Enum


DEFAULT_RECOVERY_SUGGESTION = "See attached exception for more details"


class AuthError(Exception):
    """Base exception for all auth failures surfaced to callers."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        recovery_suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.recovery_suggestion = recovery_suggestion
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"cause={self.cause!r}, recovery_suggestion={self.recovery_suggestion!r})"
        )


# ---------------------------------------------------------------------------
# Session state errors
# ---------------------------------------------------------------------------


class GuestAccess(str, Enum):
    GUEST_ACCESS_POSSIBLE = "GUEST_ACCESS_POSSIBLE"
    GUEST_ACCESS_DISABLED = "GUEST_ACCESS_DISABLED"


class SessionExpiredError(AuthError):
    """Raised (or carried in a failed sub-result) when the stored session has expired."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(
            "Your session has expired.",
            cause,
            "Please sign in and reauthenticate.",
        )


class SignedOutError(AuthError):
    """Carried in session sub-results that are unavailable because nobody is signed in."""

    def __init__(self, guest_access: GuestAccess = GuestAccess.GUEST_ACCESS_DISABLED) -> None:
        if guest_access == GuestAccess.GUEST_ACCESS_POSSIBLE:
            suggestion = (
                "If you'd like to make this request as a guest, make sure guest access is enabled "
                "on the identity pool and that the device is online. Otherwise, sign in and retry."
            )
        else:
            suggestion = "Please sign in and reattempt the operation."
        super().__init__("You are currently signed out.", None, suggestion)
        self.guest_access = guest_access


class InvalidAccountTypeError(AuthError):
    """Raised when the configured account type does not support the operation."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(
            "The account type you have configured doesn't support this operation.",
            cause,
            "Update your Auth configuration to include both a user pool and an identity pool.",
        )


class UnknownAuthError(AuthError):
    """Wraps an error the identity client did not categorize."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(
            "An unclear error occurred.",
            cause,
            "Check the attached error for more details.",
        )


# ---------------------------------------------------------------------------
# Service errors (mapped from Cognito error codes)
# ---------------------------------------------------------------------------


class ServiceError(AuthError):
    """Base for errors reported by the Cognito service with a known error code."""

    default_message = "The identity service rejected the request."
    default_suggestion = DEFAULT_RECOVERY_SUGGESTION

    def __init__(self, cause: BaseException | None = None, message: str | None = None) -> None:
        super().__init__(message or self.default_message, cause, self.default_suggestion)


class UsernameExistsError(ServiceError):
    default_message = "Username already exists in the system."
    default_suggestion = "Retry operation and enter another username."


class AliasExistsError(ServiceError):
    default_message = "Alias already exists in the system."
    default_suggestion = "Retry operation and use another alias."


class InvalidPasswordError(ServiceError):
    default_message = "The password given is invalid."
    default_suggestion = "Check the password policy and retry with a different password."


class InvalidParameterError(ServiceError):
    default_message = "One or more parameters are incorrect."
    default_suggestion = "Enter correct parameters."


class CodeExpiredError(ServiceError):
    default_message = "Confirmation code has expired."
    default_suggestion = "Resend a new confirmation code and then retry operation with it."


class CodeMismatchError(ServiceError):
    default_message = "Confirmation code entered is not correct."
    default_suggestion = "Enter correct confirmation code."


class CodeDeliveryFailureError(ServiceError):
    default_message = "Error in delivering the confirmation code."
    default_suggestion = "Retry operation and send another confirmation code."


class LimitExceededError(ServiceError):
    default_message = "Number of allowed operation has exceeded."
    default_suggestion = "Please wait a while before re-attempting or increase the service limit."


class MFAMethodNotFoundError(ServiceError):
    default_message = "Could not find multi-factor authentication (MFA) method."
    default_suggestion = "Configure multi-factor authentication using the console."


class NotAuthorizedError(ServiceError):
    default_message = "Failed since user is not authorized."
    default_suggestion = "Check whether the given values are correct and the user is authorized."


class ResourceNotFoundError(ServiceError):
    default_message = "Could not find the requested online resource."
    default_suggestion = "Retry with exponential back-off or check your config file to be sure the endpoint is valid."


class SoftwareTokenMFANotFoundError(ServiceError):
    default_message = "Software token TOTP multi-factor authentication (MFA) is not enabled for the user pool."
    default_suggestion = "Enable the software token MFA for the user."


class FailedAttemptsLimitExceededError(ServiceError):
    default_message = "Number of allowed operation has exceeded."
    default_suggestion = "Please wait a while before re-attempting or increase the service limit."


class TooManyRequestsError(ServiceError):
    default_message = "The request was throttled by the identity service."
    default_suggestion = "Retry with exponential back-off."


class PasswordResetRequiredError(ServiceError):
    default_message = "Required to reset the password of the user."
    default_suggestion = "Reset the password of the user."


class UserNotConfirmedError(ServiceError):
    default_message = "User not confirmed in the system."
    default_suggestion = "Please confirm user first and then retry operation."


class UserNotFoundError(ServiceError):
    default_message = "User not found in the system."
    default_suggestion = "Please enter correct username."
