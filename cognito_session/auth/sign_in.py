# cognito_session/auth/sign_in.py
"""
Local sign-in result model and sign-in options.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AuthSignInStep(str, Enum):
    CONFIRM_SIGN_IN_WITH_SMS_MFA_CODE = "CONFIRM_SIGN_IN_WITH_SMS_MFA_CODE"
    CONFIRM_SIGN_IN_WITH_TOTP_CODE = "CONFIRM_SIGN_IN_WITH_TOTP_CODE"
    CONFIRM_SIGN_IN_WITH_CUSTOM_CHALLENGE = "CONFIRM_SIGN_IN_WITH_CUSTOM_CHALLENGE"
    CONFIRM_SIGN_IN_WITH_NEW_PASSWORD = "CONFIRM_SIGN_IN_WITH_NEW_PASSWORD"
    DONE = "DONE"


class DeliveryMedium(str, Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    PHONE = "PHONE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: str | None) -> DeliveryMedium:
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class AuthCodeDeliveryDetails:
    destination: str
    delivery_medium: DeliveryMedium = DeliveryMedium.UNKNOWN
    attribute_name: str | None = None


@dataclass(frozen=True)
class AuthNextSignInStep:
    sign_in_step: AuthSignInStep
    additional_info: dict[str, str] = field(default_factory=dict)
    code_delivery_details: AuthCodeDeliveryDetails | None = None


@dataclass(frozen=True)
class AuthSignInResult:
    is_sign_in_complete: bool
    next_step: AuthNextSignInStep


class SignInOptionsKind(str, Enum):
    DEFAULT = "DEFAULT"
    COGNITO = "COGNITO"


@dataclass(frozen=True)
class SignInOptions:
    """
    Sign-in options as a tagged variant.

    Only the ``COGNITO`` variant carries client metadata; it is forwarded to the
    user pool (Lambda triggers receive it as ``clientMetadata``).
    """

    kind: SignInOptionsKind = SignInOptionsKind.DEFAULT
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> SignInOptions:
        return cls(kind=SignInOptionsKind.DEFAULT)

    @classmethod
    def cognito(cls, metadata: dict[str, str] | None = None) -> SignInOptions:
        return cls(kind=SignInOptionsKind.COGNITO, metadata=dict(metadata or {}))

    def client_metadata(self) -> dict[str, str] | None:
        if self.kind == SignInOptionsKind.COGNITO:
            return dict(self.metadata)
        return None
