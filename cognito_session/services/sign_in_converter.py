"""
Translate provider sign-in results into the local AuthSignInResult model.
"""
from __future__ import annotations

from cognito_session.auth.exceptions import AuthError
from cognito_session.auth.sign_in import (
    AuthCodeDeliveryDetails,
    AuthNextSignInStep,
    AuthSignInResult,
    AuthSignInStep,
    DeliveryMedium,
)
from cognito_session.services.identity_client import SignInResult, SignInState, UserCodeDeliveryDetails


SIGN_IN_STEP_MAP: dict[SignInState, AuthSignInStep] = {
    SignInState.SMS_MFA: AuthSignInStep.CONFIRM_SIGN_IN_WITH_SMS_MFA_CODE,
    SignInState.SOFTWARE_TOKEN_MFA: AuthSignInStep.CONFIRM_SIGN_IN_WITH_TOTP_CODE,
    SignInState.CUSTOM_CHALLENGE: AuthSignInStep.CONFIRM_SIGN_IN_WITH_CUSTOM_CHALLENGE,
    SignInState.NEW_PASSWORD_REQUIRED: AuthSignInStep.CONFIRM_SIGN_IN_WITH_NEW_PASSWORD,
    SignInState.DONE: AuthSignInStep.DONE,
}


def get_auth_sign_in_step(state: SignInState) -> AuthSignInStep:
    """Raises AuthError for states this package cannot continue from."""
    step = SIGN_IN_STEP_MAP.get(state)
    if step is None:
        raise AuthError(
            "Unsupported sign in state",
            None,
            f"Sign-in returned state {getattr(state, 'value', state)}, which cannot be completed by this client.",
        )
    return step


def convert_code_delivery_details(details: UserCodeDeliveryDetails | None) -> AuthCodeDeliveryDetails | None:
    if details is None:
        return None
    return AuthCodeDeliveryDetails(
        destination=details.destination,
        delivery_medium=DeliveryMedium.from_string(details.delivery_medium),
        attribute_name=details.attribute_name,
    )


def convert_sign_in_result(result: SignInResult) -> AuthSignInResult:
    return AuthSignInResult(
        is_sign_in_complete=result.sign_in_state == SignInState.DONE,
        next_step=AuthNextSignInStep(
            sign_in_step=get_auth_sign_in_step(result.sign_in_state),
            additional_info=dict(result.parameters) if result.parameters is not None else {},
            code_delivery_details=convert_code_delivery_details(result.code_details),
        ),
    )
