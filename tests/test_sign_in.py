from __future__ import annotations

import pytest

from cognito_session.auth.exceptions import AuthError, NotAuthorizedError, UserNotFoundError
from cognito_session.auth.sign_in import AuthSignInStep, DeliveryMedium, SignInOptions
from cognito_session.services.identity_client import SignInResult, SignInState, UserCodeDeliveryDetails
from cognito_session.services.session_helper import SIGN_IN_FAILED_MESSAGE, SessionHelper


def _sign_in(helper: SessionHelper, options=None):
    successes: list = []
    errors: list = []
    helper.sign_in("alice", "Password12345!", options, successes.append, errors.append)
    return successes, errors


def _sign_in_args(fake_client):
    return [args for name, args in fake_client.calls if name == "sign_in"]


# ---------------------------------------------------------------------------
# Options / metadata
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("options", [None, SignInOptions.default(), SignInOptions()])
def test_options_without_metadata_pass_none(fake_client, options):
    _sign_in(SessionHelper(fake_client), options)

    assert _sign_in_args(fake_client) == [("alice", "Password12345!", None)]


def test_cognito_options_forward_metadata(fake_client):
    _sign_in(SessionHelper(fake_client), SignInOptions.cognito({"source": "mobile"}))

    assert _sign_in_args(fake_client) == [("alice", "Password12345!", {"source": "mobile"})]


def test_default_options_ignore_stray_metadata(fake_client):
    # Only the COGNITO variant carries metadata to the provider.
    options = SignInOptions(metadata={"ignored": "yes"})

    _sign_in(SessionHelper(fake_client), options)

    assert _sign_in_args(fake_client) == [("alice", "Password12345!", None)]


# ---------------------------------------------------------------------------
# Result translation
# ---------------------------------------------------------------------------


def test_sign_in_done(fake_client, make_tokens):
    fake_client.tokens = make_tokens(sub="alice-sub")

    successes, errors = _sign_in(SessionHelper(fake_client))

    assert errors == []
    assert len(successes) == 1
    result = successes[0]
    assert result.is_sign_in_complete is True
    assert result.next_step.sign_in_step == AuthSignInStep.DONE
    assert result.next_step.additional_info == {}
    assert result.next_step.code_delivery_details is None


def test_sign_in_sms_mfa_challenge(fake_client):
    fake_client.sign_in_result = SignInResult(
        sign_in_state=SignInState.SMS_MFA,
        parameters={"CODE_DELIVERY_DESTINATION": "+*******1234", "CODE_DELIVERY_DELIVERY_MEDIUM": "SMS"},
        code_details=UserCodeDeliveryDetails(
            destination="+*******1234",
            delivery_medium="SMS",
            attribute_name="phone_number",
        ),
    )

    successes, errors = _sign_in(SessionHelper(fake_client))

    assert errors == []
    result = successes[0]
    assert result.is_sign_in_complete is False
    assert result.next_step.sign_in_step == AuthSignInStep.CONFIRM_SIGN_IN_WITH_SMS_MFA_CODE
    assert result.next_step.additional_info["CODE_DELIVERY_DELIVERY_MEDIUM"] == "SMS"
    details = result.next_step.code_delivery_details
    assert details.destination == "+*******1234"
    assert details.delivery_medium == DeliveryMedium.SMS
    assert details.attribute_name == "phone_number"


def test_null_parameters_become_empty_mapping(fake_client):
    fake_client.sign_in_result = SignInResult(sign_in_state=SignInState.NEW_PASSWORD_REQUIRED, parameters=None)

    successes, _ = _sign_in(SessionHelper(fake_client))

    assert successes[0].next_step.additional_info == {}
    assert successes[0].next_step.sign_in_step == AuthSignInStep.CONFIRM_SIGN_IN_WITH_NEW_PASSWORD


def test_unsupported_state_routes_to_on_error(fake_client):
    fake_client.sign_in_result = SignInResult(sign_in_state=SignInState.DEVICE_SRP_AUTH)

    successes, errors = _sign_in(SessionHelper(fake_client))

    assert successes == []
    assert len(errors) == 1
    assert errors[0].message == "Unsupported sign in state"
    # The follow-up token fetch only runs after a successful translation.
    assert "fetch_tokens" not in fake_client.call_names()


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------


def test_cognito_error_translated_by_code(fake_client, client_error):
    exc = client_error("NotAuthorizedException", "Incorrect username or password.")
    fake_client.sign_in_error = exc

    successes, errors = _sign_in(SessionHelper(fake_client))

    assert successes == []
    assert len(errors) == 1
    assert isinstance(errors[0], NotAuthorizedError)
    assert errors[0].message == "Incorrect username or password."
    assert errors[0].cause is exc


def test_user_not_found_translated(fake_client, client_error):
    fake_client.sign_in_error = client_error("UserNotFoundException", "User does not exist.")

    _, errors = _sign_in(SessionHelper(fake_client))

    assert isinstance(errors[0], UserNotFoundError)


def test_unexpected_error_uses_fallback_description(fake_client):
    boom = ConnectionError("connection reset")
    fake_client.sign_in_error = boom

    successes, errors = _sign_in(SessionHelper(fake_client))

    assert successes == []
    assert type(errors[0]) is AuthError
    assert errors[0].message == SIGN_IN_FAILED_MESSAGE
    assert errors[0].cause is boom


# ---------------------------------------------------------------------------
# Best-effort token fetch
# ---------------------------------------------------------------------------


def test_token_fetch_sets_user_id(fake_client, make_tokens):
    fake_client.tokens = make_tokens(sub="alice-sub")
    helper = SessionHelper(fake_client)

    successes, _ = _sign_in(helper)

    assert len(successes) == 1
    assert helper.user_id == "alice-sub"
    assert fake_client.call_names() == ["sign_in", "fetch_tokens"]


def test_token_fetch_failure_still_completes(fake_client):
    fake_client.tokens_error = RuntimeError("getTokens does not support retrieving tokens while signed-out")
    helper = SessionHelper(fake_client)

    successes, errors = _sign_in(helper)

    assert len(successes) == 1
    assert errors == []
    assert helper.user_id is None


def test_token_fetch_raising_synchronously_still_completes(fake_client, monkeypatch):
    def _raise(on_result, on_error):
        raise RuntimeError("client blew up")

    monkeypatch.setattr(fake_client, "fetch_tokens", _raise)

    successes, errors = _sign_in(SessionHelper(fake_client))

    assert len(successes) == 1
    assert errors == []


def test_raising_success_callback_runs_once(fake_client, make_tokens):
    fake_client.tokens = make_tokens(sub="alice-sub")
    calls: list = []
    errors: list = []

    def _on_success(result):
        calls.append(result)
        raise ValueError("caller bug")

    with pytest.raises(ValueError, match="caller bug"):
        SessionHelper(fake_client).sign_in("alice", "Password12345!", None, _on_success, errors.append)

    assert len(calls) == 1
    assert errors == []


def test_raising_success_callback_after_failed_fetch_runs_once(fake_client):
    fake_client.tokens_error = RuntimeError("signed out")
    calls: list = []

    def _on_success(result):
        calls.append(result)
        raise ValueError("caller bug")

    with pytest.raises(ValueError):
        SessionHelper(fake_client).sign_in("alice", "Password12345!", None, _on_success, lambda error: None)

    assert len(calls) == 1
