from __future__ import annotations

import time
from datetime import timezone

from cognito_session.auth.claims import get_token_expiration, get_user_id_from_token


def test_user_id_from_token(make_token):
    assert get_user_id_from_token(make_token(sub="abc-123")) == "abc-123"


def test_user_id_from_malformed_token():
    assert get_user_id_from_token("definitely.not.ajwt") is None
    assert get_user_id_from_token("") is None


def test_user_id_missing_sub(make_token):
    assert get_user_id_from_token(make_token(sub="")) is None


def test_token_expiration(make_token):
    before = int(time.time())
    expires_at = get_token_expiration(make_token(exp_offset=120))

    assert expires_at.tzinfo == timezone.utc
    assert before + 120 <= int(expires_at.timestamp()) <= before + 122


def test_token_expiration_missing():
    assert get_token_expiration("garbage") is None
