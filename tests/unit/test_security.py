"""Unit tests for caller identity and session tokens."""

import pytest
from fastapi import HTTPException

from fcm_hub.auth.security import Caller, create_access_token, decode_token


class TestTokens:
    def test_round_trip_carries_identity(self):
        token = create_access_token("abc-123", "jdoe")
        payload = decode_token(token)
        assert payload["sub"] == "abc-123"
        assert payload["username"] == "jdoe"
        assert payload["exp"] > payload["iat"]

    def test_tampered_token_is_rejected(self):
        token = create_access_token("abc-123", "jdoe")
        with pytest.raises(HTTPException) as exc:
            decode_token(token + "x")
        assert exc.value.status_code == 401


class TestCaller:
    def test_anonymous(self):
        caller = Caller()
        assert caller.is_anonymous
        assert caller.user_uuid() is None
        assert caller.display_name() == "Admin"

    def test_display_name_prefers_username(self):
        assert Caller(user_id="u1", username="jdoe").display_name() == "jdoe"
        assert Caller(user_id="u1").display_name() == "u1"

    def test_malformed_user_id(self):
        with pytest.raises(HTTPException) as exc:
            Caller(user_id="not-a-uuid").user_uuid()
        assert exc.value.status_code == 400
