"""
Tests for token handling and the clock seam.
"""
from datetime import timedelta

import pytest

from seap.core.clock import Clock, SystemClock
from seap.core.security import (
    create_access_token,
    decode_token,
    generate_tracking_token,
    is_well_formed_tracking_token,
    verify_access_token,
)


def test_tracking_token_format():
    token = generate_tracking_token()
    assert is_well_formed_tracking_token(token)
    assert not is_well_formed_tracking_token(token + "\n")
    assert not is_well_formed_tracking_token(token.upper())
    assert not is_well_formed_tracking_token(token[:-1])


def test_access_token_round_trip():
    payload = verify_access_token(create_access_token({"user_id": "u1", "role": "user"}))
    assert payload["user_id"] == "u1"
    assert payload["type"] == "access"


def test_expired_and_tampered_tokens_decode_to_none():
    expired = create_access_token({"user_id": "u1"}, expires_delta=timedelta(seconds=-1))
    assert decode_token(expired) is None
    assert decode_token(create_access_token({"user_id": "u1"}) + "x") is None
    assert decode_token("not-a-jwt") is None


def test_clock_is_abstract():
    with pytest.raises(TypeError):
        Clock()
    assert SystemClock().now().tzinfo is None
