"""Tests for JWT issuance and verification."""

from datetime import timedelta

import pytest
from jose import jwt

from backoffice.core.security import InvalidToken, TokenService, subject_id


def _service(secret="secret-a", lifetime=timedelta(hours=12)) -> TokenService:
    return TokenService(secret, "HS256", lifetime)


def test_issued_token_round_trips_claims():
    service = _service()
    payload = service.verify(service.issue(7, "alice"))
    assert payload["sub"] == "7"
    assert payload["username"] == "alice"
    assert payload["exp"] - payload["iat"] == 12 * 3600
    assert subject_id(payload) == 7


def test_expired_token_is_rejected():
    service = _service(lifetime=timedelta(seconds=-30))
    with pytest.raises(InvalidToken):
        service.verify(service.issue(1, "alice"))


def test_token_signed_with_other_secret_is_rejected():
    token = _service("secret-a").issue(1, "alice")
    with pytest.raises(InvalidToken):
        _service("secret-b").verify(token)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(InvalidToken):
        _service().verify(token)


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"sub": "1"}, "secret-a", algorithm="HS256")
    with pytest.raises(InvalidToken):
        _service().verify(token)


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"sub": "12"}, 12),
        ({"id_user": 5}, 5),
        ({"idUser": "9"}, 9),
        ({"sub": "abc"}, None),
        ({}, None),
    ],
)
def test_subject_id_fallbacks(payload, expected):
    assert subject_id(payload) == expected
