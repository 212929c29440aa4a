# tests/test_tokens.py
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from storeapi.auth import AuthService
from storeapi.errors import InvalidToken, Unauthenticated

USER_ID = "652f1c2b9d1e8a0012345678"


@pytest.fixture
def service(settings):
    # token handling never touches the store
    return AuthService(users=None, settings=settings)


def test_issued_token_round_trips_identity(service):
    token = service.issue_token(USER_ID, "alice")
    assert service.validate(f"Bearer {token}") == USER_ID
    claims = service.decode_token(token)
    assert claims["username"] == "alice"


def test_token_valid_until_expiry(service, settings):
    almost_expired = datetime.now(timezone.utc) - settings.JWT_EXPIRES_IN + timedelta(seconds=30)
    token = service.issue_token(USER_ID, "alice", now=almost_expired)
    assert service.validate(f"Bearer {token}") == USER_ID


def test_token_rejected_after_expiry(service, settings):
    expired = datetime.now(timezone.utc) - settings.JWT_EXPIRES_IN - timedelta(seconds=1)
    token = service.issue_token(USER_ID, "alice", now=expired)
    with pytest.raises(InvalidToken):
        service.validate(f"Bearer {token}")


def test_token_signed_with_other_secret_rejected(service, settings):
    forged = jwt.encode(
        {"sub": USER_ID, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "a-completely-different-secret-of-32-bytes",
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidToken):
        service.validate(f"Bearer {forged}")


def test_token_without_expiry_rejected(service, settings):
    token = jwt.encode({"sub": USER_ID}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(InvalidToken):
        service.validate(f"Bearer {token}")


@pytest.mark.parametrize("header", [None, "", "Bearer", "Token abc.def.ghi", "Bearer a b"])
def test_missing_or_malformed_header_is_unauthenticated(service, header):
    with pytest.raises(Unauthenticated):
        service.validate(header)


def test_scheme_is_case_insensitive(service):
    token = service.issue_token(USER_ID, "alice")
    assert service.validate(f"bearer {token}") == USER_ID


def test_garbage_token_is_invalid(service):
    with pytest.raises(InvalidToken):
        service.validate("Bearer not-a-jwt")
