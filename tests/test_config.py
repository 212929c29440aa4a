# tests/test_config.py
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from pydantic import ValidationError

from storeapi.config import Settings


def test_jwt_secret_is_required(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValidationError) as exc:
        Settings(_env_file=None)
    assert "JWT_SECRET" in str(exc.value)


def test_empty_jwt_secret_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, JWT_SECRET="")


def test_token_signed_with_a_guessed_secret_is_rejected(client):
    client.post("/users/register", json={"username": "alice", "password": "pw1"})
    token = client.post("/users/login", json={"username": "alice", "password": "pw1"}).json()["token"]
    user_id = client.app.state.auth_service.decode_token(token)["sub"]

    guessed = jwt.encode(
        {"sub": user_id, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "change-me-for-production-please-use-32b",
        algorithm="HS256",
    )
    r = client.get("/cart", headers={"Authorization": f"Bearer {guessed}"})
    assert r.status_code == 403


def test_log_level_is_restricted():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, JWT_SECRET="s", LOG_LEVEL="VERBOSE")


def test_log_level_is_case_insensitive():
    assert Settings(_env_file=None, JWT_SECRET="s", LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
