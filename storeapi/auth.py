# storeapi/auth.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
import structlog
from fastapi import Header, Request
from pymongo.errors import DuplicateKeyError
from starlette.concurrency import run_in_threadpool

from .config import Settings
from .database import UsersStore
from .errors import (
    DuplicateUsername,
    InvalidCredentials,
    InvalidToken,
    StorageFailure,
    Unauthenticated,
)
from .models import User

log = structlog.get_logger(__name__)

BEARER_SCHEME = "bearer"


class AuthService:
    """
    Registration, login and bearer-token validation.

    Tokens are stateless HS256 JWTs carrying the user id in ``sub``; there is
    no revocation, a token stays valid until ``exp``.
    """

    def __init__(self, users: UsersStore, settings: Settings):
        self._users = users
        self._settings = settings

    # Passwords
    async def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._settings.BCRYPT_ROUNDS)
        hashed = await run_in_threadpool(bcrypt.hashpw, password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, hashed: str) -> bool:
        return await run_in_threadpool(
            bcrypt.checkpw, password.encode("utf-8"), hashed.encode("utf-8")
        )

    # Registration / login
    async def register(self, username: str, password: str) -> str:
        if await self._users.find_by_username(username):
            raise DuplicateUsername()

        user = User(username=username, password=await self.hash_password(password))
        try:
            user_id = await self._users.insert(user.model_dump())
        except DuplicateKeyError:
            # lost the race against a concurrent registration
            raise DuplicateUsername()
        if user_id is None:
            log.error("storage_failure", operation="register", username=username)
            raise StorageFailure("error registering user")

        log.info("user_registered", user_id=str(user_id), username=username)
        return str(user_id)

    async def login(self, username: str, password: str) -> str:
        user = await self._users.find_by_username(username)
        if user is None or not await self.verify_password(password, user["password"]):
            log.info("login_failed", username=username)
            raise InvalidCredentials()

        log.info("login_succeeded", user_id=str(user["_id"]))
        return self.issue_token(str(user["_id"]), username)

    # Tokens
    def issue_token(self, user_id: str, username: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self._settings.JWT_EXPIRES_IN,
        }
        return jwt.encode(claims, self._settings.JWT_SECRET, algorithm=self._settings.JWT_ALGORITHM)

    def decode_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._settings.JWT_SECRET,
                algorithms=[self._settings.JWT_ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as exc:
            log.info("token_rejected", reason=str(exc))
            raise InvalidToken()

    def validate(self, authorization: Optional[str]) -> str:
        """Resolve an ``Authorization: <scheme> <token>`` header to the caller's user id."""
        if not authorization:
            raise Unauthenticated()
        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
            raise Unauthenticated()
        return self.decode_token(parts[1])["sub"]


async def current_user_id(request: Request, authorization: Optional[str] = Header(None)) -> str:
    """FastAPI dependency: validates the bearer token and records the caller on request.state."""
    user_id = request.app.state.auth_service.validate(authorization)
    request.state.user_id = user_id
    return user_id
