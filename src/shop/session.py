from __future__ import annotations

import time
from typing import Callable, Optional

from db import crud
from db.models import AuthToken, User
from db.seed import CREDENTIALS
from shop.errors import (
    AdminRequired,
    AuthenticationRequired,
    InvalidCredentials,
    SessionExpired,
    UserNotFound,
)
from utils import config
from utils.logger import get_logger
from utils.pure import generate_token

_logger = get_logger(__name__)

Clock = Callable[[], float]


class SessionManager:
    """
    Issues, validates and expires the store's single current session.

    Session state lives in the key-value store, not on this object: every
    check reads it back, so a session outlives a restarted backend as long
    as the store keeps it. Expiry is checked lazily when a session is used.

    `clock` returns the current time in epoch seconds and can be swapped
    out to exercise expiry.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or time.time

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        user = await crud.get_user_by_email(email)
        if user is None or CREDENTIALS.get(email) != password:
            _logger.info(f"Rejected login for {email!r}")
            raise InvalidCredentials()

        token = generate_token(user.id, self.now_ms())
        auth = AuthToken(
            user_id=user.id,
            email=user.email,
            role=user.role,
            expires_at=self.clock() + config.SESSION_TTL_HOURS * 3600,
        )
        await crud.save_session(token, auth)
        _logger.info(f"User {user.id} ({user.role}) logged in")
        return user, token

    async def logout(self) -> None:
        await crud.clear_session()
        _logger.info("Session cleared")

    async def current_session(self) -> Optional[AuthToken]:
        """The live session, or None. Never raises and never clears."""
        token, auth = await crud.load_session()
        if not token or auth is None or auth.expires_at <= self.clock():
            return None
        return auth

    async def require_auth(self, needs_admin: bool = False) -> AuthToken:
        """Gate for every protected operation; returns the caller's session."""
        token, auth = await crud.load_session()
        if not token or auth is None:
            raise AuthenticationRequired()

        if auth.expires_at <= self.clock():
            await crud.clear_session()
            _logger.info(f"Session for user {auth.user_id} expired")
            raise SessionExpired()

        if needs_admin and auth.role != "admin":
            raise AdminRequired()

        return auth

    async def get_current_user(self) -> User:
        auth = await self.require_auth()
        user = await crud.get_user(auth.user_id)
        if user is None:
            raise UserNotFound()
        return user
