"""Authentication gateway with an in-process auth state listener registry"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from outbehaving.domain.models import AuthSession, AuthUser
from outbehaving.infrastructure.clients.base import BackendClient, BackendConfig
from outbehaving.infrastructure.records import AuthSessionRecord, AuthUserRecord, parse_record

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class Subscription:
    """Handle returned by `on_auth_state_change`"""

    def __init__(self, listeners: List[AuthListener], callback: AuthListener):
        self._listeners = listeners
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class AuthClient(BackendClient):
    """Sign-up, sign-in, sign-out and session lookup"""

    def __init__(self, config: BackendConfig, access_token: Optional[str] = None):
        super().__init__(config, access_token)
        self.session: Optional[AuthSession] = None
        self._listeners: List[AuthListener] = []

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        logger.info("Setting up auth state listener")
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    def _emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        logger.info("Auth state changed", extra={"event": event.value, "user_id": session.user.id if session else None})
        for listener in list(self._listeners):
            listener(event, session)

    def _set_session(self, session: AuthSession) -> None:
        self.session = session
        self.access_token = session.access_token

    async def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        """
        Register a user.

        When the backend auto-confirms it also returns a session, which
        becomes current and emits SIGNED_IN.
        """
        logger.info("Attempting user signup", extra={"email": email})
        response = await self._request(
            "POST",
            "/auth/v1/signup",
            "sign up",
            json={"email": email, "password": password, "data": metadata or {}},
        )
        body = self._json(response, "sign up")

        if "access_token" in body:
            session = parse_record(AuthSessionRecord, body, "auth")
            self._set_session(session)
            self._emit(AuthEvent.SIGNED_IN, session)
            user = session.user
        else:
            user = parse_record(AuthUserRecord, body.get("user", body) if isinstance(body, dict) else body, "auth")

        logger.info("Signup successful", extra={"user_id": user.id})
        return user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        logger.info("Attempting user signin", extra={"email": email})
        response = await self._request(
            "POST",
            "/auth/v1/token",
            "sign in",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = parse_record(AuthSessionRecord, self._json(response, "sign in"), "auth")
        self._set_session(session)
        logger.info("Signin successful", extra={"user_id": session.user.id})
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> bool:
        logger.info("Attempting user signout")
        if self.access_token:
            await self._request("POST", "/auth/v1/logout", "sign out")
        self.session = None
        self.access_token = None
        logger.info("Signout successful")
        self._emit(AuthEvent.SIGNED_OUT, None)
        return True

    async def get_current_user(self) -> Optional[AuthUser]:
        """Current user for the held token; None when there is no session"""
        if not self.access_token:
            logger.debug("No active session when getting current user")
            return None
        response = await self._request("GET", "/auth/v1/user", "get current user")
        user = parse_record(AuthUserRecord, self._json(response, "get current user"), "auth")
        logger.debug("Current user retrieved", extra={"user_id": user.id})
        return user

    async def reset_password(self, email: str, redirect_to: Optional[str] = None) -> bool:
        logger.info("Attempting password reset", extra={"email": email})
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self._request("POST", "/auth/v1/recover", "reset password", params=params, json={"email": email})
        logger.info("Password reset email sent", extra={"email": email})
        return True

    async def update_password(self, new_password: str) -> AuthUser:
        logger.info("Attempting password update")
        response = await self._request("PUT", "/auth/v1/user", "update password", json={"password": new_password})
        user = parse_record(AuthUserRecord, self._json(response, "update password"), "auth")
        logger.info("Password updated successfully")
        self._emit(AuthEvent.USER_UPDATED, self.session)
        return user
