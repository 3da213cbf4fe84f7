"""Sign-up, sign-in, sign-out and session tracking"""

import logging
from typing import Any, Mapping, Optional, Union

from outbehaving.domain.forms import PasswordResetForm, PasswordUpdateForm, SignInForm, SignUpForm, validate_form
from outbehaving.domain.models import AuthSession, AuthUser
from outbehaving.infrastructure.clients.auth import AuthClient, AuthEvent, Subscription
from outbehaving.infrastructure.errors import ErrorHandler
from outbehaving.services.base import SERVICE_ERRORS, Service
from outbehaving.state.app import AppState

logger = logging.getLogger(__name__)


class AuthService(Service):
    def __init__(self, state: AppState, client: AuthClient, error_handler: Optional[ErrorHandler] = None):
        super().__init__(state, error_handler)
        self.client = client
        self.subscription: Optional[Subscription] = None

    async def initialize(self) -> Optional[AuthUser]:
        """Resolve the current user and start tracking auth state changes"""
        logger.debug("Auth service initialized")
        if self.subscription is None:
            self.subscription = self.client.on_auth_state_change(self._on_auth_state_change)
        try:
            user = await self.client.get_current_user()
        except SERVICE_ERRORS as e:
            self._fail(self.state.auth, e, "AuthService.get_current_user")
            user = None
        self.state.auth.set_user(user)
        self.state.auth.set_loading(False)
        return user

    def close(self) -> None:
        if self.subscription is not None:
            self.subscription.unsubscribe()
            self.subscription = None

    def _on_auth_state_change(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        logger.info("Auth state change detected", extra={"event": event.value})
        if event == AuthEvent.SIGNED_OUT:
            self.state.reset()
            self.state.auth.set_loading(False)
            return
        self.state.auth.set_session(session)

    async def sign_up(self, form: Union[SignUpForm, Mapping[str, Any]]) -> Optional[AuthUser]:
        with self._operation(self.state.auth):
            try:
                data = validate_form(SignUpForm, form)
                user = await self.client.sign_up(data.email, data.password, {"name": data.name, "full_name": data.name})
            except SERVICE_ERRORS as e:
                self._fail(self.state.auth, e, "AuthService.sign_up")
                return None
            self.state.notifications.push("success", "Account created successfully!")
            return user

    async def sign_in(self, form: Union[SignInForm, Mapping[str, Any]]) -> Optional[AuthSession]:
        with self._operation(self.state.auth):
            try:
                data = validate_form(SignInForm, form)
                session = await self.client.sign_in(data.email, data.password)
            except SERVICE_ERRORS as e:
                self._fail(self.state.auth, e, "AuthService.sign_in")
                return None
            self.state.auth.set_session(session)
            self.state.notifications.push("success", "Welcome back!")
            return session

    async def sign_out(self) -> bool:
        with self._operation(self.state.auth):
            try:
                await self.client.sign_out()
            except SERVICE_ERRORS as e:
                self._fail(self.state.auth, e, "AuthService.sign_out")
                return False
            self.state.notifications.push("success", "Signed out successfully")
            return True

    async def reset_password(self, email: str) -> bool:
        try:
            data = validate_form(PasswordResetForm, {"email": email})
            await self.client.reset_password(data.email)
        except SERVICE_ERRORS as e:
            self._fail(self.state.auth, e, "AuthService.reset_password")
            return False
        self.state.notifications.push("success", "Password reset email sent!")
        return True

    async def update_password(self, new_password: str) -> bool:
        try:
            data = validate_form(PasswordUpdateForm, {"password": new_password})
            await self.client.update_password(data.password)
        except SERVICE_ERRORS as e:
            self._fail(self.state.auth, e, "AuthService.update_password")
            return False
        self.state.notifications.push("success", "Password updated successfully!")
        return True
