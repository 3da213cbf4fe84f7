"""Profile, linked accounts and avatar upload"""

import logging
from typing import Any, List, Mapping, Optional, Union

from outbehaving.domain.forms import ProfileForm, validate_form
from outbehaving.domain.models import Account, Profile
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.clients.storage import StorageClient
from outbehaving.infrastructure.errors import ErrorHandler
from outbehaving.infrastructure.repositories import AccountRepository, ProfileRepository
from outbehaving.services.base import SERVICE_ERRORS, Service
from outbehaving.state.app import AppState

logger = logging.getLogger(__name__)


class ProfileService(Service):
    def __init__(
        self,
        state: AppState,
        db: DatabaseClient,
        storage: StorageClient,
        user_id: str,
        error_handler: Optional[ErrorHandler] = None,
    ):
        super().__init__(state, error_handler)
        self.user_id = user_id
        self.storage = storage
        self.profile_repo = ProfileRepository(db)
        self.account_repo = AccountRepository(db)

    async def load_profile(self) -> Optional[Profile]:
        logger.info("Fetching user profile", extra={"user_id": self.user_id})
        with self._operation(self.state.user):
            try:
                profile = await self.profile_repo.get_profile(self.user_id)
            except SERVICE_ERRORS as e:
                self._fail(self.state.user, e, "ProfileService.load_profile")
                return None
            self.state.user.set_profile(profile)
            return profile

    async def update_profile(self, form: Union[ProfileForm, Mapping[str, Any]]) -> Optional[Profile]:
        logger.info("Updating user profile", extra={"user_id": self.user_id})
        with self._operation(self.state.user):
            try:
                updates = validate_form(ProfileForm, form).model_dump(exclude_unset=True)
                profile = await self.profile_repo.update_profile(self.user_id, updates)
            except SERVICE_ERRORS as e:
                self._fail(self.state.user, e, "ProfileService.update_profile")
                return None
            self.state.user.set_profile(profile)
            self.state.notifications.push("success", "Profile updated")
            return profile

    async def load_accounts(self) -> Optional[List[Account]]:
        logger.info("Loading accounts", extra={"user_id": self.user_id})
        with self._operation(self.state.user):
            try:
                accounts = await self.account_repo.list_for_user(self.user_id)
            except SERVICE_ERRORS as e:
                self._fail(self.state.user, e, "ProfileService.load_accounts")
                return None
            self.state.user.set_accounts(accounts)
            return accounts

    async def upload_avatar(self, filename: str, content: bytes, content_type: str) -> Optional[str]:
        """Store the image under `<user_id>/<filename>` and point the profile at its public URL"""
        path = f"{self.user_id}/{filename}"
        with self._operation(self.state.user):
            try:
                await self.storage.upload(path, content, content_type=content_type, upsert=True)
                url = self.storage.get_public_url(path)
                profile = await self.profile_repo.update_profile(self.user_id, {"avatar_url": url})
            except SERVICE_ERRORS as e:
                self._fail(self.state.user, e, "ProfileService.upload_avatar")
                return None
            self.state.user.set_profile(profile)
            self.state.notifications.push("success", "File uploaded successfully!")
            return url
