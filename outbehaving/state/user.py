"""User container - profile and linked accounts"""

import dataclasses
import logging
from typing import Any, Iterable, List, Mapping, Optional

from outbehaving.domain.models import Account, Profile
from outbehaving.state.base import StatusFlags

logger = logging.getLogger(__name__)


class UserState(StatusFlags):
    def __init__(self) -> None:
        super().__init__()
        self.reset()

    def set_profile(self, profile: Optional[Profile]) -> None:
        logger.debug("Setting user profile in store", extra={"user_id": profile.id if profile else None})
        self.profile = profile

    def update_profile(self, updates: Mapping[str, Any]) -> Optional[Profile]:
        logger.debug("Updating user profile in store", extra={"fields": sorted(updates)})
        if self.profile is not None:
            self.profile = dataclasses.replace(self.profile, **updates)
        return self.profile

    def set_accounts(self, accounts: Iterable[Account]) -> None:
        self.accounts: List[Account] = list(accounts)
        logger.debug("Setting accounts in store", extra={"count": len(self.accounts)})

    def add_account(self, account: Account) -> None:
        logger.debug("Adding account to store", extra={"account_id": account.id})
        self.accounts.append(account)

    def update_account(self, account_id: str, updates: Mapping[str, Any]) -> Optional[Account]:
        logger.debug("Updating account in store", extra={"account_id": account_id, "fields": sorted(updates)})
        self.accounts = [
            dataclasses.replace(acc, **updates) if acc.id == account_id else acc for acc in self.accounts
        ]
        return self.get_account(account_id)

    def merge_account(self, account: Account) -> Account:
        """Replace by id with an authoritative record, or add it"""
        if self.get_account(account.id) is None:
            self.add_account(account)
        else:
            self.accounts = [account if acc.id == account.id else acc for acc in self.accounts]
        return account

    def remove_account(self, account_id: str) -> None:
        logger.debug("Removing account from store", extra={"account_id": account_id})
        self.accounts = [acc for acc in self.accounts if acc.id != account_id]

    def get_account(self, account_id: Optional[str]) -> Optional[Account]:
        return next((acc for acc in self.accounts if acc.id == account_id), None)

    def reset(self) -> None:
        logger.info("Resetting user store")
        self.profile: Optional[Profile] = None
        self.accounts = []
        self._reset_status()
