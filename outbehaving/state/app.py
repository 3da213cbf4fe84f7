"""Per-user application state and the in-process registry holding it"""

import logging
import uuid
from collections import OrderedDict
from typing import List, Optional

from outbehaving.domain.models import AuthSession, AuthUser, Notification
from outbehaving.state.base import StatusFlags
from outbehaving.state.goals import GoalsState
from outbehaving.state.news import NewsState
from outbehaving.state.ownership import OwnershipState
from outbehaving.state.user import UserState
from outbehaving.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Transient notifications surfaced to the user"""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def push(self, type: str, message: str) -> Notification:
        notification = Notification(id=str(uuid.uuid4()), type=type, message=message, timestamp=utcnow())
        self.add_notification(notification)
        return notification

    def add_notification(self, notification: Notification) -> None:
        logger.debug("Adding notification", extra={"notification_id": notification.id})
        self.notifications.append(notification)

    def remove_notification(self, notification_id: str) -> None:
        logger.debug("Removing notification", extra={"notification_id": notification_id})
        self.notifications = [n for n in self.notifications if n.id != notification_id]

    def clear(self) -> None:
        logger.debug("Clearing all notifications")
        self.notifications = []


class AuthState(StatusFlags):
    def __init__(self) -> None:
        super().__init__()
        self.reset()
        self.is_loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def set_user(self, user: Optional[AuthUser]) -> None:
        logger.debug("Setting user in store", extra={"user_id": user.id if user else None})
        self.user = user

    def set_session(self, session: Optional[AuthSession]) -> None:
        self.session = session
        if session is not None:
            self.user = session.user

    def reset(self) -> None:
        logger.info("Resetting auth store")
        self.user: Optional[AuthUser] = None
        self.session: Optional[AuthSession] = None
        self._reset_status()


class AppState:
    """Single source of truth per domain, passed explicitly to services"""

    def __init__(self, ownership: Optional[OwnershipState] = None, goals: Optional[GoalsState] = None):
        self.auth = AuthState()
        self.user = UserState()
        self.goals = goals or GoalsState()
        self.news = NewsState()
        self.ownership = ownership or OwnershipState()
        self.notifications = NotificationCenter()

    def reset(self) -> None:
        """Back to initial state, e.g. on sign-out"""
        for container in (self.auth, self.user, self.goals, self.news, self.ownership):
            container.reset()
        self.notifications.clear()


class StateRegistry:
    """
    AppState per user id, held in process memory.

    At most `max_users` entries are kept; the least recently used one is
    evicted to make room. An evicted user starts from a fresh AppState on
    their next request and loses local-only data such as favourites.
    """

    def __init__(self, max_users: int = 10_000) -> None:
        if max_users < 1:
            raise ValueError("max_users must be at least 1")
        self.max_users = max_users
        self._states: "OrderedDict[str, AppState]" = OrderedDict()

    def get(self, user_id: str) -> AppState:
        if user_id in self._states:
            self._states.move_to_end(user_id)
            return self._states[user_id]

        if len(self._states) >= self.max_users:
            evicted, _ = self._states.popitem(last=False)
            logger.info("Evicted idle user state", extra={"user_id": evicted})
        state = self._states[user_id] = AppState()
        return state

    def drop(self, user_id: str) -> None:
        state = self._states.pop(user_id, None)
        if state is not None:
            state.reset()

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._states

    def __len__(self) -> int:
        return len(self._states)
