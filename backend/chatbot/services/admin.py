"""Admin dashboard login against the static shared password."""

import logging
from datetime import timedelta

from chatbot.core.config import settings
from chatbot.models.chat import AdminSession
from chatbot.services.store import ConversationStore, now_ms

logger = logging.getLogger(__name__)


def session_max_age_ms() -> int:
    return int(timedelta(hours=settings.admin_session_max_age_hours).total_seconds() * 1000)


def is_session_valid(session: AdminSession | None, now: int | None = None) -> bool:
    if session is None or not session.is_authenticated:
        return False
    now = now_ms() if now is None else now
    return now - session.login_time < session_max_age_ms()


class AdminAuth:
    def __init__(self, store: ConversationStore):
        self.store = store

    def login(self, password: str) -> AdminSession | None:
        """Plain equality check. Returns the new session, or None on mismatch."""
        if password != settings.admin_password:
            logger.warning("Admin login failed")
            return None
        session = AdminSession(is_authenticated=True, login_time=now_ms())
        self.store.save_admin_session(session)
        logger.info("Admin logged in")
        return session

    def current_session(self, now: int | None = None) -> AdminSession | None:
        """The stored session if still valid. An expired session is cleared."""
        session = self.store.get_admin_session()
        if session is None:
            return None
        if not is_session_valid(session, now):
            self.store.clear_admin_session()
            logger.info("Admin session expired")
            return None
        return session

    def logout(self) -> None:
        self.store.clear_admin_session()
