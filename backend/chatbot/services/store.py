"""Conversation store - every read and write of widget state goes through here.

State lives in a key-value backend under namespaced keys, each value JSON text:

    <namespace>_conversations   list of conversations, in save order
    <namespace>_current         the current conversation
    <namespace>_stats           cached ChatStats
    <namespace>_admin           admin session
    <namespace>_visitors        list of visitor ids

Stats are a cache. They are recomputed from the conversation list on every
save, under the same lock as the write.
"""

import asyncio
import json
import logging
import random
import threading
import time
from datetime import date, datetime, timezone
from typing import Any

from pydantic import ValidationError

from chatbot.core.config import settings
from chatbot.models.chat import AdminSession, ChatStats, Conversation
from chatbot.services.storage import get_storage_backend
from chatbot.services.storage.base import BaseKeyValueBackend

logger = logging.getLogger(__name__)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def now_ms() -> int:
    return int(time.time() * 1000)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def local_date(timestamp_ms: int) -> date:
    """Calendar date of an epoch-millis timestamp in the server's local timezone."""
    return datetime.fromtimestamp(timestamp_ms / 1000).date()


def format_display_date(timestamp_ms: int) -> str:
    """Short display date, e.g. ``10/18/2026``."""
    d = local_date(timestamp_ms)
    return f"{d.month}/{d.day}/{d.year}"


class ConversationStore:
    def __init__(self, backend: BaseKeyValueBackend, namespace: str | None = None):
        self.backend = backend
        self.namespace = namespace or settings.storage_namespace
        self.conversations_key = f"{self.namespace}_conversations"
        self.current_key = f"{self.namespace}_current"
        self.stats_key = f"{self.namespace}_stats"
        self.admin_key = f"{self.namespace}_admin"
        self.visitors_key = f"{self.namespace}_visitors"
        self._lock = threading.RLock()
        # Held across a whole chat turn: read current, await the provider, save.
        self.turn_lock = asyncio.Lock()

    def close(self) -> None:
        self.backend.close()

    # --- raw JSON access ---

    def _read(self, key: str) -> Any:
        raw = self.backend.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed JSON under {key}")
            return None

    def _write(self, key: str, value: Any) -> None:
        self.backend.set_item(key, json.dumps(value, separators=(",", ":"), ensure_ascii=False))

    # --- ids ---

    @staticmethod
    def generate_id() -> str:
        """Base-36 timestamp plus random base-36 suffix. Unique in practice, not secure."""
        return to_base36(now_ms()) + to_base36(random.getrandbits(52))

    # --- conversations ---

    def get_conversations(self) -> list[Conversation]:
        data = self._read(self.conversations_key)
        if not isinstance(data, list):
            return []
        try:
            return [Conversation.model_validate(c) for c in data]
        except ValidationError as e:
            logger.warning(f"Ignoring malformed conversation list: {e.error_count()} errors")
            return []

    def get_current_conversation(self) -> Conversation | None:
        data = self._read(self.current_key)
        if data is None:
            return None
        try:
            return Conversation.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring malformed current conversation")
            return None

    def create_new_conversation(self) -> Conversation:
        """Create an empty conversation and point `current` at it.

        It is not added to the conversation list until it is saved.
        """
        timestamp = now_ms()
        conversation = Conversation(
            id=self.generate_id(),
            messages=[],
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._write(self.current_key, conversation.dump())
        return conversation

    def save_conversation(self, conversation: Conversation) -> None:
        """Upsert by id, make it current and recompute stats.

        The stored copy is overwritten with the given content, no merge.
        """
        with self._lock:
            conversations = self.get_conversations()
            for i, existing in enumerate(conversations):
                if existing.id == conversation.id:
                    conversations[i] = conversation
                    break
            else:
                conversations.append(conversation)

            self._write(self.conversations_key, [c.dump() for c in conversations])
            self._write(self.current_key, conversation.dump())
            self.update_stats()

    def delete_all_conversations(self) -> None:
        """Drop every conversation and the current pointer. Visitors are kept."""
        with self._lock:
            self.backend.remove_item(self.conversations_key)
            self.backend.remove_item(self.current_key)
            stats = self.get_stats()
            reset = stats.model_copy(update={
                "total_messages": 0,
                "total_conversations": 0,
                "total_generated_images": 0,
                "images_generated_today": 0,
            })
            self._write(self.stats_key, reset.dump())
            logger.info("Deleted all conversations")

    # --- stats ---

    def _stored_stats(self) -> ChatStats | None:
        data = self._read(self.stats_key)
        if data is None:
            return None
        try:
            return ChatStats.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring malformed stats record")
            return None

    def get_stats(self) -> ChatStats:
        """Cached stats, with the visitor count always read live."""
        visitors = len(self._visitor_ids())
        stats = self._stored_stats()
        if stats is not None:
            return stats.model_copy(update={"total_visitors": visitors})

        stats = ChatStats(total_visitors=visitors)
        self._write(self.stats_key, stats.dump())
        return stats

    def update_stats(self, today: date | None = None) -> ChatStats:
        with self._lock:
            conversations = self.get_conversations()
            stats = ChatStats(
                total_messages=sum(len(c.messages) for c in conversations),
                total_conversations=len(conversations),
                total_generated_images=sum(
                    1 for c in conversations for m in c.messages if m.is_image
                ),
                total_visitors=len(self._visitor_ids()),
                images_generated_today=_count_images_on(conversations, today or date.today()),
                last_image_gen_date=_last_image_date(conversations),
            )
            self._write(self.stats_key, stats.dump())
            return stats

    def get_today_image_count(self, today: date | None = None) -> int:
        """Image messages whose local calendar date is today."""
        return _count_images_on(self.get_conversations(), today or date.today())

    def get_last_image_gen_date(self) -> str:
        return _last_image_date(self.get_conversations())

    # --- export ---

    def export_conversations_as_json(self) -> str:
        stats = self._stored_stats()
        if stats is None:
            stats = ChatStats()
        stats = stats.model_copy(update={"total_visitors": len(self._visitor_ids())})

        export_date = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        payload = {
            "exportDate": export_date.replace("+00:00", "Z"),
            "stats": stats.dump(),
            "conversations": [c.dump() for c in self.get_conversations()],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    # --- admin session (expiry is checked by the caller) ---

    def save_admin_session(self, session: AdminSession) -> None:
        self._write(self.admin_key, session.dump())

    def get_admin_session(self) -> AdminSession | None:
        data = self._read(self.admin_key)
        if data is None:
            return None
        try:
            return AdminSession.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring malformed admin session")
            return None

    def clear_admin_session(self) -> None:
        self.backend.remove_item(self.admin_key)

    # --- visitors ---

    def _visitor_ids(self) -> list[str]:
        data = self._read(self.visitors_key)
        return data if isinstance(data, list) else []

    def initialize_visitor_tracking(self) -> int:
        """Record a visitor id on first-ever call; afterwards just report the count.

        No call path adds a second id, so this counts storage initializations
        rather than return visits.
        """
        with self._lock:
            data = self._read(self.visitors_key)
            if not isinstance(data, list):
                self._write(self.visitors_key, [self.generate_id()])
                logger.info("Visitor tracking initialized")
                return 1
            return len(data)


def _count_images_on(conversations: list[Conversation], day: date) -> int:
    return sum(
        1
        for c in conversations
        for m in c.messages
        if m.is_image and local_date(m.timestamp) == day
    )


def _last_image_date(conversations: list[Conversation]) -> str:
    latest = 0
    for c in conversations:
        for m in c.messages:
            if m.is_image and m.timestamp > latest:
                latest = m.timestamp
    return format_display_date(latest) if latest else ""


_store: ConversationStore | None = None


def get_store() -> ConversationStore:
    """FastAPI dependency returning the process-wide store."""
    global _store
    if _store is None:
        _store = ConversationStore(get_storage_backend())
    return _store


def close_store() -> None:
    global _store
    if _store is not None:
        _store.close()
        _store = None
