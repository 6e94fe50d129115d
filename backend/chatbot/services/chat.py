"""Chat flow for the widget - welcome message, replies, image requests."""

import logging

from chatbot.core.config import settings
from chatbot.models.chat import Conversation, Message
from chatbot.services.providers import get_image_provider, get_reply_provider
from chatbot.services.providers.base import BaseImageProvider, BaseReplyProvider
from chatbot.services.store import ConversationStore, now_ms

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Sorry, I encountered an error. Please try again."


class ImageQuotaExceededError(Exception):
    def __init__(self, used: int, limit: int):
        super().__init__(f"Daily image limit reached ({used}/{limit})")
        self.used = used
        self.limit = limit


class ChatService:
    """Appends messages to the current conversation and persists them through the store."""

    def __init__(
        self,
        store: ConversationStore,
        reply_provider: BaseReplyProvider | None = None,
        image_provider: BaseImageProvider | None = None,
    ):
        self.store = store
        self.reply_provider = reply_provider or get_reply_provider()
        self.image_provider = image_provider or get_image_provider()

    def _message(self, role: str, content: str, **extra) -> Message:
        return Message(
            id=self.store.generate_id(),
            content=content,
            role=role,
            timestamp=now_ms(),
            **extra,
        )

    @staticmethod
    def _append(conversation: Conversation, message: Message) -> Conversation:
        return conversation.model_copy(update={
            "messages": [*conversation.messages, message],
            "updated_at": max(now_ms(), conversation.created_at),
        })

    def _start_conversation(self) -> Conversation:
        conversation = self.store.create_new_conversation()
        conversation = self._append(
            conversation, self._message("assistant", settings.welcome_message)
        )
        self.store.save_conversation(conversation)
        logger.debug(f"Started conversation {conversation.id}")
        return conversation

    def initialize_conversation(self) -> Conversation:
        """Resume the current conversation, or start one with the welcome message."""
        return self.store.get_current_conversation() or self._start_conversation()

    async def new_conversation(self) -> Conversation:
        async with self.store.turn_lock:
            return self._start_conversation()

    async def send_message(self, content: str) -> Conversation:
        """Append the user's message and the assistant's reply, then save once.

        A failing reply provider is answered with a fixed apology, which is
        saved like any other reply. Turns on the same store run one at a time.
        """
        text = content.strip()
        if not text:
            raise ValueError("Message content is empty")

        async with self.store.turn_lock:
            conversation = self._append(self.initialize_conversation(), self._message("user", text))

            try:
                reply = await self.reply_provider.reply(conversation.messages)
            except Exception as e:
                logger.error(f"Reply failed for conversation {conversation.id}: {e}")
                reply = APOLOGY_MESSAGE

            conversation = self._append(conversation, self._message("assistant", reply))
            self.store.save_conversation(conversation)
            return conversation

    async def generate_image(self, prompt: str) -> Conversation:
        """Append an image reply, subject to the daily free image limit."""
        text = prompt.strip()
        if not text:
            raise ValueError("Image prompt is empty")

        async with self.store.turn_lock:
            used = self.store.get_today_image_count()
            if used >= settings.max_free_images_per_day:
                raise ImageQuotaExceededError(used, settings.max_free_images_per_day)

            conversation = self._append(self.initialize_conversation(), self._message("user", text))

            try:
                image_url = await self.image_provider.generate(text)
                reply = self._message(
                    "assistant", f"Here is your image: {text}", is_image=True, image_url=image_url
                )
            except Exception as e:
                logger.error(f"Image generation failed for conversation {conversation.id}: {e}")
                reply = self._message("assistant", APOLOGY_MESSAGE)

            conversation = self._append(conversation, reply)
            self.store.save_conversation(conversation)
            return conversation
