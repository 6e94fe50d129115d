"""Offline providers standing in for a text/image generation API."""

import asyncio
import random
from urllib.parse import quote

from chatbot.core.config import settings
from chatbot.models.chat import Message
from chatbot.services.providers.base import BaseImageProvider, BaseReplyProvider

CANNED_REPLIES = [
    "That's an interesting question! Let me help you with that.",
    "I understand what you're asking. Here's what I think...",
    "Thanks for your message! I'm here to assist you.",
    "Let me provide you with some information about that.",
    "I'd be happy to help you with that request.",
]


class SimulatedReplyProvider(BaseReplyProvider):
    def __init__(self, delay_min: float | None = None, delay_max: float | None = None):
        self.delay_min = settings.reply_delay_min if delay_min is None else delay_min
        self.delay_max = settings.reply_delay_max if delay_max is None else delay_max

    async def reply(self, messages: list[Message]) -> str:
        await asyncio.sleep(random.uniform(self.delay_min, self.delay_max))
        return random.choice(CANNED_REPLIES)


class SimulatedImageProvider(BaseImageProvider):
    base_url = "https://placehold.co/512x512"

    async def generate(self, prompt: str) -> str:
        return f"{self.base_url}?text={quote(prompt[:60])}"
