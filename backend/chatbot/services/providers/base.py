"""Abstract reply and image provider interfaces."""

from abc import ABC, abstractmethod

from chatbot.models.chat import Message


class BaseReplyProvider(ABC):
    @abstractmethod
    async def reply(self, messages: list[Message]) -> str:
        """Return the assistant's reply to the conversation so far."""
        ...


class BaseImageProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate an image for the prompt. Returns the image URL."""
        ...
