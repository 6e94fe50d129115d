"""Reply and image provider factories."""

from chatbot.core.config import settings
from chatbot.services.providers.base import BaseImageProvider, BaseReplyProvider


def get_reply_provider() -> BaseReplyProvider:
    """Factory function that returns the configured reply provider."""
    if settings.reply_provider == "simulated":
        from chatbot.services.providers.simulated import SimulatedReplyProvider
        return SimulatedReplyProvider()
    else:
        raise ValueError(f"Unknown reply provider: {settings.reply_provider}")


def get_image_provider() -> BaseImageProvider:
    """Factory function that returns the configured image provider."""
    if settings.image_provider == "simulated":
        from chatbot.services.providers.simulated import SimulatedImageProvider
        return SimulatedImageProvider()
    else:
        raise ValueError(f"Unknown image provider: {settings.image_provider}")
