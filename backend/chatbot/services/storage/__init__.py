"""Key-value backend factory."""

from chatbot.core.config import settings
from chatbot.services.storage.base import BaseKeyValueBackend


def get_storage_backend() -> BaseKeyValueBackend:
    """Factory function that returns the configured storage backend."""
    if settings.storage_backend == "sqlite":
        from chatbot.core.database import engine
        from chatbot.services.storage.sqlite import SQLModelBackend
        return SQLModelBackend(engine)
    elif settings.storage_backend == "memory":
        from chatbot.services.storage.memory import InMemoryBackend
        return InMemoryBackend()
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
