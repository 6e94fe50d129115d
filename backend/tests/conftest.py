"""Shared test fixtures for backend tests."""

from datetime import datetime, time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from chatbot.api.chat import get_chat_service
from chatbot.core.config import settings
from chatbot.models.chat import Conversation, Message
from chatbot.services.chat import ChatService
from chatbot.services.providers.base import BaseReplyProvider
from chatbot.services.providers.simulated import SimulatedImageProvider
from chatbot.services.storage.memory import InMemoryBackend
from chatbot.services.store import ConversationStore, get_store


class EchoReplyProvider(BaseReplyProvider):
    """Replies instantly with the last message's content."""

    async def reply(self, messages):
        return f"Echo: {messages[-1].content}"


class FailingReplyProvider(BaseReplyProvider):
    async def reply(self, messages):
        raise RuntimeError("provider down")


def make_message(msg_id, role="user", content="hi", timestamp=1_700_000_000_000, **extra):
    return Message(id=msg_id, role=role, content=content, timestamp=timestamp, **extra)


def make_conversation(conv_id, messages=(), created_at=1_700_000_000_000):
    messages = list(messages)
    updated_at = max([created_at] + [m.timestamp for m in messages])
    return Conversation(id=conv_id, messages=messages, created_at=created_at, updated_at=updated_at)


def local_midnight_ms(day):
    return int(datetime.combine(day, time.min).timestamp() * 1000)


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite with StaticPool so all connections share one DB."""
    import chatbot.models.storage  # noqa: F401 - register models
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def store():
    return ConversationStore(InMemoryBackend(), namespace="test_chat")


@pytest.fixture
def client(store):
    """FastAPI TestClient backed by an in-memory store and an instant reply provider."""
    with patch("chatbot.main.init_db"):
        from chatbot.main import app

        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_chat_service] = lambda: ChatService(
            store, EchoReplyProvider(), SimulatedImageProvider()
        )

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    response = client.post("/api/admin/login", json={"password": settings.admin_password})
    assert response.status_code == 200
    return client
