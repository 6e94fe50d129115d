"""Tests for the widget chat flow."""

import asyncio
from unittest.mock import patch

import pytest

from chatbot.core.config import settings
from chatbot.services.chat import APOLOGY_MESSAGE, ChatService, ImageQuotaExceededError
from chatbot.services.providers.base import BaseImageProvider, BaseReplyProvider
from chatbot.services.providers.simulated import SimulatedImageProvider
from tests.conftest import EchoReplyProvider, FailingReplyProvider


class BrokenImageProvider(BaseImageProvider):
    async def generate(self, prompt):
        raise RuntimeError("no images today")


class SlowReplyProvider(BaseReplyProvider):
    async def reply(self, messages):
        await asyncio.sleep(0.05)
        return "ok"


class SlowImageProvider(BaseImageProvider):
    async def generate(self, prompt):
        await asyncio.sleep(0.05)
        return "https://images.example/slow.png"


@pytest.fixture
def service(store):
    return ChatService(store, EchoReplyProvider(), SimulatedImageProvider())


def test_initialize_conversation_adds_welcome(service, store):
    conv = service.initialize_conversation()
    assert len(conv.messages) == 1
    assert conv.messages[0].role == "assistant"
    assert conv.messages[0].content == settings.welcome_message
    assert store.get_conversations() == [conv]


def test_initialize_conversation_resumes_current(service):
    first = service.initialize_conversation()
    assert service.initialize_conversation() == first


def test_new_conversation_becomes_current(service, store):
    first = service.initialize_conversation()
    second = asyncio.run(service.new_conversation())
    assert second.id != first.id
    assert store.get_current_conversation() == second
    assert len(store.get_conversations()) == 2


def test_send_message_appends_user_and_reply(service, store):
    conv = asyncio.run(service.send_message("  Hi there  "))

    roles = [m.role for m in conv.messages]
    assert roles == ["assistant", "user", "assistant"]
    assert conv.messages[1].content == "Hi there"
    assert conv.messages[2].content == "Echo: Hi there"
    assert conv.updated_at >= conv.created_at
    assert store.get_current_conversation() == conv
    assert store.get_stats().total_messages == 3


def test_send_message_rejects_blank(service, store):
    with pytest.raises(ValueError):
        asyncio.run(service.send_message("   "))
    assert store.get_conversations() == []


def test_send_message_failure_appends_apology(store):
    service = ChatService(store, FailingReplyProvider(), SimulatedImageProvider())
    conv = asyncio.run(service.send_message("hello"))

    assert conv.messages[-1].role == "assistant"
    assert conv.messages[-1].content == APOLOGY_MESSAGE
    assert store.get_current_conversation().messages[-1].content == APOLOGY_MESSAGE


def test_generate_image_marks_message(service, store):
    conv = asyncio.run(service.generate_image("a red fox"))

    image = conv.messages[-1]
    assert image.is_image is True
    assert image.content == "Here is your image: a red fox"
    assert image.image_url.startswith(SimulatedImageProvider.base_url)
    assert store.get_today_image_count() == 1
    assert store.get_stats().total_generated_images == 1


def test_generate_image_quota(service, store):
    with patch.object(settings, "max_free_images_per_day", 2):
        asyncio.run(service.generate_image("one"))
        asyncio.run(service.generate_image("two"))
        with pytest.raises(ImageQuotaExceededError) as exc_info:
            asyncio.run(service.generate_image("three"))

    assert exc_info.value.used == 2
    assert exc_info.value.limit == 2
    assert store.get_stats().total_generated_images == 2


def test_generate_image_failure_appends_apology(store):
    service = ChatService(store, EchoReplyProvider(), BrokenImageProvider())
    conv = asyncio.run(service.generate_image("a fox"))
    assert conv.messages[-1].content == APOLOGY_MESSAGE
    assert not conv.messages[-1].is_image
    assert store.get_today_image_count() == 0


def test_overlapping_sends_keep_both_turns(store):
    service = ChatService(store, SlowReplyProvider(), SimulatedImageProvider())

    async def send_both():
        await asyncio.gather(service.send_message("first"), service.send_message("second"))

    asyncio.run(send_both())

    contents = [m.content for m in store.get_current_conversation().messages]
    assert contents == [settings.welcome_message, "first", "ok", "second", "ok"]
    assert store.get_stats().total_messages == 5


def test_overlapping_image_requests_respect_quota(store):
    service = ChatService(store, EchoReplyProvider(), SlowImageProvider())

    async def request_both():
        return await asyncio.gather(
            service.generate_image("one"), service.generate_image("two"), return_exceptions=True
        )

    with patch.object(settings, "max_free_images_per_day", 1):
        results = asyncio.run(request_both())

    assert sum(isinstance(r, ImageQuotaExceededError) for r in results) == 1
    assert store.get_today_image_count() == 1
