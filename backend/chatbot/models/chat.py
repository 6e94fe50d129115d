"""Conversation, message, stats and admin session models.

Stored and served in the widget's camelCase JSON shape (``createdAt``,
``isImage``, ``loginTime`` ...); Python code uses the snake_case attributes.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        """Return the persisted (camelCase) representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Message(CamelModel):
    id: str
    content: str
    role: Literal["user", "assistant"]
    timestamp: int  # epoch millis
    is_image: Optional[bool] = None
    image_url: Optional[str] = None


class Conversation(CamelModel):
    id: str
    messages: list[Message] = []
    created_at: int
    updated_at: int


class ChatStats(CamelModel):
    total_messages: int = 0
    total_conversations: int = 0
    total_generated_images: int = 0
    total_visitors: int = 0
    images_generated_today: int = 0
    last_image_gen_date: str = ""


class AdminSession(CamelModel):
    is_authenticated: bool
    login_time: int  # epoch millis
