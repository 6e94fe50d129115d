from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from chatbot.core.config import settings
from chatbot.services.chat import ChatService, ImageQuotaExceededError
from chatbot.services.store import ConversationStore, get_store

router = APIRouter()


class MessageCreate(BaseModel):
    content: str


class ImageCreate(BaseModel):
    prompt: str


def get_chat_service(store: ConversationStore = Depends(get_store)) -> ChatService:
    return ChatService(store)


@router.get("/config")
async def widget_config():
    """Public settings the widget needs to render."""
    return {
        "appName": settings.app_name,
        "appVersion": settings.app_version,
        "welcomeMessage": settings.welcome_message,
        "maxFreeImagesPerDay": settings.max_free_images_per_day,
    }


@router.get("/current")
async def current_conversation(service: ChatService = Depends(get_chat_service)):
    return service.initialize_conversation().dump()


@router.post("/new")
async def new_conversation(service: ChatService = Depends(get_chat_service)):
    return (await service.new_conversation()).dump()


@router.post("/messages")
async def send_message(body: MessageCreate, service: ChatService = Depends(get_chat_service)):
    try:
        conversation = await service.send_message(body.content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return conversation.dump()


@router.post("/images")
async def generate_image(body: ImageCreate, service: ChatService = Depends(get_chat_service)):
    try:
        conversation = await service.generate_image(body.prompt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImageQuotaExceededError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return conversation.dump()
