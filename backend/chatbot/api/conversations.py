"""Admin REST API for browsing and bulk-deleting conversation history."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from chatbot.api.admin import require_admin
from chatbot.services.store import ConversationStore, get_store

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


@router.get("/")
async def list_conversations(store: ConversationStore = Depends(get_store)):
    return [c.dump() for c in store.get_conversations()]


@router.get("/{conversation_id}")
async def get_conversation(conversation_id: str, store: ConversationStore = Depends(get_store)):
    for conv in store.get_conversations():
        if conv.id == conversation_id:
            return conv.dump()
    logger.debug(f"Conversation {conversation_id} not found")
    raise HTTPException(status_code=404, detail="Conversation not found")


@router.delete("/")
async def delete_all_conversations(store: ConversationStore = Depends(get_store)):
    store.delete_all_conversations()
    return {"status": "deleted"}
