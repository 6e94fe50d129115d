from fastapi import APIRouter, Depends

from chatbot.services.store import ConversationStore, get_store

router = APIRouter()


@router.post("/track")
async def track_visitor(store: ConversationStore = Depends(get_store)):
    """Called by the widget on load."""
    return {"totalVisitors": store.initialize_visitor_tracking()}
