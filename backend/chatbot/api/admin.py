"""Admin dashboard API - login, stats and JSON export."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from chatbot.core.config import settings
from chatbot.models.chat import AdminSession
from chatbot.services.admin import AdminAuth
from chatbot.services.store import ConversationStore, get_store

router = APIRouter()
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    password: str


def get_admin_auth(store: ConversationStore = Depends(get_store)) -> AdminAuth:
    return AdminAuth(store)


def require_admin(auth: AdminAuth = Depends(get_admin_auth)) -> AdminSession:
    session = auth.current_session()
    if session is None:
        raise HTTPException(status_code=401, detail="Admin login required")
    return session


@router.post("/login")
async def login(body: LoginRequest, auth: AdminAuth = Depends(get_admin_auth)):
    session = auth.login(body.password)
    if session is None:
        raise HTTPException(status_code=401, detail="Incorrect password. Please try again.")
    return session.dump()


@router.post("/logout")
async def logout(auth: AdminAuth = Depends(get_admin_auth)):
    auth.logout()
    return {"status": "logged_out"}


@router.get("/session")
async def get_session_status(auth: AdminAuth = Depends(get_admin_auth)):
    session = auth.current_session()
    return {
        "authenticated": session is not None,
        "loginTime": session.login_time if session else None,
    }


@router.get("/stats", dependencies=[Depends(require_admin)])
async def get_stats(store: ConversationStore = Depends(get_store)):
    stats = store.get_stats().dump()
    stats["maxFreeImagesPerDay"] = settings.max_free_images_per_day
    return stats


@router.get("/export", dependencies=[Depends(require_admin)])
async def export_conversations(store: ConversationStore = Depends(get_store)):
    """Download every conversation plus a stats snapshot as a dated JSON file."""
    try:
        body = store.export_conversations_as_json()
    except Exception:
        logger.exception("Conversation export failed")
        raise HTTPException(status_code=500, detail="Failed to export conversations.")

    date_str = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    filename = f"{settings.export_file_prefix}_conversations_{date_str}.json"
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
