"""
Chat API Routes for Barista Bot.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..services import get_services
from llm.orchestrator import InboundMessage

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request / Response Models ─────────────────────────────────────

class ChatRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    display_name: str = Field(default="Guest", max_length=128)
    message: str = Field(..., min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    reply: str
    user_id: str
    query: str
    outcome: str
    slots: Dict[str, str] = {}
    missing_slots: List[str] = []
    order_complete: bool = False
    order_submitted: bool = False
    processing_time_ms: float


class TurnItem(BaseModel):
    role: str
    content: str


class SessionView(BaseModel):
    user_id: str
    display_name: str
    history: List[TurnItem]
    slots: Dict[str, str]
    delivered: bool
    created_at: str
    updated_at: str


# ── Endpoints ─────────────────────────────────────────────────────

@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """Run one message through the order-taking pipeline."""
    services = get_services()
    if not services.is_ready:
        raise HTTPException(status_code=503, detail="Service not ready")

    result = await services.pipeline.process(
        InboundMessage(
            user_id=request.user_id,
            display_name=request.display_name,
            text=request.message,
        )
    )
    return ChatResponse(**result.to_dict())


@router.get("/sessions/{user_id}", response_model=SessionView)
async def get_session(user_id: str):
    """Get a user's conversation and collected slots."""
    services = get_services()
    session = services.sessions.get(user_id) if services.is_ready else None
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    return SessionView(
        user_id=session.user_id,
        display_name=session.display_name,
        history=[TurnItem(role=t.role, content=t.content) for t in session.history],
        slots=session.slots,
        delivered=session.delivered,
        created_at=session.created_at.isoformat(),
        updated_at=session.updated_at.isoformat(),
    )


@router.delete("/sessions/{user_id}")
async def reset_session(user_id: str):
    """Reset a session so the user can place a new order."""
    services = get_services()
    if services.is_ready and await services.sessions.reset_serialized(user_id):
        return {"message": "Session reset", "user_id": user_id}
    raise HTTPException(status_code=404, detail="Session not found")


@router.get("/chat/stats")
async def get_chat_stats():
    """Get chat statistics."""
    services = get_services()
    if services.is_ready:
        return services.sessions.stats()
    return {"total_sessions": 0, "delivered_orders": 0, "total_turns": 0}
