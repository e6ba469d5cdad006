# api/chat.py
"""
Chat API Endpoint
Conversational interface for the booking assistant.

- POST /api/chat/message: full pipeline (NLU, retrieval, session update)
- POST /api/chat/analyze: intent + entities only, no state change
- GET/DELETE /api/chat/sessions/{user_id}: inspect or wipe a session
"""

from datetime import datetime
from typing import Optional, List, Dict, Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from loguru import logger

from ..agents.concierge import ConciergeAgent
from ..interfaces.session_store import SessionManager
from ..nlu.intent_service import IntentService
from ..schemas.ai_schemas import ConversationTurn, Intent
from .dependencies import get_concierge, get_intent_service, get_sessions


router = APIRouter(prefix="/api/chat", tags=["chat"])


# ============================================
# Request/Response Models
# ============================================

class ChatRequest(BaseModel):
    """Chat request model"""
    message: str = Field(..., min_length=1, max_length=2000, description="User's message")
    user_id: str = Field(..., min_length=1, description="Opaque user identifier")
    lang: Optional[Literal["ar", "en"]] = Field(None, description="Force reply language")


class ChatResponse(BaseModel):
    """Chat response model"""
    reply: str
    user_id: str
    language: str
    intent: str
    confidence: float = Field(..., ge=0, le=1)
    suggestions: List[str] = Field(default_factory=list)
    step: Optional[str] = None
    step_changed: bool = False
    hotels: List[Dict[str, Any]] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list, description="Chunk ids used for the reply")
    resolved_reference: Optional[str] = None
    validation_errors: List[str] = Field(default_factory=list)
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class AnalyzeRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    user_id: Optional[str] = Field(None, description="Use this session's meta as context")
    context: Dict[str, Any] = Field(default_factory=dict, description="Extra context (overrides session meta)")


class AnalyzeResponse(BaseModel):
    intent: Intent
    valid: bool
    errors: List[str] = Field(default_factory=list)


class SessionView(BaseModel):
    """Everything stored for one user"""
    user_id: str
    messages: List[Dict[str, Any]]
    meta: Dict[str, Any]
    context_memory: Dict[str, Any]
    history: List[ConversationTurn]


# ============================================
# API Endpoints
# ============================================

@router.post("/message", response_model=ChatResponse)
async def chat(request: ChatRequest, concierge: ConciergeAgent = Depends(get_concierge)):
    """
    Send a message to the booking assistant.

    Example messages:
    - "عايز فندق في شرم الشيخ"
    - "compare hilton vs sheraton"
    - "كام سعر الأول؟"
    """
    logger.info(f"Chat request: user={request.user_id}, message={request.message[:50]}")

    result = concierge.process_message(request.user_id, request.message, lang=request.lang)

    return ChatResponse(
        reply=result.reply,
        user_id=result.user_id,
        language=result.language.value,
        intent=result.intent.type.value,
        confidence=result.intent.confidence,
        suggestions=result.intent.suggestions,
        step=result.step.value if result.step else None,
        step_changed=result.step_changed,
        hotels=result.hotels,
        sources=[chunk.id for chunk in result.chunks],
        resolved_reference=result.resolved_reference,
        validation_errors=result.validation_errors,
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    request: AnalyzeRequest,
    intent_service: IntentService = Depends(get_intent_service),
    sessions: SessionManager = Depends(get_sessions)
):
    """Classify a message without touching the conversation"""
    context: Dict[str, Any] = {}
    if request.user_id:
        context.update(sessions.get_meta(request.user_id))
    context.update(request.context)

    intent = intent_service.analyze_message(request.message, context or None)
    validation = intent_service.validate_intent(intent)

    return AnalyzeResponse(intent=intent, valid=validation.valid, errors=validation.errors)


@router.get("/sessions")
async def session_count(sessions: SessionManager = Depends(get_sessions)):
    return {"count": sessions.get_session_count()}


@router.get("/sessions/{user_id}", response_model=SessionView)
async def get_session(user_id: str, sessions: SessionManager = Depends(get_sessions)):
    """Messages, booking slots, context memory and recent turns for a user"""
    return SessionView(
        user_id=user_id,
        messages=list(sessions.get_session(user_id)),
        meta=dict(sessions.get_meta(user_id)),
        context_memory=dict(sessions.get_context_memory(user_id)),
        history=sessions.get_full_conversation_history(user_id),
    )


@router.delete("/sessions/{user_id}")
async def clear_session(user_id: str, sessions: SessionManager = Depends(get_sessions)):
    """Remove the user from every store"""
    sessions.clear_all_user_data(user_id)
    return {
        "status": "cleared",
        "user_id": user_id,
        "timestamp": datetime.utcnow().isoformat()
    }
