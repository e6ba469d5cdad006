# api/dependencies.py
"""
FastAPI dependencies
Services are built once in create_app() and kept on app.state
"""

from fastapi import Request

from ..agents.concierge import ConciergeAgent
from ..interfaces.session_store import SessionManager
from ..nlu.intent_service import IntentService
from ..retrieval.rag_service import RAGService


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_intent_service(request: Request) -> IntentService:
    return request.app.state.intent_service


def get_rag(request: Request) -> RAGService:
    return request.app.state.rag


def get_concierge(request: Request) -> ConciergeAgent:
    return request.app.state.concierge
