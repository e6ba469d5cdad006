# api/__init__.py
"""
API Endpoints Package

Contains the FastAPI routers for the booking assistant:
- chat: conversation, message analysis, session inspection
- offers: destination list and localized offer details
"""

from typing import TYPE_CHECKING

# Lazy imports to avoid circular dependencies
if TYPE_CHECKING:
    from .chat import router as chat_router
    from .offers import router as offers_router

__all__ = [
    "chat_router",
    "offers_router"
]
