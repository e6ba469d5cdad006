"""
Pydantic Schemas Package

Contains all Pydantic v2 models for:
- NLU results (intents, entities)
- Retrieval chunks
- Session turns and validation results
"""

from .ai_schemas import (
    # Enums
    Language, MessageRole, IntentType, ConversationStep,
    # Messages
    ChatMessage, ConversationTurn,
    # NLU
    PriceRange, DateRange, Entities, Intent, IntentValidation,
    # Retrieval
    ChunkMetadata, RAGChunk, RAGResult,
    # Validation
    ValidationResult,
    # Pipeline
    ConciergeResponse,
)

__all__ = [
    # Enums
    "Language", "MessageRole", "IntentType", "ConversationStep",
    # Messages
    "ChatMessage", "ConversationTurn",
    # NLU
    "PriceRange", "DateRange", "Entities", "Intent", "IntentValidation",
    # Retrieval
    "ChunkMetadata", "RAGChunk", "RAGResult",
    # Validation
    "ValidationResult",
    # Pipeline
    "ConciergeResponse",
]
