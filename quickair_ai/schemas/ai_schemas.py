# schemas/ai_schemas.py
"""
Pydantic v2 schemas for the booking chatbot core
Covers NLU results, retrieval chunks, session turns and validation results
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# ============================================
# Enums
# ============================================

class Language(str, Enum):
    AR = "ar"
    EN = "en"


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class IntentType(str, Enum):
    GREETING = "greeting"
    SEARCH_HOTELS = "search_hotels"
    PRICE_INQUIRY = "price_inquiry"
    HOTEL_COMPARISON = "hotel_comparison"
    BOOKING_REQUEST = "booking_request"
    LOCATION_INQUIRY = "location_inquiry"
    AMENITIES_INQUIRY = "amenities_inquiry"
    HELP_REQUEST = "help_request"
    DATE_CHANGE = "date_change"
    BUDGET_INQUIRY = "budget_inquiry"
    RECOMMENDATION_REQUEST = "recommendation_request"
    GENERAL_QUESTION = "general_question"
    UNKNOWN = "unknown"


class ConversationStep(str, Enum):
    INITIAL = "initial"
    DESTINATION_SELECTED = "destination_selected"
    DATES_SELECTED = "dates_selected"
    TRAVELERS_SELECTED = "travelers_selected"
    BUDGET_SELECTED = "budget_selected"
    READY_FOR_OFFERS = "ready_for_offers"
    HOTEL_SELECTED = "hotel_selected"
    MEAL_SELECTED = "meal_selected"
    ROOM_SELECTED = "room_selected"
    CONTACT_INFO = "contact_info"
    BOOKING_CONFIRMED = "booking_confirmed"
    # Side branches, reachable from any step
    BOOKING_MODIFICATION = "booking_modification"
    SUPPORT_CONTACT = "support_contact"
    GENERAL_INQUIRY = "general_inquiry"


# ============================================
# Messages & Turns
# ============================================

class ChatMessage(BaseModel):
    """Single raw message in a session"""
    role: MessageRole
    content: str


class ConversationTurn(BaseModel):
    """One user/bot exchange kept in the bounded history"""
    user_message: str
    bot_response: str
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    intent: Optional[str] = None
    entities: Optional[Dict[str, Any]] = None


# ============================================
# NLU (Intent & Entities)
# ============================================

class PriceRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class DateRange(BaseModel):
    start: Optional[str] = None  # "15/11" or an English month name
    end: Optional[str] = None


class Entities(BaseModel):
    """Optional-field bag of values extracted from a message"""
    destination: Optional[str] = None
    hotel_name: Optional[str] = None
    hotel_names: Optional[List[str]] = None
    stars: Optional[int] = None
    price_range: Optional[PriceRange] = None
    dates: Optional[DateRange] = None
    travelers: Optional[int] = None
    budget: Optional[float] = None
    meal_plan: Optional[str] = None   # AI / FB / HB / BB
    room_type: Optional[str] = None   # single / double / triple / family
    amenities: Optional[List[str]] = None
    language: Optional[Language] = None

    def has(self, field_name: str) -> bool:
        return getattr(self, field_name, None) is not None


class Intent(BaseModel):
    """Classified purpose of a user message"""
    type: IntentType
    confidence: float = Field(..., ge=0, le=1)
    entities: Entities = Field(default_factory=Entities)
    suggestions: List[str] = Field(default_factory=list)


class IntentValidation(BaseModel):
    """Advisory sanity check on an intent"""
    valid: bool
    errors: List[str] = Field(default_factory=list)


# ============================================
# Retrieval
# ============================================

class ChunkMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str  # hotels, tours, visa, includes, excludes, general
    hotels: Optional[List[Dict[str, Any]]] = None
    tours: Optional[List[Dict[str, Any]]] = None


class RAGChunk(BaseModel):
    """One retrievable unit of offer text"""
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    destination: Optional[str] = None
    section: Optional[str] = None
    lang: Language
    title: Optional[str] = None
    text: str
    metadata: Optional[ChunkMetadata] = None


class RAGResult(BaseModel):
    chunks: List[RAGChunk] = Field(default_factory=list)


# ============================================
# Validation
# ============================================

class ValidationResult(BaseModel):
    """Outcome of a pure validation helper"""
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    corrected_value: Optional[Any] = None


# ============================================
# Concierge pipeline
# ============================================

class ConciergeResponse(BaseModel):
    """Result of one pass through the conversation pipeline"""
    user_id: str
    reply: str
    language: Language
    intent: Intent
    chunks: List[RAGChunk] = Field(default_factory=list)
    hotels: List[Dict[str, Any]] = Field(default_factory=list)
    answer: Optional[str] = None
    resolved_reference: Optional[str] = None
    step: Optional[ConversationStep] = None
    step_changed: bool = False
    validation_errors: List[str] = Field(default_factory=list)
