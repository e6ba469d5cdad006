# nlu/intent_service.py
"""
Intent Service
Rule-based intent classification for the booking chatbot.

Each intent is a data record {type, patterns, required_entities, boost}.
Scoring per intent:
- +0.5 for every pattern that matches
- +0.3 if all required entities are present
- -0.2 if some required entity is missing and the score is already > 0
- + contextual boost (e.g. price_inquiry while a hotel is selected)
The first intent (catalog order) to reach the maximum wins. Confidence is
min(max_score, 1.0); below 0.3 the type is forced to "unknown".
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Callable, Tuple

from loguru import logger

from ..schemas.ai_schemas import Entities, Intent, IntentType, IntentValidation, Language
from .entity_extractor import EntityExtractor

UNKNOWN_THRESHOLD = 0.3
ARABIC_PATTERN = re.compile(r"[؀-ۿ]")


@dataclass(frozen=True)
class IntentRule:
    type: IntentType
    patterns: Tuple[re.Pattern, ...]
    required_entities: Tuple[str, ...] = field(default_factory=tuple)
    contextual_boost: Optional[Callable[[Dict[str, Any]], float]] = None


def _rx(*patterns: str) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


INTENT_CATALOG: Tuple[IntentRule, ...] = (
    IntentRule(
        type=IntentType.GREETING,
        patterns=_rx(r"^(مرحب|هلا|اهلا|السلام|صباح|مساء|hello|hi|hey|good morning|good evening)"),
    ),
    IntentRule(
        type=IntentType.SEARCH_HOTELS,
        patterns=_rx(
            r"(عايز|ابحث|ابغى|اريد|بدي|looking for|search|find|show me).*(فندق|فنادق|hotel)",
            r"(فندق|فنادق|hotel).*(في|at|in)",
            r"عرض.*الفنادق",
        ),
    ),
    IntentRule(
        type=IntentType.PRICE_INQUIRY,
        patterns=_rx(
            r"(كام|كم|بكام|بكم|سعر|تكلفة|أسعار|how much|price|cost)",
            r"(الأسعار|prices|pricing)",
        ),
        contextual_boost=lambda ctx: 0.3 if ctx.get("selected_hotel") else 0.0,
    ),
    IntentRule(
        type=IntentType.HOTEL_COMPARISON,
        patterns=_rx(r"(قارن|مقارنة|compare|vs|versus|الفرق بين)"),
        required_entities=("hotel_names",),
    ),
    IntentRule(
        type=IntentType.BOOKING_REQUEST,
        patterns=_rx(r"(احجز|حجز|book|reserve|reservation|confirm)"),
    ),
    IntentRule(
        type=IntentType.LOCATION_INQUIRY,
        patterns=_rx(r"(فين|وين|where|موقع|مكان|location|area)"),
    ),
    IntentRule(
        type=IntentType.AMENITIES_INQUIRY,
        patterns=_rx(
            r"(مرافق|خدمات|facilities|amenities|services)",
            r"(حمام سباحة|pool|شاطئ|beach|مطعم|restaurant)",
        ),
    ),
    IntentRule(
        type=IntentType.HELP_REQUEST,
        patterns=_rx(r"(مساعدة|ساعد|help|assist|support)"),
    ),
    IntentRule(
        type=IntentType.DATE_CHANGE,
        patterns=_rx(
            r"(غير|تغيير|change|modify).*(التاريخ|الموعد|date)",
            r"(بدل|instead).*(التاريخ|date)",
        ),
    ),
    IntentRule(
        type=IntentType.BUDGET_INQUIRY,
        patterns=_rx(r"(ميزانية|budget|في حدود|within|maximum|max)"),
    ),
    IntentRule(
        type=IntentType.RECOMMENDATION_REQUEST,
        patterns=_rx(r"(اقترح|انصح|recommend|suggest|best|أفضل|احسن)"),
    ),
    IntentRule(
        type=IntentType.GENERAL_QUESTION,
        patterns=_rx(r"(ايه|شو|what|which|when|متى|كيف|how)"),
    ),
)


SUGGESTIONS: Dict[IntentType, Dict[str, List[str]]] = {
    IntentType.GREETING: {
        "ar": ["ابحث عن فندق", "عرض العروض المتاحة", "أفضل الفنادق"],
        "en": ["Search for hotels", "Show available offers", "Best hotels"],
    },
    IntentType.SEARCH_HOTELS: {
        "ar": ["فنادق 5 نجوم", "فنادق شرم الشيخ", "أرخص الأسعار"],
        "en": ["5-star hotels", "Sharm El Sheikh hotels", "Cheapest prices"],
    },
    IntentType.PRICE_INQUIRY: {
        "ar": ["مقارنة الأسعار", "أسعار نوفمبر", "عروض خاصة"],
        "en": ["Compare prices", "November prices", "Special offers"],
    },
    IntentType.HOTEL_COMPARISON: {
        "ar": ["تفاصيل الفنادق", "الفروقات بين الفنادق", "أيهما أفضل"],
        "en": ["Hotel details", "Differences", "Which is better"],
    },
    IntentType.BOOKING_REQUEST: {
        "ar": ["تأكيد الحجز", "تفاصيل التواصل", "طرق الدفع"],
        "en": ["Confirm booking", "Contact details", "Payment methods"],
    },
    IntentType.LOCATION_INQUIRY: {
        "ar": ["الموقع على الخريطة", "المسافة من المطار", "معالم قريبة"],
        "en": ["Location on map", "Distance from airport", "Nearby landmarks"],
    },
    IntentType.AMENITIES_INQUIRY: {
        "ar": ["المرافق المتاحة", "الخدمات الإضافية", "أنشطة الفندق"],
        "en": ["Available facilities", "Extra services", "Hotel activities"],
    },
    IntentType.HELP_REQUEST: {
        "ar": ["كيف أحجز؟", "ما هي الخطوات؟", "تحدث مع موظف"],
        "en": ["How to book?", "What are the steps?", "Talk to agent"],
    },
    IntentType.DATE_CHANGE: {
        "ar": ["شهر نوفمبر", "شهر ديسمبر", "عطلة نهاية الأسبوع"],
        "en": ["November", "December", "Weekend getaway"],
    },
    IntentType.BUDGET_INQUIRY: {
        "ar": ["فنادق اقتصادية", "فنادق فاخرة", "متوسطة السعر"],
        "en": ["Budget hotels", "Luxury hotels", "Mid-range"],
    },
    IntentType.RECOMMENDATION_REQUEST: {
        "ar": ["أفضل فندق للعائلات", "فنادق رومانسية", "فنادق الشباب"],
        "en": ["Best for families", "Romantic hotels", "Youth hotels"],
    },
    IntentType.GENERAL_QUESTION: {
        "ar": ["معلومات السفر", "الطقس", "التأشيرة"],
        "en": ["Travel info", "Weather", "Visa"],
    },
    IntentType.UNKNOWN: {
        "ar": ["ابحث عن فندق", "اعرض الأسعار", "احتاج مساعدة"],
        "en": ["Search hotels", "Show prices", "Need help"],
    },
}


def detect_language(message: str) -> Language:
    """Arabic if the message contains any Arabic code point"""
    return Language.AR if ARABIC_PATTERN.search(message) else Language.EN


def classify(
    message: str,
    entities: Entities,
    context: Optional[Dict[str, Any]] = None,
    catalog: Tuple[IntentRule, ...] = INTENT_CATALOG
) -> Tuple[IntentType, float]:
    """Greedy independent scoring over the catalog (see module docstring)"""
    max_score = 0.0
    detected = IntentType.UNKNOWN

    for rule in catalog:
        score = 0.0

        for pattern in rule.patterns:
            if pattern.search(message):
                score += 0.5

        if rule.required_entities:
            if all(entities.has(name) for name in rule.required_entities):
                score += 0.3
            elif score > 0:
                score -= 0.2

        if rule.contextual_boost and context:
            score += rule.contextual_boost(context)

        # Strictly greater: ties keep the earlier intent
        if score > max_score:
            max_score = score
            detected = rule.type

    confidence = min(max_score, 1.0)
    if confidence < UNKNOWN_THRESHOLD:
        return IntentType.UNKNOWN, confidence
    return detected, confidence


def generate_suggestions(intent_type: IntentType, language: Language) -> List[str]:
    table = SUGGESTIONS.get(intent_type) or SUGGESTIONS[IntentType.UNKNOWN]
    lang = getattr(language, "value", language)
    return list(table.get(lang) or SUGGESTIONS[IntentType.UNKNOWN]["en"])


class IntentService:
    """
    Facade combining entity extraction, intent classification and
    suggestions. Holds no per-request state; one shared instance is safe.
    """

    def __init__(self, extractor: Optional[EntityExtractor] = None):
        self.extractor = extractor or EntityExtractor()

    def analyze_message(self, message: str, context: Optional[Dict[str, Any]] = None) -> Intent:
        """
        Analyze a user message

        Args:
            message: Raw user message
            context: Session meta used for entity backfill and boosts

        Returns:
            Intent with type, confidence, entities and suggestions
        """
        normalized = message.lower().strip()
        language = detect_language(message)

        entities = self.extractor.extract(normalized, context)
        entities.language = language

        intent_type, confidence = classify(normalized, entities, context)
        suggestions = generate_suggestions(intent_type, language)

        logger.info(
            f"Detected: {intent_type.value} ({confidence * 100:.0f}%) "
            f"entities={entities.model_dump(exclude_none=True, mode='json')}"
        )

        return Intent(
            type=intent_type,
            confidence=confidence,
            entities=entities,
            suggestions=suggestions,
        )

    def validate_intent(self, intent: Intent) -> IntentValidation:
        """Advisory checks only, never blocks the conversation"""
        errors: List[str] = []

        if intent.type == IntentType.HOTEL_COMPARISON:
            if not intent.entities.hotel_names or len(intent.entities.hotel_names) < 2:
                errors.append("Hotel comparison requires at least 2 hotel names")

        elif intent.type == IntentType.BOOKING_REQUEST:
            if not intent.entities.hotel_name and not intent.entities.destination:
                errors.append("Booking requires hotel name or destination")

        return IntentValidation(valid=not errors, errors=errors)
