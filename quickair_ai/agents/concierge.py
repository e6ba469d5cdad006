# agents/concierge.py
"""
Concierge Agent (chat-facing)
One pass of the booking conversation pipeline:

1. Record the user message and resolve "it" / "the first one"
2. Analyze intent + entities with the session meta as context
3. Pick supporting content by intent (hotels, comparison,
   recommendations, canned answers, lexical search)
4. Update context memory, booking slots and the conversation step
5. Compose a reply (injected LLM callable, or a template fallback)
6. Record the reply and the turn

Uses:
- SessionManager for per-user state
- IntentService for NLU
- RAGService / TourService for offer content
- ValidationService for slot checks
"""

from typing import Dict, Any, Optional, List, Callable, Union

from loguru import logger

from ..interfaces.session_store import SIDE_BRANCH_STEPS, STEP_ORDER, SessionManager
from ..nlu.intent_service import IntentService
from ..retrieval.rag_service import RAGService, hotel_display_name, hotel_price
from ..retrieval.tour_service import TourService
from ..schemas.ai_schemas import (
    ChatMessage,
    ConciergeResponse,
    ConversationStep,
    Entities,
    Intent,
    IntentType,
    Language,
    MessageRole,
    RAGChunk,
)
from ..utils.ai_helpers import destination_code, destination_display_name, truncate_text
from ..utils.validation import ValidationService

GenerateFn = Callable[[List[Dict[str, str]]], str]

HISTORY_TURNS_FOR_LLM = 5
CHUNKS_IN_REPLY = 3


SYSTEM_PROMPT = """You are a friendly travel booking assistant for an Egyptian travel agency.
Your role is to:
1. Help travelers pick a destination, dates and a hotel offer
2. Answer questions using ONLY the offer information provided
3. Ask ONE clarifying question at a time when details are missing

Reply in the same language as the traveler (Arabic or English).
Quote prices exactly as they appear in the offer information."""


# Next question to ask, keyed by the step the conversation is on
STEP_PROMPTS = {
    ConversationStep.INITIAL.value: {
        "ar": "إلى أين تحب تسافر؟ لدينا عروض لشرم الشيخ والغردقة وإسطنبول وبالي وغيرها.",
        "en": "Where would you like to travel? We have offers for Sharm El Sheikh, Hurghada, Istanbul, Bali and more.",
    },
    ConversationStep.DESTINATION_SELECTED.value: {
        "ar": "ما هي تواريخ السفر المناسبة لك؟ (مثال: 15/11 إلى 20/11)",
        "en": "What are your travel dates? (e.g. 15/11 to 20/11)",
    },
    ConversationStep.DATES_SELECTED.value: {
        "ar": "كم عدد المسافرين؟",
        "en": "How many travelers?",
    },
    ConversationStep.TRAVELERS_SELECTED.value: {
        "ar": "ما هي ميزانيتك التقريبية للفرد؟",
        "en": "What is your approximate budget per person?",
    },
    ConversationStep.READY_FOR_OFFERS.value: {
        "ar": "أي فندق يعجبك؟",
        "en": "Which hotel do you like?",
    },
    ConversationStep.HOTEL_SELECTED.value: {
        "ar": "ما نظام الوجبات المفضل؟ (شامل، نصف إقامة، إفطار)",
        "en": "Which meal plan do you prefer? (all inclusive, half board, breakfast)",
    },
    ConversationStep.MEAL_SELECTED.value: {
        "ar": "ما نوع الغرفة؟ (فردية، مزدوجة، ثلاثية، عائلية)",
        "en": "Which room type? (single, double, triple, family)",
    },
    ConversationStep.ROOM_SELECTED.value: {
        "ar": "ممتاز! من فضلك أرسل اسمك ورقم هاتفك لتأكيد الحجز.",
        "en": "Great! Please send your name and phone number to confirm the booking.",
    },
}

GREETINGS = {
    "ar": "أهلاً بك! 👋",
    "en": "Hello! 👋",
}

NO_RESULTS = {
    "ar": "عذراً، لم أجد معلومات مطابقة. هل يمكنك توضيح طلبك؟",
    "en": "Sorry, I couldn't find matching information. Could you clarify your request?",
}

COMPARISON_HEADER = {
    "ar": "⚖️ **مقارنة الفنادق:**",
    "en": "⚖️ **Hotel comparison:**",
}


def _slot_filled(meta: Dict[str, Any], step: str) -> bool:
    """Whether the slot that unlocks `step` is present in meta"""
    if step == ConversationStep.DESTINATION_SELECTED.value:
        return bool(meta.get("last_dest"))
    if step == ConversationStep.DATES_SELECTED.value:
        return bool(meta.get("dates"))
    if step == ConversationStep.TRAVELERS_SELECTED.value:
        return bool(meta.get("travelers"))
    if step == ConversationStep.BUDGET_SELECTED.value:
        return meta.get("budget") is not None
    if step == ConversationStep.READY_FOR_OFFERS.value:
        return True
    if step == ConversationStep.HOTEL_SELECTED.value:
        return bool(meta.get("selected_hotel"))
    if step == ConversationStep.MEAL_SELECTED.value:
        return bool(meta.get("meal_plan"))
    if step == ConversationStep.ROOM_SELECTED.value:
        return bool(meta.get("room_type"))
    # contact_info / booking_confirmed are set by the booking layer
    return False


def advance_step(meta: Dict[str, Any]) -> str:
    """
    Furthest step on the linear flow whose slots are all filled, starting
    from the current step. Never moves backwards; side branches stay put.
    """
    current = meta.get("step") or ConversationStep.INITIAL.value
    if current in SIDE_BRANCH_STEPS or current not in STEP_ORDER:
        return current

    index = STEP_ORDER.index(current)
    while index + 1 < len(STEP_ORDER) and _slot_filled(meta, STEP_ORDER[index + 1]):
        index += 1
    return STEP_ORDER[index]


class ConciergeAgent:
    """
    Conversation pipeline for the booking chatbot.

    All collaborators are injected; the LLM is an optional callable
    generate(messages) -> str. Without it (or when it fails) replies are
    built from retrieved offer content.
    """

    def __init__(
        self,
        sessions: SessionManager,
        intent_service: IntentService,
        rag: RAGService,
        validation: Optional[ValidationService] = None,
        generate: Optional[GenerateFn] = None
    ):
        self.sessions = sessions
        self.intent_service = intent_service
        self.rag = rag
        self.tours = TourService(rag)
        self.validation = validation or ValidationService()
        self.generate = generate

        logger.info(f"ConciergeAgent initialized (llm={'on' if generate else 'off'})")

    # ============================================
    # Main entry point
    # ============================================

    def process_message(
        self,
        user_id: str,
        message: str,
        lang: Optional[Union[Language, str]] = None
    ) -> ConciergeResponse:
        """
        Process one user message and return the reply with everything the
        pipeline derived from it.
        """
        self.sessions.add_message(user_id, ChatMessage(role=MessageRole.USER, content=message))

        # Resolve references before analysis so a resolved hotel counts as
        # selected for backfill and the price_inquiry boost
        resolved = self._resolve_reference(user_id, message)
        if resolved:
            self.sessions.update_meta(user_id, {"selected_hotel": resolved})

        meta = self.sessions.get_meta(user_id)
        intent = self.intent_service.analyze_message(message, context=dict(meta))
        entities = intent.entities
        forced = getattr(lang, "value", lang)
        if forced in ("ar", "en"):
            language = Language(forced)
        else:
            # unsupported tags fall back to the detected language
            language = entities.language or Language.AR

        validation_errors = list(self.intent_service.validate_intent(intent).errors)
        slot_updates, slot_errors = self._slot_updates(entities, language)
        validation_errors.extend(slot_errors)

        dest_code = destination_code(entities.destination) if entities.destination else None
        chunks, hotels, answer = self._gather_content(message, intent, dest_code, language)

        self._update_context_memory(user_id, intent, dest_code, hotels, resolved)

        meta_updates = {"preferred_language": language.value, **slot_updates}
        if entities.destination:
            meta_updates["last_dest"] = entities.destination
        if entities.hotel_name:
            meta_updates["selected_hotel"] = entities.hotel_name
        meta = self.sessions.update_meta(user_id, meta_updates)

        step_changed = False
        current_step = meta.get("step") or ConversationStep.INITIAL.value
        new_step = advance_step(meta)
        if new_step != current_step:
            step_changed = self.sessions.set_step(user_id, new_step)
            logger.info(f"Step for {user_id}: {current_step} -> {new_step}")

        reply = self._compose_reply(user_id, message, intent, language, new_step, chunks, hotels, answer)

        self.sessions.add_message(user_id, ChatMessage(role=MessageRole.ASSISTANT, content=reply))
        self.sessions.add_conversation_turn(
            user_id,
            message,
            reply,
            intent=intent.type.value,
            entities=entities.model_dump(exclude_none=True, mode="json"),
        )

        return ConciergeResponse(
            user_id=user_id,
            reply=reply,
            language=language,
            intent=intent,
            chunks=chunks,
            hotels=hotels,
            answer=answer,
            resolved_reference=resolved,
            step=ConversationStep(new_step),
            step_changed=step_changed,
            validation_errors=validation_errors,
        )

    # ============================================
    # Pipeline stages
    # ============================================

    def _resolve_reference(self, user_id: str, message: str) -> Optional[str]:
        """Hotel name for "it" / ordinals / cheapest / most expensive"""
        resolved = self.sessions.resolve_implicit_reference(user_id, message)
        if resolved not in ("cheapest", "most_expensive"):
            return resolved

        memory = self.sessions.get_context_memory(user_id)
        shown = memory.get("last_shown_hotels") or []
        hotels = self.rag.compare_hotels(shown, memory.get("last_mentioned_destination"))
        priced = [h for h in hotels if hotel_price(h) is not None]
        if not priced:
            return None

        pick = min if resolved == "cheapest" else max
        return hotel_display_name(pick(priced, key=hotel_price))

    def _slot_updates(self, entities: Entities, lang: Language):
        """Booking slots to store from this message, plus validation errors"""
        updates: Dict[str, Any] = {}
        errors: List[str] = []

        if entities.dates and entities.dates.start:
            result = self.validation.validate_date(entities.dates.start, lang)
            if result.valid:
                updates["dates"] = entities.dates.model_dump(mode="json")
            else:
                errors.extend(result.errors)

        if entities.travelers is not None:
            result = self.validation.validate_travelers(entities.travelers, lang)
            if result.valid:
                updates["travelers"] = entities.travelers
            else:
                errors.extend(result.errors)

        # Budget is a number, or a {min, max, label} range
        if entities.budget is not None:
            updates["budget"] = entities.budget
        elif entities.price_range is not None:
            updates["budget"] = {
                "min": entities.price_range.min,
                "max": entities.price_range.max,
                "label": None,
            }

        if entities.stars is not None:
            updates["stars"] = entities.stars
        if entities.meal_plan:
            updates["meal_plan"] = entities.meal_plan
        if entities.room_type:
            updates["room_type"] = entities.room_type

        return updates, errors

    def _gather_content(self, message: str, intent: Intent, dest_code: Optional[str], lang: Language):
        """(chunks, hotels, canned answer) supporting the reply"""
        entities = intent.entities
        chunks: List[RAGChunk] = []
        hotels: List[Dict[str, Any]] = []
        answer: Optional[str] = None

        max_price = None
        if entities.price_range and entities.price_range.max:
            max_price = entities.price_range.max
        elif entities.budget:
            max_price = entities.budget

        if intent.type == IntentType.HOTEL_COMPARISON:
            hotels = self.rag.compare_hotels(entities.hotel_names or [], dest_code)

        elif intent.type == IntentType.RECOMMENDATION_REQUEST:
            hotels = self.rag.get_recommendations(
                {"destination": dest_code, "stars": entities.stars, "max_price": max_price},
                lang,
            )

        elif intent.type == IntentType.SEARCH_HOTELS and dest_code:
            hotels = self.rag.search_hotels(dest_code, {"min_rating": entities.stars, "max_price": max_price})

        elif intent.type == IntentType.GENERAL_QUESTION:
            answer = self.rag.answer_general_question(message, lang)

        if not hotels and not answer and intent.type != IntentType.GREETING:
            chunks = self.rag.smart_search(message, lang=lang).chunks

        return chunks, hotels, answer

    def _update_context_memory(
        self,
        user_id: str,
        intent: Intent,
        dest_code: Optional[str],
        hotels: List[Dict[str, Any]],
        resolved: Optional[str]
    ) -> None:
        entities = intent.entities
        updates: Dict[str, Any] = {}

        if dest_code:
            updates["last_mentioned_destination"] = dest_code

        hotel = resolved or entities.hotel_name
        if hotel:
            updates["last_mentioned_hotel"] = hotel

        if entities.price_range and entities.price_range.max:
            updates["last_mentioned_price"] = entities.price_range.max
        elif entities.budget:
            updates["last_mentioned_price"] = entities.budget

        if hotels:
            names = [hotel_display_name(h) for h in hotels]
            if intent.type == IntentType.HOTEL_COMPARISON:
                updates["last_compared_hotels"] = names
            updates["last_shown_hotels"] = names

        if updates:
            self.sessions.update_context_memory(user_id, updates)

    # ============================================
    # Reply composition
    # ============================================

    def _compose_reply(
        self,
        user_id: str,
        message: str,
        intent: Intent,
        lang: Language,
        step: str,
        chunks: List[RAGChunk],
        hotels: List[Dict[str, Any]],
        answer: Optional[str]
    ) -> str:
        if self.generate:
            messages = self._build_llm_messages(user_id, message, chunks, hotels, answer)
            try:
                reply = self.generate(messages)
                if reply:
                    return reply
                logger.warning("ConciergeAgent: LLM returned an empty reply, using fallback")
            except Exception as e:
                logger.error(f"ConciergeAgent: LLM error: {e}")

        return self._fallback_reply(user_id, intent, lang, step, chunks, hotels, answer)

    def _build_llm_messages(
        self,
        user_id: str,
        message: str,
        chunks: List[RAGChunk],
        hotels: List[Dict[str, Any]],
        answer: Optional[str]
    ) -> List[Dict[str, str]]:
        messages = [{"role": MessageRole.SYSTEM.value, "content": SYSTEM_PROMPT}]

        for turn in self.sessions.get_conversation_history(user_id, limit=HISTORY_TURNS_FOR_LLM):
            messages.append({"role": MessageRole.USER.value, "content": turn.user_message})
            messages.append({"role": MessageRole.ASSISTANT.value, "content": turn.bot_response})

        knowledge = [f"[{c.section}] {c.text}" for c in chunks]
        if hotels:
            knowledge.append(self.tours.format_hotels_list(hotels, Language.EN, limit=len(hotels)))
        if answer:
            knowledge.append(answer)
        if knowledge:
            messages.append({
                "role": MessageRole.SYSTEM.value,
                "content": "Offer information:\n" + "\n\n".join(knowledge),
            })

        messages.append({"role": MessageRole.USER.value, "content": message})
        return messages

    def _fallback_reply(
        self,
        user_id: str,
        intent: Intent,
        lang: Language,
        step: str,
        chunks: List[RAGChunk],
        hotels: List[Dict[str, Any]],
        answer: Optional[str]
    ) -> str:
        lang_key = lang.value
        parts: List[str] = []

        if intent.type == IntentType.GREETING:
            parts.append(GREETINGS[lang_key])

        if answer:
            parts.append(answer)

        if hotels:
            if intent.type == IntentType.HOTEL_COMPARISON:
                parts.append(COMPARISON_HEADER[lang_key])
            travelers = self.sessions.get_meta(user_id).get("travelers") or 1
            parts.append(self.tours.format_hotels_list(hotels, lang, travelers=travelers, limit=len(hotels)))
        elif chunks:
            for chunk in chunks[:CHUNKS_IN_REPLY]:
                dest = destination_display_name(chunk.destination, lang) if chunk.destination else ""
                heading = f"**{chunk.section}**" + (f" ({dest})" if dest else "")
                parts.append(f"{heading}\n{truncate_text(chunk.text, 400)}")

        if not parts:
            parts.append(NO_RESULTS[lang_key])

        prompt = STEP_PROMPTS.get(step)
        if prompt:
            parts.append(prompt[lang_key])

        return "\n\n".join(parts)
