# interfaces/session_store.py
"""
Session State Management for multi-turn booking conversations

Four stores are keyed by the same user id:
- messages: raw chat messages (unbounded, append-only)
- meta: booking slots and the current conversation step
- history: bounded log of user/bot turns (FIFO, default 10)
- context: short-term memory used to resolve "it" / "the first one"

There is no locking. At most one in-flight request per user id is
assumed; two concurrent update_meta calls for the same id are
last-write-wins on the shallow merge.
"""

import re
from datetime import datetime
from typing import Optional, Dict, Any, List, Union

import redis
from loguru import logger
from pydantic import BaseModel

from ..config import settings
from ..schemas.ai_schemas import ChatMessage, ConversationStep, ConversationTurn
from .kv_store import KeyValueStore, InMemoryKeyValueStore, RedisKeyValueStore


# ============================================
# Conversation flow
# ============================================

STEP_ORDER: List[str] = [
    ConversationStep.INITIAL.value,
    ConversationStep.DESTINATION_SELECTED.value,
    ConversationStep.DATES_SELECTED.value,
    ConversationStep.TRAVELERS_SELECTED.value,
    ConversationStep.BUDGET_SELECTED.value,
    ConversationStep.READY_FOR_OFFERS.value,
    ConversationStep.HOTEL_SELECTED.value,
    ConversationStep.MEAL_SELECTED.value,
    ConversationStep.ROOM_SELECTED.value,
    ConversationStep.CONTACT_INFO.value,
    ConversationStep.BOOKING_CONFIRMED.value,
]

SIDE_BRANCH_STEPS = frozenset({
    ConversationStep.BOOKING_MODIFICATION.value,
    ConversationStep.SUPPORT_CONTACT.value,
    ConversationStep.GENERAL_INQUIRY.value,
})


def next_step(step: Optional[str]) -> Optional[str]:
    """Next step on the linear flow; None at the end or from a side branch"""
    if step is None:
        step = ConversationStep.INITIAL.value
    step = getattr(step, "value", step)
    if step not in STEP_ORDER:
        return None
    index = STEP_ORDER.index(step)
    if index + 1 >= len(STEP_ORDER):
        return None
    return STEP_ORDER[index + 1]


# ============================================
# Implicit reference patterns
# ============================================

DEMONSTRATIVE_PATTERN = re.compile(r"\b(this|that|it)\b|\b(هذا|هذه|ده|دي|دا|ذلك|تلك)\b", re.IGNORECASE)
PRICE_OR_HOTEL_PATTERN = re.compile(r"(price|cost|hotel|سعر|السعر|بكام|كام|تكلفة|فندق|الفندق)", re.IGNORECASE)

ORDINAL_PATTERNS = [
    (0, re.compile(r"\b(first|1st)\b|\b(الأول|الاول|الأولى|الاولى|أول واحد|اول واحد)\b", re.IGNORECASE)),
    (1, re.compile(r"\b(second|2nd)\b|\b(الثاني|التاني|الثانية|التانية|تاني واحد)\b", re.IGNORECASE)),
    (2, re.compile(r"\b(third|3rd)\b|\b(الثالث|التالت|الثالثة|التالتة|تالت واحد)\b", re.IGNORECASE)),
]

CHEAPEST_PATTERN = re.compile(r"(cheapest|أرخص|ارخص|الأرخص|الارخص)", re.IGNORECASE)
MOST_EXPENSIVE_PATTERN = re.compile(r"(most expensive|أغلى|اغلى|الأغلى|الاغلى)", re.IGNORECASE)


def _empty_context_memory() -> Dict[str, Any]:
    return {
        "last_mentioned_hotel": None,
        "last_mentioned_destination": None,
        "last_mentioned_price": None,
        "last_shown_hotels": [],
        "last_compared_hotels": [],
        "implicit_references": {},
    }


class SessionManager:
    """
    Manages per-user conversation state for the booking chatbot.
    Every accessor creates an empty entry on first access.
    """

    def __init__(
        self,
        messages_store: Optional[KeyValueStore] = None,
        meta_store: Optional[KeyValueStore] = None,
        history_store: Optional[KeyValueStore] = None,
        context_store: Optional[KeyValueStore] = None,
        max_turns: Optional[int] = None
    ):
        # InMemoryKeyValueStore defines __len__, so compare against None
        self.messages = messages_store if messages_store is not None else InMemoryKeyValueStore()
        self.metadata = meta_store if meta_store is not None else InMemoryKeyValueStore()
        self.history = history_store if history_store is not None else InMemoryKeyValueStore()
        self.context = context_store if context_store is not None else InMemoryKeyValueStore()
        self.max_turns = max_turns or settings.MAX_CONVERSATION_TURNS

    # ------------------------------------------
    # Raw messages
    # ------------------------------------------

    def get_session(self, user_id: str) -> List[Dict[str, Any]]:
        """Get the message list for a user, creating it if needed"""
        session = self.messages.get(user_id)
        if session is None:
            session = []
            self.messages.set(user_id, session)
        return session

    def add_message(self, user_id: str, message: Union[ChatMessage, Dict[str, Any]]) -> None:
        """Append a message (no size bound)"""
        if isinstance(message, BaseModel):
            message = message.model_dump(mode="json")
        session = self.get_session(user_id)
        session.append(message)
        self.messages.set(user_id, session)

    def clear_session(self, user_id: str) -> None:
        self.messages.delete(user_id)

    def get_all_sessions(self) -> Dict[str, List[Dict[str, Any]]]:
        """Shallow copy of every message list, keyed by user id"""
        return {user_id: self.messages.get(user_id) for user_id in self.messages.keys()}

    def get_session_count(self) -> int:
        return len(self.messages.keys())

    # ------------------------------------------
    # Meta (booking slots + step)
    # ------------------------------------------

    def get_meta(self, user_id: str) -> Dict[str, Any]:
        meta = self.metadata.get(user_id)
        if meta is None:
            meta = {}
            self.metadata.set(user_id, meta)
        return meta

    def update_meta(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Shallow-merge updates into meta.

        Only keys present in updates are overwritten; nested values such as
        a budget dict are replaced, not merged. When updates carry a "step",
        "previous_step" is set to the step held before this call unless the
        caller supplies it.
        """
        current = self.get_meta(user_id)
        updates = dict(updates)

        if "step" in updates:
            updates["step"] = getattr(updates["step"], "value", updates["step"])
            if "previous_step" not in updates:
                updates["previous_step"] = current.get("step")

        merged = {**current, **updates}
        self.metadata.set(user_id, merged)
        return merged

    def set_step(self, user_id: str, step: Union[ConversationStep, str]) -> bool:
        """Set the conversation step. Returns True if the step actually changed."""
        meta = self.update_meta(user_id, {"step": step})
        return meta.get("previous_step") != meta.get("step")

    def clear_meta(self, user_id: str) -> None:
        self.metadata.delete(user_id)

    # ------------------------------------------
    # Bounded conversation history
    # ------------------------------------------

    def add_conversation_turn(
        self,
        user_id: str,
        user_message: str,
        bot_response: str,
        intent: Optional[str] = None,
        entities: Optional[Dict[str, Any]] = None
    ) -> None:
        """Append a turn, then trim to the last max_turns turns"""
        turns = self.history.get(user_id) or []
        turn = ConversationTurn(
            user_message=user_message,
            bot_response=bot_response,
            timestamp=datetime.utcnow().isoformat(),
            intent=getattr(intent, "value", intent),
            entities=entities,
        )
        turns.append(turn.model_dump(mode="json"))
        if len(turns) > self.max_turns:
            turns = turns[-self.max_turns:]
        self.history.set(user_id, turns)

    def get_conversation_history(self, user_id: str, limit: int = 5) -> List[ConversationTurn]:
        """Last `limit` turns, most recent last"""
        if limit <= 0:
            return []
        turns = self.history.get(user_id) or []
        return [ConversationTurn.model_validate(t) for t in turns[-limit:]]

    def get_full_conversation_history(self, user_id: str) -> List[ConversationTurn]:
        turns = self.history.get(user_id) or []
        return [ConversationTurn.model_validate(t) for t in turns]

    def clear_conversation_history(self, user_id: str) -> None:
        self.history.delete(user_id)

    # ------------------------------------------
    # Context memory
    # ------------------------------------------

    def get_context_memory(self, user_id: str) -> Dict[str, Any]:
        memory = self.context.get(user_id)
        if memory is None:
            memory = _empty_context_memory()
            self.context.set(user_id, memory)
        return memory

    def update_context_memory(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge, same contract as update_meta"""
        current = self.get_context_memory(user_id)
        merged = {**current, **updates}
        self.context.set(user_id, merged)
        return merged

    def add_implicit_reference(self, user_id: str, key: str, value: Any) -> None:
        memory = self.get_context_memory(user_id)
        references = dict(memory.get("implicit_references") or {})
        references[key] = value
        self.update_context_memory(user_id, {"implicit_references": references})

    def get_implicit_reference(self, user_id: str, key: str) -> Optional[Any]:
        memory = self.get_context_memory(user_id)
        return (memory.get("implicit_references") or {}).get(key)

    def resolve_implicit_reference(self, user_id: str, message: str) -> Optional[str]:
        """
        Best-effort pronoun / ordinal resolution against the most recent
        hotel list. "cheapest" and "most expensive" come back as the
        sentinels "cheapest" / "most_expensive" for the caller to resolve.
        """
        memory = self.get_context_memory(user_id)
        shown = memory.get("last_shown_hotels") or []
        text = message.lower()

        if DEMONSTRATIVE_PATTERN.search(text) and PRICE_OR_HOTEL_PATTERN.search(text):
            if memory.get("last_mentioned_hotel"):
                return memory["last_mentioned_hotel"]
            if shown:
                return shown[0]

        for index, pattern in ORDINAL_PATTERNS:
            if pattern.search(text):
                if index < len(shown):
                    return shown[index]
                return None

        if CHEAPEST_PATTERN.search(text):
            return "cheapest"
        if MOST_EXPENSIVE_PATTERN.search(text):
            return "most_expensive"

        return None

    def clear_context_memory(self, user_id: str) -> None:
        self.context.delete(user_id)

    # ------------------------------------------
    # Teardown
    # ------------------------------------------

    def clear_all_user_data(self, user_id: str) -> None:
        """Remove the user from all four stores"""
        self.clear_session(user_id)
        self.clear_meta(user_id)
        self.clear_conversation_history(user_id)
        self.clear_context_memory(user_id)
        logger.info(f"Cleared all data for user: {user_id}")


def create_session_manager(config=None) -> SessionManager:
    """Build a SessionManager on the configured backend"""
    config = config or settings

    if config.SESSION_BACKEND == "redis":
        client = redis.Redis.from_url(config.redis_url, decode_responses=True)
        stores = {
            name: RedisKeyValueStore(
                namespace=name,
                client=client,
                ttl_seconds=config.session_ttl_seconds
            )
            for name in ("session", "meta", "history", "context")
        }
        logger.info(f"SessionManager using Redis at {config.redis_url}")
        return SessionManager(
            messages_store=stores["session"],
            meta_store=stores["meta"],
            history_store=stores["history"],
            context_store=stores["context"],
            max_turns=config.MAX_CONVERSATION_TURNS
        )

    logger.info("SessionManager using in-memory store")
    return SessionManager(max_turns=config.MAX_CONVERSATION_TURNS)
