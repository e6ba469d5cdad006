"""
Test suites for per-user conversation state.

Suite 1: TestMessages          – raw message list, live reference, counts
Suite 2: TestMeta              – shallow merge, step / previous_step
Suite 3: TestConversationFlow  – linear step order and side branches
Suite 4: TestHistory           – bounded FIFO history
Suite 5: TestContextMemory     – context memory and implicit references
Suite 6: TestTeardown          – clearing one store vs all stores
Suite 7: TestIsolation         – users never see each other's state
"""

from unittest.mock import MagicMock

import pytest

from quickair_ai.interfaces.kv_store import InMemoryKeyValueStore
from quickair_ai.interfaces.session_store import (
    STEP_ORDER,
    SessionManager,
    create_session_manager,
    next_step,
)
from quickair_ai.schemas.ai_schemas import ChatMessage, ConversationStep, MessageRole


# ════════════════════════════════════════════════════════════
# Suite 1: Messages
# ════════════════════════════════════════════════════════════

class TestMessages:

    def test_get_session_creates_empty_list(self, sessions):
        assert sessions.get_session("u1") == []
        assert sessions.get_session_count() == 1

    def test_get_session_returns_live_list(self, sessions):
        live = sessions.get_session("u1")
        sessions.add_message("u1", {"role": "user", "content": "hi"})
        assert live == [{"role": "user", "content": "hi"}]

    def test_add_message_accepts_model(self, sessions):
        sessions.add_message("u1", ChatMessage(role=MessageRole.ASSISTANT, content="hello"))
        assert sessions.get_session("u1") == [{"role": "assistant", "content": "hello"}]

    def test_messages_are_unbounded(self, sessions):
        for i in range(50):
            sessions.add_message("u1", {"role": "user", "content": str(i)})
        assert len(sessions.get_session("u1")) == 50

    def test_get_all_sessions(self, sessions):
        sessions.add_message("a", {"role": "user", "content": "1"})
        sessions.add_message("b", {"role": "user", "content": "2"})
        all_sessions = sessions.get_all_sessions()
        assert set(all_sessions) == {"a", "b"}
        assert sessions.get_session_count() == 2

    def test_injected_empty_store_is_used(self):
        store = InMemoryKeyValueStore()
        manager = SessionManager(messages_store=store)
        manager.add_message("u1", {"role": "user", "content": "x"})
        assert store.get("u1") == [{"role": "user", "content": "x"}]


# ════════════════════════════════════════════════════════════
# Suite 2: Meta
# ════════════════════════════════════════════════════════════

class TestMeta:

    def test_get_meta_creates_empty(self, sessions):
        assert sessions.get_meta("u1") == {}

    def test_update_meta_preserves_other_fields(self, sessions):
        sessions.update_meta("u1", {"last_dest": "Hurghada", "travelers": 2})
        sessions.update_meta("u1", {"step": "dates_selected"})
        meta = sessions.get_meta("u1")
        assert meta["last_dest"] == "Hurghada"
        assert meta["travelers"] == 2
        assert meta["step"] == "dates_selected"

    def test_nested_values_are_replaced_not_merged(self, sessions):
        sessions.update_meta("u1", {"budget": {"min": 1000, "max": 5000, "label": "mid"}})
        sessions.update_meta("u1", {"budget": {"max": 9000}})
        assert sessions.get_meta("u1")["budget"] == {"max": 9000}

    def test_budget_may_be_number_or_range(self, sessions):
        sessions.update_meta("u1", {"budget": 7000})
        assert sessions.get_meta("u1")["budget"] == 7000
        sessions.update_meta("u1", {"budget": {"min": None, "max": 5000, "label": None}})
        assert sessions.get_meta("u1")["budget"]["max"] == 5000

    def test_previous_step_records_prior_value(self, sessions):
        sessions.update_meta("u1", {"step": ConversationStep.INITIAL})
        sessions.update_meta("u1", {"step": ConversationStep.DESTINATION_SELECTED})
        meta = sessions.get_meta("u1")
        assert meta["step"] == "destination_selected"
        assert meta["previous_step"] == "initial"

    def test_previous_step_untouched_without_step(self, sessions):
        sessions.update_meta("u1", {"step": "initial"})
        sessions.update_meta("u1", {"step": "destination_selected"})
        sessions.update_meta("u1", {"travelers": 3})
        assert sessions.get_meta("u1")["previous_step"] == "initial"

    def test_set_step_reports_change(self, sessions):
        assert sessions.set_step("u1", ConversationStep.INITIAL) is True
        assert sessions.set_step("u1", ConversationStep.INITIAL) is False
        assert sessions.set_step("u1", ConversationStep.DATES_SELECTED) is True

    def test_out_of_order_step_is_not_rejected(self, sessions):
        sessions.set_step("u1", ConversationStep.BOOKING_CONFIRMED)
        sessions.set_step("u1", ConversationStep.INITIAL)
        assert sessions.get_meta("u1")["step"] == "initial"


# ════════════════════════════════════════════════════════════
# Suite 3: Conversation flow
# ════════════════════════════════════════════════════════════

class TestConversationFlow:

    def test_step_order(self):
        assert STEP_ORDER[0] == "initial"
        assert STEP_ORDER[-1] == "booking_confirmed"
        assert STEP_ORDER.index("ready_for_offers") == STEP_ORDER.index("budget_selected") + 1

    def test_next_step(self):
        assert next_step(None) == "destination_selected"
        assert next_step("initial") == "destination_selected"
        assert next_step(ConversationStep.ROOM_SELECTED) == "contact_info"
        assert next_step("booking_confirmed") is None

    @pytest.mark.parametrize("step", ["booking_modification", "support_contact", "general_inquiry"])
    def test_side_branches_have_no_next_step(self, step):
        assert next_step(step) is None


# ════════════════════════════════════════════════════════════
# Suite 4: History
# ════════════════════════════════════════════════════════════

class TestHistory:

    def test_history_keeps_last_ten_in_order(self, sessions):
        for i in range(15):
            sessions.add_conversation_turn("u1", f"q{i}", f"a{i}")
        history = sessions.get_full_conversation_history("u1")
        assert [t.user_message for t in history] == [f"q{i}" for i in range(5, 15)]

    def test_default_limit_is_five(self, sessions):
        for i in range(8):
            sessions.add_conversation_turn("u1", f"q{i}", f"a{i}")
        recent = sessions.get_conversation_history("u1")
        assert [t.user_message for t in recent] == ["q3", "q4", "q5", "q6", "q7"]

    def test_turn_carries_intent_and_entities(self, sessions):
        sessions.add_conversation_turn("u1", "hi", "hello", intent="greeting", entities={"language": "en"})
        turn = sessions.get_conversation_history("u1", limit=1)[0]
        assert turn.intent == "greeting"
        assert turn.entities == {"language": "en"}
        assert turn.timestamp

    def test_empty_history(self, sessions):
        assert sessions.get_conversation_history("nobody") == []
        assert sessions.get_conversation_history("nobody", limit=0) == []

    def test_custom_cap(self):
        manager = SessionManager(max_turns=3)
        for i in range(5):
            manager.add_conversation_turn("u1", f"q{i}", f"a{i}")
        assert [t.user_message for t in manager.get_full_conversation_history("u1")] == ["q2", "q3", "q4"]


# ════════════════════════════════════════════════════════════
# Suite 5: Context memory
# ════════════════════════════════════════════════════════════

class TestContextMemory:

    def test_default_shape(self, sessions):
        memory = sessions.get_context_memory("u1")
        assert memory["last_shown_hotels"] == []
        assert memory["implicit_references"] == {}
        assert memory["last_mentioned_hotel"] is None

    def test_update_is_shallow_merge(self, sessions):
        sessions.update_context_memory("u1", {"last_mentioned_destination": "hurghada"})
        sessions.update_context_memory("u1", {"last_mentioned_price": 9000})
        memory = sessions.get_context_memory("u1")
        assert memory["last_mentioned_destination"] == "hurghada"
        assert memory["last_mentioned_price"] == 9000

    def test_implicit_references(self, sessions):
        sessions.add_implicit_reference("u1", "that_offer", {"dest": "bali"})
        assert sessions.get_implicit_reference("u1", "that_offer") == {"dest": "bali"}
        assert sessions.get_implicit_reference("u1", "missing") is None

    @pytest.fixture
    def shown(self, sessions):
        sessions.update_context_memory("u1", {"last_shown_hotels": ["A", "B", "C"]})
        return sessions

    @pytest.mark.parametrize("message,expected", [
        ("الثاني", "B"),
        ("the first one", "A"),
        ("التالت", "C"),
        ("I want the third", "C"),
    ])
    def test_ordinal_resolution(self, shown, message, expected):
        assert shown.resolve_implicit_reference("u1", message) == expected

    @pytest.mark.parametrize("message", ["فندق مناسب الأولاد", "عايز التالتين"])
    def test_ordinal_needs_whole_word(self, shown, message):
        assert shown.resolve_implicit_reference("u1", message) is None

    def test_ordinal_beyond_list_is_none(self, sessions):
        sessions.update_context_memory("u1", {"last_shown_hotels": ["A"]})
        assert sessions.resolve_implicit_reference("u1", "the second") is None

    def test_demonstrative_prefers_last_mentioned_hotel(self, shown):
        shown.update_context_memory("u1", {"last_mentioned_hotel": "Hilton"})
        assert shown.resolve_implicit_reference("u1", "what is the price of this?") == "Hilton"

    def test_demonstrative_falls_back_to_first_shown(self, shown):
        assert shown.resolve_implicit_reference("u1", "كام سعر ده") == "A"

    def test_demonstrative_needs_price_or_hotel(self, shown):
        assert shown.resolve_implicit_reference("u1", "I like it") is None

    def test_cheapest_and_most_expensive_sentinels(self, shown):
        assert shown.resolve_implicit_reference("u1", "show me the cheapest") == "cheapest"
        assert shown.resolve_implicit_reference("u1", "الأغلى") == "most_expensive"

    def test_no_match(self, shown):
        assert shown.resolve_implicit_reference("u1", "hello there") is None


# ════════════════════════════════════════════════════════════
# Suite 6: Teardown
# ════════════════════════════════════════════════════════════

class TestTeardown:

    @pytest.fixture
    def populated(self, sessions):
        sessions.add_message("u1", {"role": "user", "content": "hi"})
        sessions.update_meta("u1", {"last_dest": "Bali", "step": "destination_selected"})
        sessions.add_conversation_turn("u1", "hi", "hello")
        sessions.update_context_memory("u1", {"last_shown_hotels": ["A"]})
        return sessions

    def test_clear_all_user_data(self, populated):
        populated.clear_all_user_data("u1")
        assert populated.get_session("u1") == []
        assert populated.get_meta("u1") == {}
        assert populated.get_conversation_history("u1") == []
        assert populated.get_context_memory("u1")["last_shown_hotels"] == []

    def test_single_store_clears(self, populated):
        populated.clear_conversation_history("u1")
        assert populated.get_conversation_history("u1") == []
        assert populated.get_meta("u1")["last_dest"] == "Bali"

        populated.clear_context_memory("u1")
        assert populated.get_context_memory("u1")["last_shown_hotels"] == []
        assert populated.get_session("u1") == [{"role": "user", "content": "hi"}]

        populated.clear_session("u1")
        assert populated.get_session("u1") == []
        assert populated.get_meta("u1")["step"] == "destination_selected"


# ════════════════════════════════════════════════════════════
# Suite 7: Isolation
# ════════════════════════════════════════════════════════════

class TestIsolation:

    def test_users_do_not_share_state(self, sessions):
        sessions.update_meta("a", {"last_dest": "Bali", "step": "dates_selected"})
        sessions.update_context_memory("a", {"last_shown_hotels": ["X"]})
        sessions.add_conversation_turn("a", "q", "r")
        sessions.add_message("a", {"role": "user", "content": "q"})

        assert sessions.get_meta("b") == {}
        assert sessions.get_context_memory("b")["last_shown_hotels"] == []
        assert sessions.get_conversation_history("b") == []
        assert sessions.get_session("b") == []

    def test_clearing_one_user_keeps_the_other(self, sessions):
        sessions.update_meta("a", {"last_dest": "Bali"})
        sessions.update_meta("b", {"last_dest": "Dahab"})
        sessions.clear_all_user_data("a")
        assert sessions.get_meta("b") == {"last_dest": "Dahab"}


class TestSessionManagerFactory:

    def test_memory_backend(self):
        config = MagicMock(SESSION_BACKEND="memory", MAX_CONVERSATION_TURNS=4)
        manager = create_session_manager(config)
        assert isinstance(manager.messages, InMemoryKeyValueStore)
        assert manager.max_turns == 4
