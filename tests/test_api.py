"""
Test suites for the HTTP surface.

Suite 1: TestOffersAPI  – destination list, localized offer, 404 shape
Suite 2: TestChatAPI    – message pipeline, analyze, session inspect / wipe
Suite 3: TestHealth     – component status
"""

import pytest
from fastapi.testclient import TestClient

from quickair_ai.interfaces.session_store import SessionManager
from quickair_ai.main import create_app
from quickair_ai.retrieval.rag_service import RAGService


@pytest.fixture
def client(offers_dir):
    app = create_app(sessions=SessionManager(max_turns=10), rag=RAGService(data_dir=offers_dir))
    with TestClient(app) as test_client:
        yield test_client


# ════════════════════════════════════════════════════════════
# Suite 1: Offers
# ════════════════════════════════════════════════════════════

class TestOffersAPI:

    def test_destinations(self, client):
        response = client.get("/api/offers/destinations")
        assert response.status_code == 200
        assert response.json() == {"destinations": ["istanbul", "sharm_el_sheikh"]}

    def test_offer_in_english_by_default(self, client):
        body = client.get("/api/offers/sharm_el_sheikh").json()
        assert body["dest"] == "sharm_el_sheikh"
        assert body["lang"] == "en"
        assert body["offer"]["title"] == "Sharm El Sheikh Offer"
        assert body["offer"]["validity_text"] == "Valid until December"
        assert body["offer"]["excludes"] == ["Flight tickets"]
        assert body["offer"]["visa"] == []
        assert len(body["offer"]["hotels"]) == 3

    def test_offer_in_arabic(self, client):
        body = client.get("/api/offers/sharm_el_sheikh", params={"lang": "ar"}).json()
        assert body["lang"] == "ar"
        assert body["offer"]["title"] == "عرض شرم الشيخ"
        assert body["offer"]["includes"] == ["الإقامة 4 ليالي", "الانتقالات من وإلى المطار"]

    def test_unknown_lang_means_english(self, client):
        assert client.get("/api/offers/istanbul", params={"lang": "fr"}).json()["lang"] == "en"

    def test_turkey_alias(self, client):
        body = client.get("/api/offers/Turkey").json()
        assert body["dest"] == "istanbul"
        assert body["offer"]["visa"] == ["Passport valid for 6 months"]

    def test_not_found(self, client):
        response = client.get("/api/offers/beirut")
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "No offer for destination: beirut"}


# ════════════════════════════════════════════════════════════
# Suite 2: Chat
# ════════════════════════════════════════════════════════════

class TestChatAPI:

    def test_message(self, client):
        response = client.post("/api/chat/message", json={
            "user_id": "u1",
            "message": "show me hotels in sharm",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == "u1"
        assert body["intent"] == "search_hotels"
        assert body["language"] == "en"
        assert body["step"] == "destination_selected"
        assert body["step_changed"] is True
        assert len(body["hotels"]) == 3
        assert body["suggestions"]

    def test_message_sources_are_chunk_ids(self, client):
        body = client.post("/api/chat/message", json={
            "user_id": "u1",
            "message": "tell me about sharm snorkeling tour",
        }).json()
        assert body["sources"][0] == "sharm_el_sheikh:tours:en"

    def test_message_forced_language(self, client):
        body = client.post("/api/chat/message", json={"user_id": "u1", "message": "hello", "lang": "ar"}).json()
        assert body["language"] == "ar"

    @pytest.mark.parametrize("payload", [
        {"user_id": "u1", "message": ""},
        {"user_id": "", "message": "hello"},
        {"user_id": "u1", "message": "hello", "lang": "fr"},
        {"message": "hello"},
    ])
    def test_message_rejects_bad_payload(self, client, payload):
        assert client.post("/api/chat/message", json=payload).status_code == 422

    def test_analyze_uses_session_meta(self, client):
        client.post("/api/chat/message", json={"user_id": "u1", "message": "show me hotels in sharm"})
        client.post("/api/chat/message", json={"user_id": "u1", "message": "the first one"})

        body = client.post("/api/chat/analyze", json={"user_id": "u1", "message": "price?"}).json()
        assert body["intent"]["type"] == "price_inquiry"
        assert body["intent"]["entities"]["hotel_name"] == "Hilton Sharm Dreams"
        assert body["intent"]["entities"]["destination"] == "Sharm El Sheikh"
        assert body["valid"] is True

    def test_analyze_does_not_touch_session(self, client):
        client.post("/api/chat/analyze", json={"user_id": "u9", "message": "hello"})
        session = client.get("/api/chat/sessions/u9").json()
        assert session["messages"] == []
        assert session["history"] == []

    def test_analyze_with_request_context(self, client):
        body = client.post("/api/chat/analyze", json={
            "message": "compare",
            "context": {"last_dest": "Bali"},
        }).json()
        assert body["intent"]["type"] == "hotel_comparison"
        assert body["intent"]["entities"]["destination"] == "Bali"
        assert body["valid"] is False
        assert body["errors"] == ["Hotel comparison requires at least 2 hotel names"]

    def test_session_view_and_clear(self, client):
        client.post("/api/chat/message", json={"user_id": "u1", "message": "show me hotels in sharm"})

        view = client.get("/api/chat/sessions/u1").json()
        assert [m["role"] for m in view["messages"]] == ["user", "assistant"]
        assert view["meta"]["last_dest"] == "Sharm El Sheikh"
        assert view["context_memory"]["last_mentioned_destination"] == "sharm_el_sheikh"
        assert view["history"][0]["user_message"] == "show me hotels in sharm"
        assert client.get("/api/chat/sessions").json() == {"count": 1}

        cleared = client.delete("/api/chat/sessions/u1").json()
        assert cleared["status"] == "cleared"
        assert cleared["user_id"] == "u1"

        view = client.get("/api/chat/sessions/u1").json()
        assert view["messages"] == []
        assert view["meta"] == {}


# ════════════════════════════════════════════════════════════
# Suite 3: Health
# ════════════════════════════════════════════════════════════

class TestHealth:

    def test_health_before_and_after_load(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["service"] == "quickair-ai"
        assert body["components"]["sessions"] == "memory"
        assert body["components"]["llm"] == "fallback"
        assert body["components"]["offers"] == "lazy"

        client.get("/api/offers/destinations")
        assert client.get("/health").json()["components"]["offers"] == "loaded"

    def test_llm_configured(self, offers_dir):
        app = create_app(
            sessions=SessionManager(),
            rag=RAGService(data_dir=offers_dir),
            generate=lambda messages: "ok",
        )
        with TestClient(app) as client:
            assert client.get("/health").json()["components"]["llm"] == "configured"
            reply = client.post("/api/chat/message", json={"user_id": "u1", "message": "hello"}).json()
            assert reply["reply"] == "ok"
