# quickair_ai/__init__.py
"""
Booking Assistant Core

Conversation engine for a bilingual (Arabic/English) travel booking chatbot:
- Multi-turn session state (messages, booking slots, history, context memory)
- Rule-based intent classification and entity extraction
- Lexical retrieval over JSON travel-offer documents
- Input validation for booking details

User Journeys Supported:
1. Pick a destination and dates
2. Browse, compare and get recommended hotels
3. Refer back to "the first one" / "that hotel" without repeating it
4. Ask general travel questions (visa, weather, payment)
"""

__version__ = "1.0.0"
__author__ = "QuickAir Team"

# Package structure:
# quickair_ai/
# ├── __init__.py           <- This file
# ├── main.py               <- FastAPI application entry
# ├── config.py             <- Configuration settings
# │
# ├── agents/
# │   └── concierge.py      <- Conversation pipeline
# │
# ├── api/                  <- FastAPI Routers
# │   ├── chat.py           <- /api/chat
# │   └── offers.py         <- /api/offers
# │
# ├── interfaces/           <- Data Stores
# │   ├── kv_store.py       <- memory / redis key-value backends
# │   ├── session_store.py  <- Session management
# │   └── offer_store.py    <- Offer loading + chunking
# │
# ├── nlu/                  <- Understanding
# │   ├── gazetteer.py      <- Keyword tables
# │   ├── entity_extractor.py
# │   └── intent_service.py
# │
# ├── retrieval/
# │   ├── scorer.py         <- Lexical scoring
# │   ├── rag_service.py    <- Retrieval + hotel lookups
# │   └── tour_service.py
# │
# ├── schemas/              <- Pydantic Models
# │   └── ai_schemas.py
# │
# └── utils/
#     ├── logger.py
#     ├── validation.py
#     └── ai_helpers.py
