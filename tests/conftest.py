"""
Shared fixtures for the booking assistant test suites.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from quickair_ai.interfaces.offer_store import OfferStore
from quickair_ai.interfaces.session_store import SessionManager
from quickair_ai.nlu.intent_service import IntentService
from quickair_ai.retrieval.rag_service import RAGService
from quickair_ai.schemas.ai_schemas import ChunkMetadata, Language, RAGChunk
from quickair_ai.utils.validation import ValidationService


# ────────────────────────────────────────────────────────────
# Offer documents
# ────────────────────────────────────────────────────────────

SHARM_OFFER: Dict[str, Any] = {
    "title_ar": "عرض شرم الشيخ",
    "title_en": "Sharm El Sheikh Offer",
    "location": "Sharm El Sheikh, Egypt",
    "validity": {"ar": "ساري حتى ديسمبر", "en": "Valid until December"},
    "hotels": [
        {
            "hotel_name_en": "Hilton Sharm Dreams",
            "hotel_name_ar": "هيلتون شرم دريمز",
            "stars": 5,
            "area": "Naama Bay",
            "meal": "AI",
            "price_egp": 14500,
            "price_usd_reference": 300,
        },
        {
            "hotel_name_en": "Sheraton Sharm Resort",
            "hotel_name_ar": "شيراتون شرم",
            "stars": 5,
            "area": "Ras Um El Sid",
            "meal": "AI",
            "price_egp": 12800,
            "price_usd_reference": 265,
        },
        {
            "hotel_name_en": "Albatros Palace",
            "hotel_name_ar": "الباتروس بالاس",
            "stars": 4,
            "area": "Sharks Bay",
            "meal": "HB",
            "price_egp": 8900,
            "price_usd_reference": 185,
        },
    ],
    "price_includes": {
        "ar": ["الإقامة 4 ليالي", "الانتقالات من وإلى المطار"],
        "en": ["4 nights accommodation", "Airport transfers"],
    },
    "price_excludes": {"ar": ["تذاكر الطيران"], "en": ["Flight tickets"]},
    "optional_tours": [
        {
            "name_en": "Ras Mohammed snorkeling",
            "name_ar": "سنوركلينج رأس محمد",
            "description_en": "Full day boat trip with two snorkeling stops.",
            "description_ar": "رحلة يوم كامل بالمركب.",
            "price_usd": 45,
        },
    ],
    "notes": {"ar": ["الأسعار للفرد"], "en": ["Prices are per person"]},
}

ISTANBUL_OFFER: Dict[str, Any] = {
    "title_ar": "عرض إسطنبول",
    "title_en": "Istanbul Offer",
    "location": "Turkey",
    "hotels": [
        {
            "hotel_name_en": "Marriott Sisli",
            "stars": 5,
            "meal": "BB",
            "prices_egp": {"single": 52000, "double": 41000, "child": 15000},
            "prices_usd_reference": {"double": 850},
        },
        {
            "hotel_name_en": "Concorde Taksim",
            "stars": 4,
            "meal": "BB",
            "prices_egp": {"single": 38000, "double": 29500},
            "prices_usd_reference": {"double": 610},
        },
    ],
    "visa_requirements": {
        "ar": ["جواز سفر ساري لمدة 6 أشهر"],
        "en": ["Passport valid for 6 months"],
    },
}


def write_offers(directory: Path, offers: Dict[str, Any]) -> Path:
    """Write {file_name: json-able} into directory, return it"""
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in offers.items():
        path = directory / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content, ensure_ascii=False), encoding="utf-8")
    return directory


def make_chunk(
    chunk_id: str,
    text: str,
    lang: Language = Language.EN,
    destination: Optional[str] = None,
    category: Optional[str] = None,
    title: Optional[str] = None,
) -> RAGChunk:
    return RAGChunk(
        id=chunk_id,
        source="test.json",
        destination=destination,
        section="Test",
        lang=lang,
        title=title,
        text=text,
        metadata=ChunkMetadata(category=category) if category else None,
    )


# ────────────────────────────────────────────────────────────
# Services
# ────────────────────────────────────────────────────────────

@pytest.fixture
def offers_dir(tmp_path) -> Path:
    return write_offers(tmp_path / "tours", {
        "sharm_el_sheikh.json": SHARM_OFFER,
        "istanbul.json": ISTANBUL_OFFER,
    })


@pytest.fixture
def offer_store(offers_dir) -> OfferStore:
    return OfferStore(offers_dir)


@pytest.fixture
def rag(offer_store) -> RAGService:
    return RAGService(offer_store=offer_store)


@pytest.fixture
def sessions() -> SessionManager:
    return SessionManager(max_turns=10)


@pytest.fixture
def intent_service() -> IntentService:
    return IntentService()


@pytest.fixture
def validation() -> ValidationService:
    return ValidationService()
