# retrieval/rag_service.py
"""
RAG Service
Lexical retrieval over offer chunks plus direct lookups on the offer JSON:
- retrieve / smart_search: ranked chunks for a free-text query
- destination info by category
- hotel search, comparison and recommendations
- canned answers for common travel questions
"""

import math
import re
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

from loguru import logger

from ..config import settings
from ..nlu.gazetteer import DESTINATION_SPELLING_FIXES
from ..schemas.ai_schemas import Language, RAGChunk, RAGResult
from ..interfaces.offer_store import OfferStore
from .scorer import rank

INFO_TYPES = ("hotels", "tours", "visa", "includes", "excludes", "all")
MAX_RECOMMENDATIONS = 5
RATING_PATTERN = re.compile(r"\s*(\d+)")


# ============================================
# Hotel field helpers
# ============================================

def hotel_display_name(hotel: Dict[str, Any], lang: str = "en") -> str:
    if lang == "ar":
        return hotel.get("hotel_name_ar") or hotel.get("hotel_name_en") or hotel.get("name") or hotel.get("hotel_name") or ""
    return hotel.get("hotel_name_en") or hotel.get("hotel_name_ar") or hotel.get("name") or hotel.get("hotel_name") or ""


def hotel_rating(hotel: Dict[str, Any]) -> int:
    """Leading integer of the star rating ("4 stars" -> 4); anything else counts as 0"""
    raw = hotel.get("stars") or hotel.get("rating") or 0
    match = RATING_PATTERN.match(str(raw))
    return int(match.group(1)) if match else 0


def hotel_price(hotel: Dict[str, Any], currency: str = "EGP") -> Optional[float]:
    """Per-person offer price in the given currency, None if not listed"""
    if currency.upper() == "USD":
        price = hotel.get("price_usd_reference") or (hotel.get("prices_usd_reference") or {}).get("double")
    else:
        price = hotel.get("price_egp") or (hotel.get("prices_egp") or {}).get("double")
    if price is None:
        return None
    try:
        return float(price)
    except (TypeError, ValueError):
        return None


# ============================================
# Canned answers
# ============================================

GENERAL_ANSWERS = [
    (
        ["visa", "تأشيرة", "فيزا"],
        {
            "en": "Visa rules depend on the destination and your passport. Each offer lists its visa "
                  "requirements; ask about a specific destination and I will show them.",
            "ar": "متطلبات التأشيرة تختلف حسب الوجهة وجواز السفر. كل عرض يوضح متطلبات التأشيرة الخاصة به، "
                  "اسألني عن وجهة محددة وسأعرضها لك.",
        },
    ),
    (
        ["weather", "temperature", "الطقس", "الجو", "حرارة"],
        {
            "en": "Red Sea resorts are sunny year-round (around 20°C in winter, 35°C+ in summer). "
                  "Istanbul and Beirut are cooler in winter, and Bali is tropical with a rainy season from November to March.",
            "ar": "منتجعات البحر الأحمر مشمسة طوال السنة (حوالي 20 درجة شتاءً وأكثر من 35 صيفاً). "
                  "إسطنبول وبيروت أبرد في الشتاء، وبالي استوائية وموسم الأمطار فيها من نوفمبر إلى مارس.",
        },
    ),
    (
        ["payment", "pay", "installment", "دفع", "الدفع", "تقسيط"],
        {
            "en": "You can pay by cash, bank transfer or card. A deposit confirms the booking "
                  "and the balance is due before travel.",
            "ar": "يمكنك الدفع نقداً أو بتحويل بنكي أو بالبطاقة. يتم تأكيد الحجز بدفع مقدم "
                  "ويستحق الباقي قبل السفر.",
        },
    ),
    (
        ["kids", "children", "child", "أطفال", "اطفال", "طفل"],
        {
            "en": "Children are welcome. Most hotels offer a reduced child price when sharing "
                  "the parents' room; check the child rate listed in each offer.",
            "ar": "الأطفال مرحب بهم. معظم الفنادق تقدم سعراً مخفضاً للطفل في غرفة الوالدين، "
                  "راجع سعر الطفل في كل عرض.",
        },
    ),
    (
        ["cancel", "refund", "إلغاء", "الغاء", "استرداد"],
        {
            "en": "Cancellation terms depend on the hotel and season. Free cancellation is usually "
                  "possible up to 14 days before arrival; later cancellations may incur fees.",
            "ar": "شروط الإلغاء تعتمد على الفندق والموسم. عادةً يمكن الإلغاء مجاناً حتى 14 يوماً "
                  "قبل الوصول، والإلغاء بعد ذلك قد يترتب عليه رسوم.",
        },
    ),
]


def apply_spelling_fixes(query: str) -> str:
    """Plain find/replace of common destination misspellings"""
    fixed = query
    for wrong, right in DESTINATION_SPELLING_FIXES:
        fixed = fixed.replace(wrong, right)
    return fixed


class RAGService:
    """
    Retrieval facade over an OfferStore.

    The store loads lazily on first use; every query method triggers it.
    """

    def __init__(
        self,
        offer_store: Optional[OfferStore] = None,
        data_dir: Optional[Union[str, Path]] = None
    ):
        self.store = offer_store or OfferStore(data_dir)

    # ------------------------------------------
    # Chunk retrieval
    # ------------------------------------------

    def retrieve(self, query: str, lang: Union[Language, str] = Language.AR,
                 limit: Optional[int] = None) -> RAGResult:
        """Top `limit` chunks by lexical score"""
        limit = settings.RAG_DEFAULT_LIMIT if limit is None else limit
        chunks = rank(query, self.store.chunks, lang, limit)
        logger.debug(f"RAG: '{query}' -> {[c.id for c in chunks]}")
        return RAGResult(chunks=chunks)

    def smart_search(self, query: str, lang: Union[Language, str] = Language.AR,
                     limit: Optional[int] = None) -> RAGResult:
        """retrieve() after correcting common destination misspellings"""
        return self.retrieve(apply_spelling_fixes(query), lang=lang, limit=limit)

    def destinations(self) -> List[str]:
        """Distinct chunk destinations in load order"""
        seen: List[str] = []
        for chunk in self.store.chunks:
            if chunk.destination and chunk.destination not in seen:
                seen.append(chunk.destination)
        return seen

    def get_offer_by_destination(self, destination: str) -> Optional[Dict[str, Any]]:
        return self.store.get_offer(destination)

    def get_destination_info(self, destination: str, info_type: str = "all",
                             lang: Union[Language, str] = Language.AR) -> List[RAGChunk]:
        """Chunks for one destination and language, optionally one category"""
        if info_type not in INFO_TYPES:
            raise ValueError(f"Unknown info_type: {info_type}")
        lang_value = getattr(lang, "value", lang)
        destination = destination.lower()
        return [
            chunk for chunk in self.store.chunks
            if chunk.destination == destination
            and chunk.lang.value == lang_value
            and (info_type == "all" or (chunk.metadata is not None and chunk.metadata.category == info_type))
        ]

    # ------------------------------------------
    # Hotel lookups
    # ------------------------------------------

    def _all_hotels(self, destination: Optional[str] = None) -> List[Dict[str, Any]]:
        if destination:
            offer = self.get_offer_by_destination(destination)
            if not offer or not isinstance(offer.get("hotels"), list):
                return []
            return list(offer["hotels"])

        hotels: List[Dict[str, Any]] = []
        for offer in self.store.offers_by_destination.values():
            if isinstance(offer.get("hotels"), list):
                hotels.extend(offer["hotels"])
        return hotels

    def search_hotels(self, destination: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Hotels of one destination, optionally filtered.

        Filters:
            min_rating: minimum stars (stars or rating field)
            max_price: price ceiling; an unlisted price counts as 0
            currency: "EGP" (default) or "USD"
        """
        hotels = self._all_hotels(destination)
        if not hotels:
            return []
        filters = filters or {}

        min_rating = filters.get("min_rating")
        if min_rating:
            hotels = [h for h in hotels if hotel_rating(h) >= min_rating]

        max_price = filters.get("max_price")
        if max_price:
            currency = filters.get("currency") or "EGP"
            hotels = [h for h in hotels if (hotel_price(h, currency) or 0) <= max_price]

        return hotels

    def compare_hotels(self, names: List[str], destination: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Hotels matching each requested name, in request order.

        Each name contributes at most one hotel (first case-insensitive
        substring hit on the English or Arabic name); a hotel is never
        returned twice.
        """
        candidates = self._all_hotels(destination)
        result: List[Dict[str, Any]] = []

        for name in names:
            needle = name.lower().strip()
            if not needle:
                continue
            for hotel in candidates:
                if any(hotel is r for r in result):
                    continue
                haystack = " ".join([
                    str(hotel.get("hotel_name_en") or ""),
                    str(hotel.get("hotel_name_ar") or ""),
                    str(hotel.get("name") or ""),
                ]).lower()
                if needle in haystack:
                    result.append(hotel)
                    break

        return result

    def get_recommendations(self, preferences: Optional[Dict[str, Any]] = None,
                            lang: Union[Language, str] = Language.AR) -> List[Dict[str, Any]]:
        """
        Top hotels by stars (desc) then price (asc).

        Preferences: destination, stars (minimum), max_price (EGP).
        Hotels without a price sort after priced hotels of equal stars.
        """
        preferences = preferences or {}
        hotels = self._all_hotels(preferences.get("destination"))

        min_stars = preferences.get("stars")
        if min_stars:
            hotels = [h for h in hotels if hotel_rating(h) >= min_stars]

        max_price = preferences.get("max_price")
        if max_price:
            hotels = [h for h in hotels if (hotel_price(h) or 0) <= max_price]

        def sort_key(hotel):
            price = hotel_price(hotel)
            return (-hotel_rating(hotel), price if price is not None else math.inf)

        ranked = sorted(hotels, key=sort_key)[:MAX_RECOMMENDATIONS]
        logger.debug(
            f"RAG: recommendations ({getattr(lang, 'value', lang)}) -> "
            f"{[hotel_display_name(h) for h in ranked]}"
        )
        return ranked

    # ------------------------------------------
    # General questions
    # ------------------------------------------

    def answer_general_question(self, question: str, lang: Union[Language, str] = Language.AR) -> Optional[str]:
        """Canned answer for the first matching topic, or None"""
        question_lower = question.lower()
        lang_value = getattr(lang, "value", lang)
        if lang_value not in ("ar", "en"):
            lang_value = "en"

        for words, answers in GENERAL_ANSWERS:
            if any(word in question_lower for word in words):
                return answers[lang_value]
        return None
