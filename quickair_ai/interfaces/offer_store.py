# interfaces/offer_store.py
"""
Offer Store - loads JSON travel-offer documents into retrievable chunks

Each offer file yields, per language, chunks for: title, validity, hotels,
price includes, price excludes, visa requirements, optional tours and notes.
A missing section in the file simply yields no chunk.

Loading is lazy and happens once per process; there is no reload.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

from loguru import logger

from ..config import settings
from ..schemas.ai_schemas import ChunkMetadata, Language, RAGChunk

LANGS = (Language.AR, Language.EN)

# Order matters: first matching destination wins
DESTINATION_TABLE = [
    ("bali", ["bali"]),
    ("istanbul", ["istanbul", "turkey"]),
    ("beirut", ["beirut", "lebanon"]),
    ("sharm_el_sheikh", ["sharm", "sharm el sheikh", "sharm_el_sheikh"]),
    ("hurghada", ["hurghada", "الغردقة"]),
    ("dahab", ["dahab", "دهب"]),
    ("ain_sokhna", ["ain sokhna", "ain_sokhna", "العين السخنة"]),
    ("sahl_hashish", ["sahl", "hasheesh", "sahl_hashish"]),
]

SECTION_NAMES = {
    "title": {"ar": "العنوان", "en": "Title"},
    "validity": {"ar": "صلاحية العرض", "en": "Offer Validity"},
    "hotels": {"ar": "الفنادق المتاحة", "en": "Available Hotels"},
    "includes": {"ar": "السعر يشمل", "en": "Price Includes"},
    "excludes": {"ar": "السعر لا يشمل", "en": "Price Excludes"},
    "visa": {"ar": "متطلبات التأشيرة", "en": "Visa Requirements"},
    "tours": {"ar": "الجولات الاختيارية", "en": "Optional Tours"},
    "notes": {"ar": "ملاحظات", "en": "Notes"},
}

# (json key, chunk id part, metadata category)
BULLET_SECTIONS = [
    ("price_includes", "includes", "includes"),
    ("price_excludes", "excludes", "excludes"),
    ("visa_requirements", "visa", "visa"),
]


def derive_destination(file_base: str, offer: Dict[str, Any]) -> Optional[str]:
    """Derive a destination tag from file name, title and location"""
    title = offer.get("title_en") or offer.get("title_ar") or ""
    location = offer.get("location") or ""
    haystack = " ".join([file_base, str(title), str(location)]).lower()

    for destination, patterns in DESTINATION_TABLE:
        if any(p in haystack for p in patterns):
            return destination
    return None


def format_hotels(hotels: List[Dict[str, Any]], lang: str) -> str:
    """One line per hotel: name, rating, area, room, meal, offer price"""
    lines = []
    for h in hotels:
        if lang == "ar":
            name = h.get("hotel_name_ar") or h.get("hotel_name_en") or h.get("name") or ""
            room = h.get("room_type_ar") or h.get("room_type_en") or ""
        else:
            name = h.get("hotel_name_en") or h.get("hotel_name_ar") or h.get("name") or ""
            room = h.get("room_type_en") or h.get("room_type_ar") or ""

        if h.get("stars"):
            rating = f"{h['stars']} نجوم" if lang == "ar" else f"{h['stars']} stars"
        else:
            rating = str(h.get("rating") or "")
        area = (f" في {h['area']}" if lang == "ar" else f" in {h['area']}") if h.get("area") else ""
        room_text = f" - {room}" if room else ""
        meal = f" - {h['meal']}" if h.get("meal") else ""

        price = ""
        usd_ref = f" (~${h['price_usd_reference']})" if h.get("price_usd_reference") else ""
        prices_egp = h.get("prices_egp") or {}
        if h.get("price_egp"):
            price = (
                f" سعر العرض: {h['price_egp']} جنيه{usd_ref}" if lang == "ar"
                else f" Offer Price: {h['price_egp']} EGP{usd_ref}"
            )
        elif prices_egp.get("double"):
            price = (
                f" سعر العرض للفرد: {prices_egp['double']} جنيه{usd_ref}" if lang == "ar"
                else f" Offer Price per person: {prices_egp['double']} EGP{usd_ref}"
            )
        elif prices_egp:
            parts = []
            if prices_egp.get("single"):
                parts.append(f"فردي: {prices_egp['single']} جنيه" if lang == "ar" else f"single: {prices_egp['single']} EGP")
            if prices_egp.get("child"):
                parts.append(f"طفل: {prices_egp['child']} جنيه" if lang == "ar" else f"child: {prices_egp['child']} EGP")
            if parts:
                label = "سعر العرض" if lang == "ar" else "Offer Price"
                price = f" {label} - {' / '.join(parts)}"

        lines.append(f"{name} {rating}{area}{room_text}{meal}{price}".strip())
    return "\n".join(lines)


def format_tours(tours: List[Dict[str, Any]], lang: str) -> str:
    lines = []
    for t in tours:
        if lang == "ar":
            name = t.get("name_ar") or t.get("name_en") or ""
            desc = t.get("description_ar") or t.get("description_en") or ""
        else:
            name = t.get("name_en") or t.get("name_ar") or ""
            desc = t.get("description_en") or t.get("description_ar") or ""
        price = f" (${t['price_usd']})" if t.get("price_usd") else ""
        lines.append(f"{name}{price}: {desc}")
    return "\n".join(lines)


def _bullets(items: List[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def chunk_offer(file_name: str, offer: Dict[str, Any]) -> List[RAGChunk]:
    """Split one offer document into language-tagged chunks"""
    file_base = Path(file_name).stem
    destination = derive_destination(file_base, offer)
    chunks: List[RAGChunk] = []

    def add(part: str, lang: Language, text: str, section: str,
            title: Optional[str], metadata: Optional[ChunkMetadata] = None):
        chunks.append(RAGChunk(
            id=f"{file_base}:{part}:{lang.value}",
            source=file_name,
            destination=destination,
            section=SECTION_NAMES[section][lang.value],
            lang=lang,
            title=title,
            text=text,
            metadata=metadata,
        ))

    def offer_title(lang: Language) -> Optional[str]:
        return offer.get(f"title_{lang.value}")

    # Title
    for lang in LANGS:
        title = offer_title(lang)
        if title:
            add("title", lang, title, "title", title)

    # Validity
    validity = offer.get("validity")
    if isinstance(validity, dict):
        for lang in LANGS:
            text = validity.get(lang.value)
            if text:
                add("validity", lang, text, "validity", offer_title(lang))

    # Hotels
    hotels = offer.get("hotels")
    if isinstance(hotels, list) and hotels:
        for lang in LANGS:
            text = format_hotels(hotels, lang.value)
            if text:
                add("hotels", lang, text, "hotels", offer_title(lang),
                    ChunkMetadata(category="hotels", hotels=hotels))

    # Includes / excludes / visa
    for key, part, category in BULLET_SECTIONS:
        section = offer.get(key)
        if not isinstance(section, dict):
            continue
        for lang in LANGS:
            items = section.get(lang.value)
            if isinstance(items, list) and items:
                add(part, lang, _bullets(items), part, offer_title(lang),
                    ChunkMetadata(category=category))

    # Optional tours
    tours = offer.get("optional_tours")
    if isinstance(tours, list) and tours:
        for lang in LANGS:
            text = format_tours(tours, lang.value)
            if text:
                add("tours", lang, text, "tours", offer_title(lang),
                    ChunkMetadata(category="tours", tours=tours))

    # Notes
    notes = offer.get("notes")
    if isinstance(notes, dict):
        for lang in LANGS:
            items = notes.get(lang.value)
            if isinstance(items, list) and items:
                add("notes", lang, _bullets(items), "notes", offer_title(lang),
                    ChunkMetadata(category="general"))

    return chunks


class OfferStore:
    """
    Reads a directory of JSON offer files once and keeps:
    - the chunk list used by the lexical retriever
    - a destination -> offer JSON map used for direct hotel lookups
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir or settings.OFFERS_DIR)
        self._chunks: List[RAGChunk] = []
        self._offers_by_dest: Dict[str, Dict[str, Any]] = {}
        self.loaded = False
        self.files_read = 0

    def _safe_read_json(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"OfferStore: failed to read/parse {path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"OfferStore: {path} is not a JSON object, skipping")
            return None
        return data

    def load_all(self) -> None:
        """
        Load every offer file. Idempotent: later calls are no-ops.

        Raises FileNotFoundError / NotADirectoryError if the directory is
        unusable; a bad individual file is logged and skipped.
        """
        if self.loaded:
            return

        json_files = sorted(
            p for p in self.data_dir.iterdir()
            if p.name.lower().endswith(".json") and "package" not in p.name
        )

        chunks: List[RAGChunk] = []
        offers: Dict[str, Dict[str, Any]] = {}

        for path in json_files:
            offer = self._safe_read_json(path)
            if offer is None:
                continue

            destination = derive_destination(path.stem, offer)
            if destination:
                offers[destination] = offer
            chunks.extend(chunk_offer(path.name, offer))

        self._chunks = chunks
        self._offers_by_dest = offers
        self.files_read = len(json_files)
        self.loaded = True

        destinations = sorted({c.destination for c in chunks if c.destination})
        logger.info(f"OfferStore: loaded {len(chunks)} chunks from {len(json_files)} files")
        logger.info(f"OfferStore: destinations: {', '.join(destinations) or 'none'}")

    @property
    def chunks(self) -> List[RAGChunk]:
        self.load_all()
        return self._chunks

    @property
    def offers_by_destination(self) -> Dict[str, Dict[str, Any]]:
        self.load_all()
        return self._offers_by_dest

    def get_offer(self, destination: str) -> Optional[Dict[str, Any]]:
        self.load_all()
        return self._offers_by_dest.get(destination.lower())
