"""
AI Helper Functions
Small text utilities shared by the concierge and the API layer
"""

from typing import Union

from ..schemas.ai_schemas import Language

DESTINATION_NAMES = {
    "sharm_el_sheikh": {"ar": "شرم الشيخ", "en": "Sharm El Sheikh"},
    "hurghada": {"ar": "الغردقة", "en": "Hurghada"},
    "dahab": {"ar": "دهب", "en": "Dahab"},
    "ain_sokhna": {"ar": "العين السخنة", "en": "Ain Sokhna"},
    "sahl_hashish": {"ar": "سهل حشيش", "en": "Sahl Hasheesh"},
    "istanbul": {"ar": "إسطنبول", "en": "Istanbul"},
    "bali": {"ar": "بالي", "en": "Bali"},
    "beirut": {"ar": "بيروت", "en": "Beirut"},
}

# Display names produced by the entity extractor -> offer destination codes
DESTINATION_CODES = {
    "sharm el sheikh": "sharm_el_sheikh",
    "hurghada": "hurghada",
    "dahab": "dahab",
    "ain sokhna": "ain_sokhna",
    "sahl hasheesh": "sahl_hashish",
    "istanbul": "istanbul",
    "turkey": "istanbul",
    "bali": "bali",
    "beirut": "beirut",
}


def destination_code(name: str) -> str:
    """
    Offer destination code for a display name ("Sharm El Sheikh" ->
    "sharm_el_sheikh"). Unknown names come back lowercased.
    """
    key = name.strip().lower()
    return DESTINATION_CODES.get(key, key)


def destination_display_name(code: str, lang: Union[Language, str] = Language.AR) -> str:
    """
    Localized destination name

    Args:
        code: Destination code (e.g. "hurghada")
        lang: "ar" or "en"

    Returns:
        str: Localized name, or the code unchanged if unknown
    """
    names = DESTINATION_NAMES.get(code)
    if not names:
        return code
    return names.get(getattr(lang, "value", lang), code)


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
