# nlu/entity_extractor.py
"""
Entity Extractor
Pulls structured values out of a free-text (Arabic or English) message:
- destination, hotel names, star rating
- price range, dates, travelers, budget
- meal plan, room type, amenities

Every field has its own table or regex and is extracted independently.
A field that is not found stays None; context only fills gaps and never
overrides an explicit extraction.
"""

import re
from typing import Optional, Dict, Any, List, Tuple

from ..schemas.ai_schemas import DateRange, Entities, PriceRange
from .gazetteer import (
    AMENITIES,
    DESTINATIONS,
    KNOWN_HOTELS,
    MEAL_PLANS,
    MONTHS_AR,
    MONTHS_EN,
    ROOM_TYPES,
)

COMPARISON_PATTERN = re.compile(r"([\w\s]+)\s+(vs|versus|و|مقابل)\s+([\w\s]+)", re.IGNORECASE)

STARS_PATTERNS = [
    re.compile(r"(\d)\s*(?:نجوم|نجمة|stars?)", re.IGNORECASE),
    re.compile(r"(\d)\s*(?:\*|★)"),
]

# Tried in order, first match wins
PRICE_RANGE_PATTERN = re.compile(r"(?:من|from)\s*(\d+)\s*(?:إلى|الى|to|[-–])\s*(\d+)", re.IGNORECASE)
PRICE_MAX_PATTERN = re.compile(r"(?:أقل من|اقل من|تحت|under|less than|below|maximum|max)\s*(\d+)", re.IGNORECASE)
PRICE_MIN_PATTERN = re.compile(r"(?:أكثر من|اكثر من|فوق|above|more than|over|minimum|min)\s*(\d+)", re.IGNORECASE)
PRICE_AROUND_PATTERN = re.compile(r"(?:في حدود|حوالي|تقريبا|around|about|approximately)\s*(\d+)", re.IGNORECASE)

DATE_PATTERN = re.compile(r"(\d{1,2})[/\-](\d{1,2})")

TRAVELERS_PATTERNS = [
    re.compile(r"(\d+)\s*(?:أشخاص|شخص|persons?|people|travell?ers?|guests?)", re.IGNORECASE),
    re.compile(r"(?:عائلة|family)\s*(?:of|من)?\s*(\d+)", re.IGNORECASE),
]
COUPLE_PATTERN = re.compile(r"(زوجين|couple|اثنين)", re.IGNORECASE)
FAMILY_PATTERN = re.compile(r"(عائلة|family)", re.IGNORECASE)
GROUP_PATTERN = re.compile(r"(مجموعة|group)", re.IGNORECASE)

BUDGET_PATTERN = re.compile(r"(?:ميزانية|budget)\s*(?:من|of)?\s*(\d+)", re.IGNORECASE)


def extract_destination(message: str) -> Optional[str]:
    for name, patterns in DESTINATIONS:
        for pattern in patterns:
            if pattern.lower() in message:
                return name
    return None


def extract_hotel_names(message: str) -> Tuple[Optional[str], Optional[List[str]]]:
    """
    Returns (single, multiple). With a comparison connector and two or more
    hotels found, multiple is the first two as a comparison pair.
    """
    found = [hotel for hotel in KNOWN_HOTELS if hotel.lower() in message]

    if len(found) >= 2 and COMPARISON_PATTERN.search(message):
        return None, found[:2]
    if len(found) == 1:
        return found[0], None
    if len(found) > 1:
        return None, found
    return None, None


def extract_stars(message: str) -> Optional[int]:
    for pattern in STARS_PATTERNS:
        match = pattern.search(message)
        if match:
            stars = int(match.group(1))
            if 1 <= stars <= 5:
                return stars
    return None


def extract_price_range(message: str) -> Optional[PriceRange]:
    match = PRICE_RANGE_PATTERN.search(message)
    if match:
        return PriceRange(min=int(match.group(1)), max=int(match.group(2)))

    match = PRICE_MAX_PATTERN.search(message)
    if match:
        return PriceRange(max=int(match.group(1)))

    match = PRICE_MIN_PATTERN.search(message)
    if match:
        return PriceRange(min=int(match.group(1)))

    match = PRICE_AROUND_PATTERN.search(message)
    if match:
        price = int(match.group(1))
        return PriceRange(min=price * 0.8, max=price * 1.2)

    return None


def extract_dates(message: str) -> Optional[DateRange]:
    """
    First two DD/MM-shaped substrings become start/end. A month name, if
    present, independently overwrites start with the English month name.
    """
    start = end = None

    matches = list(DATE_PATTERN.finditer(message))
    if matches:
        start = matches[0].group(0)
        if len(matches) >= 2:
            end = matches[1].group(0)

    for ar_month, en_month in zip(MONTHS_AR, MONTHS_EN):
        if ar_month in message or en_month in message:
            start = en_month
            break

    if start is None and end is None:
        return None
    return DateRange(start=start, end=end)


def extract_travelers(message: str) -> Optional[int]:
    for pattern in TRAVELERS_PATTERNS:
        match = pattern.search(message)
        if match:
            return int(match.group(1))

    if COUPLE_PATTERN.search(message):
        return 2
    if FAMILY_PATTERN.search(message):
        return 4
    if GROUP_PATTERN.search(message):
        return 6
    return None


def extract_budget(message: str) -> Optional[int]:
    match = BUDGET_PATTERN.search(message)
    if match:
        return int(match.group(1))
    return None


def _first_code(message: str, table: List[Tuple[str, List[str]]]) -> Optional[str]:
    for code, patterns in table:
        for pattern in patterns:
            if pattern.lower() in message:
                return code
    return None


def extract_meal_plan(message: str) -> Optional[str]:
    return _first_code(message, MEAL_PLANS)


def extract_room_type(message: str) -> Optional[str]:
    return _first_code(message, ROOM_TYPES)


def extract_amenities(message: str) -> Optional[List[str]]:
    found = [
        name for name, patterns in AMENITIES
        if any(pattern.lower() in message for pattern in patterns)
    ]
    return found or None


class EntityExtractor:
    """Rule-based extraction over a lowercased copy of the message"""

    def extract(self, message: str, context: Optional[Dict[str, Any]] = None) -> Entities:
        """
        Extract entities from a message.

        Args:
            message: Raw user message
            context: Session meta; "last_dest" and "selected_hotel" fill
                     destination / hotel_name when the message has none

        Returns:
            Entities with None for every field not found
        """
        text = message.lower().strip()

        hotel_name, hotel_names = extract_hotel_names(text)

        entities = Entities(
            destination=extract_destination(text),
            hotel_name=hotel_name,
            hotel_names=hotel_names,
            stars=extract_stars(text),
            price_range=extract_price_range(text),
            dates=extract_dates(text),
            travelers=extract_travelers(text),
            budget=extract_budget(text),
            meal_plan=extract_meal_plan(text),
            room_type=extract_room_type(text),
            amenities=extract_amenities(text),
        )

        if context:
            if entities.destination is None and context.get("last_dest"):
                entities.destination = context["last_dest"]
            if entities.hotel_name is None and context.get("selected_hotel"):
                entities.hotel_name = context["selected_hotel"]

        return entities


entity_extractor = EntityExtractor()
