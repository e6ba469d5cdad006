# retrieval/scorer.py
"""
Lexical scorer for offer chunks

Score = sum of independent signals (no normalization):
- +10 literal query substring in title + text
- +2 per shared keyword
- +5 query mentions the chunk's category
- +3 chunk language matches the requested language
- +4 query mentions the chunk's destination
"""

import re
from typing import List, Sequence

from ..schemas.ai_schemas import RAGChunk

KEYWORD_SPLIT = re.compile(r"[\s,،.]+")

STOP_WORDS = frozenset({
    "the", "a", "an", "in", "on", "at", "to", "for", "of", "with", "and", "or",
    "في", "من", "إلى", "مع", "و", "أو",
})

CATEGORY_KEYWORDS = {
    "hotels": ["hotel", "فندق", "فنادق", "accommodation", "إقامة", "stay"],
    "tours": ["tour", "جولة", "رحلة", "trip", "excursion", "نشاط"],
    "visa": ["visa", "تأشيرة", "فيزا", "requirements", "متطلبات"],
    "includes": ["include", "يشمل", "contain", "cover", "تغطي"],
    "excludes": ["exclude", "لا يشمل", "not include", "مستثنى"],
}

# Extra query tokens accepted for a chunk destination
DESTINATION_ALIASES = {
    "istanbul": ["turkey"],
}


def extract_keywords(text: str) -> List[str]:
    """Lowercase tokens longer than 2 chars, stop words removed"""
    return [
        w for w in KEYWORD_SPLIT.split(text.lower())
        if len(w) > 2 and w not in STOP_WORDS
    ]


def score_chunk(query: str, chunk: RAGChunk, lang) -> int:
    q_lower = query.lower()
    text_lower = f"{chunk.title or ''} {chunk.text}".lower()
    score = 0

    # "" is a substring of everything; an empty query must score nothing
    if q_lower and q_lower in text_lower:
        score += 10

    text_keywords = set(extract_keywords(text_lower))
    for kw in extract_keywords(q_lower):
        if kw in text_keywords:
            score += 2

    if chunk.metadata and chunk.metadata.category:
        category_words = CATEGORY_KEYWORDS.get(chunk.metadata.category, [])
        if any(w in q_lower for w in category_words):
            score += 5

    # Unknown language values never earn the bonus
    if q_lower and chunk.lang.value == getattr(lang, "value", lang):
        score += 3

    if chunk.destination:
        tokens = [chunk.destination] + DESTINATION_ALIASES.get(chunk.destination, [])
        if any(t in q_lower for t in tokens):
            score += 4

    return score


def rank(query: str, chunks: Sequence[RAGChunk], lang, limit: int = 5) -> List[RAGChunk]:
    """
    Top `limit` chunks by descending score. Zero scores are dropped and
    the sort is stable, so equal scores keep corpus order.
    """
    scored = [(score_chunk(query, chunk, lang), chunk) for chunk in chunks]
    scored = [item for item in scored if item[0] > 0]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [chunk for _, chunk in scored[:limit]]
