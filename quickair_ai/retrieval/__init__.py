# retrieval/__init__.py
"""
Retrieval Package

Lexical search over travel-offer documents:
- scorer: chunk scoring and ranking
- rag_service: RAGService (retrieve, smart_search, hotel lookups)
- tour_service: TourService (tours, package contents, list formatting)
"""

from .scorer import extract_keywords, score_chunk, rank
from .rag_service import RAGService, apply_spelling_fixes
from .tour_service import TourService

__all__ = [
    "extract_keywords",
    "score_chunk",
    "rank",
    "RAGService",
    "apply_spelling_fixes",
    "TourService",
]
