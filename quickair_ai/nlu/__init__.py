# nlu/__init__.py
"""
NLU Package

Rule-based understanding of bilingual (Arabic/English) booking messages:
- gazetteer: keyword tables
- entity_extractor: EntityExtractor
- intent_service: intent catalog, classify(), IntentService
"""

from .entity_extractor import EntityExtractor, entity_extractor
from .intent_service import (
    INTENT_CATALOG,
    SUGGESTIONS,
    IntentRule,
    IntentService,
    classify,
    detect_language,
    generate_suggestions,
)

__all__ = [
    "EntityExtractor",
    "entity_extractor",
    "INTENT_CATALOG",
    "SUGGESTIONS",
    "IntentRule",
    "IntentService",
    "classify",
    "detect_language",
    "generate_suggestions",
]
