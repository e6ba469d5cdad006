# interfaces/__init__.py
"""
Interfaces Package

Contains data stores:
- kv_store: key-value backends (in-memory, Redis)
- session_store: per-user conversation state
- offer_store: JSON offer loading and chunking
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .kv_store import KeyValueStore, InMemoryKeyValueStore, RedisKeyValueStore
    from .session_store import SessionManager, create_session_manager, STEP_ORDER, next_step
    from .offer_store import OfferStore, chunk_offer, derive_destination

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "SessionManager",
    "create_session_manager",
    "STEP_ORDER",
    "next_step",
    "OfferStore",
    "chunk_offer",
    "derive_destination"
]
