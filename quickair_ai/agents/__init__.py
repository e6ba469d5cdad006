# agents/__init__.py
"""
AI Agents Package

Contains the chat-facing agent:
- ConciergeAgent: runs one message through NLU, retrieval and session updates
"""

from .concierge import ConciergeAgent, advance_step, SYSTEM_PROMPT

__all__ = [
    "ConciergeAgent",
    "advance_step",
    "SYSTEM_PROMPT"
]
