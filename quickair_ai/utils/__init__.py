"""
Utilities Module
Logging setup, input validation and text helpers
"""

from .ai_helpers import (
    destination_code,
    destination_display_name,
    truncate_text
)
from .logger import configure_logging
from .validation import ValidationService, validation_service, parse_date

__all__ = [
    "destination_code",
    "destination_display_name",
    "truncate_text",
    "configure_logging",
    "ValidationService",
    "validation_service",
    "parse_date"
]
