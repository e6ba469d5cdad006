"""
Test suites for small shared helpers and configuration.

Suite 1: TestDestinationNames – display name <-> code mapping
Suite 2: TestText             – truncation
Suite 3: TestSettings         – derived settings and config warnings
"""

from unittest.mock import MagicMock

import pytest

from quickair_ai.config import Settings, validate_config
from quickair_ai.schemas.ai_schemas import Language
from quickair_ai.utils.ai_helpers import destination_code, destination_display_name, truncate_text


# ════════════════════════════════════════════════════════════
# Suite 1: Destination names
# ════════════════════════════════════════════════════════════

class TestDestinationNames:

    @pytest.mark.parametrize("name,code", [
        ("Sharm El Sheikh", "sharm_el_sheikh"),
        ("Sahl Hasheesh", "sahl_hashish"),
        (" Turkey ", "istanbul"),
        ("Atlantis", "atlantis"),
    ])
    def test_code(self, name, code):
        assert destination_code(name) == code

    def test_display_name(self):
        assert destination_display_name("hurghada", Language.AR) == "الغردقة"
        assert destination_display_name("hurghada", "en") == "Hurghada"
        assert destination_display_name("atlantis", "en") == "atlantis"


# ════════════════════════════════════════════════════════════
# Suite 2: Text
# ════════════════════════════════════════════════════════════

class TestText:

    def test_truncate(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("a" * 20, 10) == "aaaaaaa..."
        assert len(truncate_text("a" * 500, 400)) == 400


# ════════════════════════════════════════════════════════════
# Suite 3: Settings
# ════════════════════════════════════════════════════════════

class TestSettings:

    def test_derived_values(self):
        config = Settings()
        config.CORS_ORIGINS = "http://a.test, ,http://b.test"
        config.REDIS_HOST = "cache"
        config.REDIS_PORT = 6380
        config.REDIS_DB = 2
        config.SESSION_TTL_HOURS = 2

        assert config.cors_origins_list == ["http://a.test", "http://b.test"]
        assert config.redis_url == "redis://cache:6380/2"
        assert config.session_ttl_seconds == 7200

    def test_validate_config(self):
        assert validate_config(MagicMock(GEMINI_KEY="")) is False
        assert validate_config(MagicMock(GEMINI_KEY="key")) is True
