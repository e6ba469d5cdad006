"""
Chatbot Service Configuration
Loads settings from environment variables
"""

import os
from typing import List
from dotenv import load_dotenv
from loguru import logger

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment"""

    # Offer documents (flat-file RAG corpus)
    OFFERS_DIR: str = os.getenv("OFFERS_DIR", os.path.join("data", "tours"))

    # Session storage: "memory" or "redis"
    SESSION_BACKEND: str = os.getenv("SESSION_BACKEND", "memory")
    SESSION_TTL_HOURS: int = int(os.getenv("SESSION_TTL_HOURS", "24"))
    MAX_CONVERSATION_TURNS: int = int(os.getenv("MAX_CONVERSATION_TURNS", "10"))

    # Redis Configuration
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))

    # Retrieval
    RAG_DEFAULT_LIMIT: int = int(os.getenv("RAG_DEFAULT_LIMIT", "5"))
    DEFAULT_LANGUAGE: str = os.getenv("DEFAULT_LANGUAGE", "ar")

    # LLM (called by the chat layer, not by the NLU/RAG core)
    GEMINI_KEY: str = os.getenv("GEMINI_KEY", "")
    MODEL: str = os.getenv("MODEL", "gemini-2.0-flash-001")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_ENV: str = os.getenv("API_ENV", "development")

    # CORS Configuration
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def redis_url(self) -> str:
        """Get Redis connection URL"""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @property
    def session_ttl_seconds(self) -> int:
        return self.SESSION_TTL_HOURS * 3600


def validate_config(config: "Settings") -> bool:
    """
    Warn about missing optional configuration.

    The service still starts without an LLM key; replies fall back to
    retrieval-only answers.
    """
    if not config.GEMINI_KEY:
        logger.warning("GEMINI_KEY is not set - chat replies will use retrieval-only fallback")
        return False
    return True


# Global settings instance
settings = Settings()
