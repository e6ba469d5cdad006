"""
Booking Assistant Service - FastAPI Application

Wires the conversation core (sessions, NLU, retrieval, validation)
into a small HTTP surface. The LLM is optional: pass a
generate(messages) -> str callable to create_app(); without one,
replies are composed from retrieved offer content.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from . import __version__
from .agents.concierge import ConciergeAgent, GenerateFn
from .api.chat import router as chat_router
from .api.offers import router as offers_router
from .config import Settings, settings as default_settings, validate_config
from .interfaces.session_store import SessionManager, create_session_manager
from .nlu.intent_service import IntentService
from .retrieval.rag_service import RAGService
from .utils.logger import configure_logging
from .utils.validation import ValidationService


# ============================================
# Application Factory
# ============================================

def create_app(
    config: Optional[Settings] = None,
    sessions: Optional[SessionManager] = None,
    rag: Optional[RAGService] = None,
    generate: Optional[GenerateFn] = None
) -> FastAPI:
    """
    Build the FastAPI app. Collaborators default to ones built from config.
    """
    config = config or default_settings
    configure_logging(config.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler"""
        logger.info("=" * 50)
        logger.info("Starting Booking Assistant Service")
        logger.info("=" * 50)
        logger.info(f"Environment: {config.API_ENV}")
        logger.info(f"Session backend: {config.SESSION_BACKEND}")
        logger.info(f"Offers directory: {config.OFFERS_DIR}")
        validate_config(config)

        yield

        logger.info("Booking Assistant Service shutdown complete")

    app = FastAPI(
        title="Booking Assistant Service",
        description="Bilingual (Arabic/English) travel booking assistant: rule-based NLU, "
                    "multi-turn session state and lexical retrieval over travel offers.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Services (shared, stateless apart from the session stores)
    app.state.sessions = sessions or create_session_manager(config)
    app.state.intent_service = IntentService()
    app.state.rag = rag or RAGService(data_dir=config.OFFERS_DIR)
    app.state.validation = ValidationService()
    app.state.concierge = ConciergeAgent(
        sessions=app.state.sessions,
        intent_service=app.state.intent_service,
        rag=app.state.rag,
        validation=app.state.validation,
        generate=generate,
    )

    app.include_router(chat_router)
    app.include_router(offers_router)

    @app.get("/health")
    async def health_check():
        """Service health and component status"""
        return {
            "status": "healthy",
            "service": "quickair-ai",
            "version": __version__,
            "components": {
                "sessions": config.SESSION_BACKEND,
                "offers": "loaded" if app.state.rag.store.loaded else "lazy",
                "llm": "configured" if generate else "fallback",
            },
            "timestamp": datetime.utcnow().isoformat()
        }

    return app


app = create_app()


# ============================================
# Main
# ============================================

def run():
    import uvicorn
    uvicorn.run(
        "quickair_ai.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=default_settings.API_ENV == "development"
    )


if __name__ == "__main__":
    run()
