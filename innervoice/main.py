# innervoice api
# fastapi app with async mongodb, gemini note analysis, and rule-based fallback

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from innervoice.config import settings
from innervoice.services.db import db
from innervoice.services.llm_client import GeminiClient
from innervoice.services.note_service import NoteService
from innervoice.services.note_store import NoteStore
from innervoice.routers import notes, analytics

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb, build the gemini client and note service. shutdown: close connection."""
    logger.info("Starting InnerVoice backend...")
    await db.connect()
    app.state.note_service = NoteService(
        store=NoteStore(db),
        model_client=GeminiClient.from_settings(settings),
        context_limit=settings.CONTEXT_NOTES_LIMIT,
        related_limit=settings.RELATED_NOTES_LIMIT,
        max_length=settings.NOTE_MAX_LENGTH,
    )
    logger.info("InnerVoice backend ready")
    yield
    logger.info("Shutting down InnerVoice backend...")
    await db.close()


app = FastAPI(
    title="InnerVoice API",
    description="Backend API for the InnerVoice journal: notes, gemini emotion analysis, and analytics",
    version="0.1.0",
    lifespan=lifespan,
)

# cors: allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(notes.router)
app.include_router(analytics.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "innervoice-api"}
