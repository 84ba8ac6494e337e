# analytics router: dashboard stats and weekly emotion trends
# computed from the newest notes on each request

import logging
from fastapi import APIRouter, Depends, HTTPException, status

from innervoice.config import settings
from innervoice.dependencies import get_note_service
from innervoice.exceptions import PersistenceError
from innervoice.models.analytics import EmotionalTrends, NotesAnalytics
from innervoice.models.note import Note
from innervoice.services.analytics_service import compute_analytics, compute_trends
from innervoice.services.note_service import NoteService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analytics", tags=["analytics"])


async def _load_notes(service: NoteService) -> list[Note]:
    try:
        return await service.list_notes(limit=settings.ANALYTICS_SCAN_LIMIT, offset=0)
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load notes for analytics",
        )


@router.get("", response_model=NotesAnalytics)
async def get_analytics(service: NoteService = Depends(get_note_service)):
    """totals, mood average, streak and emotion distribution"""
    notes = await _load_notes(service)
    return compute_analytics(notes, now=service.clock())


@router.get("/trends", response_model=EmotionalTrends)
async def get_trends(service: NoteService = Depends(get_note_service)):
    """emotions trending up or down compared with the previous week"""
    notes = await _load_notes(service)
    return compute_trends(notes, now=service.clock())
