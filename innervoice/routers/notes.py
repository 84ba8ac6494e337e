# notes router: create, read, edit and delete journal notes
# handlers validate input and forward to the note service, errors map to http codes

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from innervoice.config import settings
from innervoice.dependencies import get_note_service
from innervoice.exceptions import NoteNotFoundError, NoteValidationError, PersistenceError
from innervoice.models.note import (
    Note,
    NoteCreate,
    NoteCreateResponse,
    NoteUpdate,
    NoteUpdateResponse,
    RelatedNotesResponse,
)
from innervoice.services.note_service import NoteService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notes", tags=["notes"])


def _not_found(note_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Note not found: {note_id}",
    )


def _storage_failure(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("", response_model=list[Note])
async def list_notes(
    limit: int = Query(settings.NOTE_LIST_DEFAULT_LIMIT, ge=1, le=settings.NOTE_LIST_MAX_LIMIT),
    skip: int = Query(0, ge=0),
    q: Optional[str] = Query(None, description="text to search for in note content"),
    emotions: Optional[list[str]] = Query(None, description="match notes tagged with any of these"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    service: NoteService = Depends(get_note_service),
):
    """list notes newest first, optionally filtered"""
    try:
        if q or emotions or start_date or end_date:
            return await service.search_notes(
                query=q,
                emotions=emotions,
                start=start_date,
                end=end_date,
                limit=limit,
                offset=skip,
            )
        return await service.list_notes(limit=limit, offset=skip)
    except PersistenceError:
        raise _storage_failure("fetch notes")


@router.post("", response_model=NoteCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreate,
    service: NoteService = Depends(get_note_service),
):
    """store a note and return it with its analysis and expansion.
    409 when the note is deleted before its analysis is written."""
    try:
        note = await service.create_note(body.content, body.user_profile)
    except NoteValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoteNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Note '{e.note_id}' was deleted while it was being created",
        )
    except PersistenceError:
        raise _storage_failure("create note")

    return NoteCreateResponse(note=note, analysis=note.parsed_analysis())


@router.get("/related", response_model=RelatedNotesResponse)
async def related_notes(
    emotion: str = Query(..., min_length=1, description="emotion tag to match"),
    exclude_id: Optional[str] = Query(None, alias="excludeId"),
    service: NoteService = Depends(get_note_service),
):
    """notes sharing an emotion tag, excluding the note being viewed"""
    try:
        notes = await service.find_related(emotion, exclude_id=exclude_id)
    except NoteValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PersistenceError:
        raise _storage_failure("find related notes")

    return RelatedNotesResponse(relatedNotes=notes, emotion=emotion, count=len(notes))


@router.get("/{note_id}", response_model=Note)
async def get_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
):
    try:
        return await service.get_note(note_id)
    except NoteNotFoundError:
        raise _not_found(note_id)
    except PersistenceError:
        raise _storage_failure("load note")


@router.put("/{note_id}", response_model=NoteUpdateResponse)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    service: NoteService = Depends(get_note_service),
):
    """edit a note's content, re-analyses it"""
    try:
        note = await service.update_note(note_id, body.content, body.user_profile)
    except NoteValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoteNotFoundError:
        raise _not_found(note_id)
    except PersistenceError:
        raise _storage_failure("update note")

    return NoteUpdateResponse(success=True, note=note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
):
    try:
        await service.delete_note(note_id)
    except NoteNotFoundError:
        raise _not_found(note_id)
    except PersistenceError:
        raise _storage_failure("delete note")
