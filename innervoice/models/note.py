# note models: stored note, request payloads and response schemas
# field aliases match the camelCase json the frontend consumes

import logging
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ValidationError

from innervoice.models.analysis import AIAnalysis, decode_analysis
from innervoice.models.profile import UserProfile

logger = logging.getLogger(__name__)


class NoteDraft(BaseModel):
    """a note about to be inserted. timestamps default to insertion time."""
    id: str
    content: str
    mood: Optional[str] = None
    emotional_tone: Optional[str] = Field(None, alias="emotionalTone")
    ai_analysis: Optional[str] = Field(None, alias="aiAnalysis")
    ai_expansion: Optional[str] = Field(None, alias="aiExpansion")
    tags: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = {"populate_by_name": True}


class Note(BaseModel):
    """a journal note as read from the store"""
    id: str
    content: str
    mood: Optional[str] = None
    emotional_tone: Optional[str] = Field(None, alias="emotionalTone")
    ai_analysis: Optional[str] = Field(None, alias="aiAnalysis")
    ai_expansion: Optional[str] = Field(None, alias="aiExpansion")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = {"populate_by_name": True}

    def parsed_analysis(self) -> Optional[AIAnalysis]:
        """decode the stored analysis, None if absent or unreadable"""
        if not self.ai_analysis:
            return None
        try:
            return decode_analysis(self.ai_analysis)
        except ValidationError as e:
            logger.warning(f"Stored analysis for note {self.id} is unreadable: {e}")
            return None


class NoteCreate(BaseModel):
    """payload for creating a note"""
    content: str = Field(..., min_length=1, description="note text")
    user_profile: Optional[UserProfile] = Field(None, alias="userProfile")

    model_config = {"populate_by_name": True}


class NoteUpdate(BaseModel):
    """payload for editing a note's content, triggers re-analysis"""
    content: str = Field(..., min_length=1, description="new note text")
    user_profile: Optional[UserProfile] = Field(None, alias="userProfile")

    model_config = {"populate_by_name": True}


class NoteCreateResponse(BaseModel):
    """response after creating a note"""
    note: Note
    analysis: Optional[AIAnalysis] = None


class NoteUpdateResponse(BaseModel):
    """response after editing a note"""
    success: bool = True
    note: Note


class RelatedNotesResponse(BaseModel):
    """notes sharing an emotion tag"""
    related_notes: list[Note] = Field(default_factory=list, alias="relatedNotes")
    emotion: str
    count: int = 0

    model_config = {"populate_by_name": True}
