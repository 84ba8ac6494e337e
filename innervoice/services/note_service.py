# note service: persistence plus the analysis enrichment pipeline
#
# create / update pipeline:
#   1. persist the raw note (create) or the new content (update)
#   2. fetch recent notes for context, best-effort
#   3. build the analysis prompt
#   4. call gemini and parse the reply, rule-based fallback on any failure
#   5. persist tone, encoded analysis and tags in one write
#   6. on create only: compose the long-form expansion, local template on failure
#   7. return the enriched note
#
# persistence errors abort the request. analysis and expansion errors never do.

import asyncio
import logging
import uuid
import weakref
from datetime import datetime, timezone
from typing import Callable, NamedTuple, Optional, Protocol

from innervoice.exceptions import NoteNotFoundError, NoteValidationError
from innervoice.models.analysis import AIAnalysis, encode_analysis
from innervoice.models.note import Note, NoteDraft
from innervoice.models.profile import UserProfile
from innervoice.services.expansion import build_expansion_prompt, follows_expansion_layout, render_expansion
from innervoice.services.fallback_analyzer import FallbackAnalyzer
from innervoice.services.note_store import NoteStore
from innervoice.services.prompt_builder import build_analysis_prompt
from innervoice.services.response_parser import count_recognized_labels, parse_analysis_response

logger = logging.getLogger(__name__)

SOURCE_MODEL = "model"
SOURCE_FALLBACK = "fallback"


class TextModel(Protocol):
    async def generate(self, prompt: str) -> str: ...


class AnalysisOutcome(NamedTuple):
    analysis: AIAnalysis
    source: str  # SOURCE_MODEL or SOURCE_FALLBACK


def _analysis_fields(analysis: AIAnalysis) -> dict:
    """the tone / analysis / tags triple, always written together"""
    return {
        "emotional_tone": analysis.emotional_tone,
        "ai_analysis": encode_analysis(analysis),
        "tags": list(analysis.main_emotions),
    }


class NoteService:
    """orchestrates note storage, gemini analysis and expansion"""

    def __init__(
        self,
        store: NoteStore,
        model_client: TextModel,
        fallback: Optional[FallbackAnalyzer] = None,
        *,
        context_limit: int = 10,
        related_limit: int = 5,
        max_length: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.model_client = model_client
        self.fallback = fallback or FallbackAnalyzer()
        self.context_limit = context_limit
        self.related_limit = related_limit
        self.max_length = max_length
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        # per-note locks so edits of the same note run one after another
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    # reads

    async def get_note(self, note_id: str) -> Note:
        note = await self.store.find_by_id(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def list_notes(self, limit: int = 50, offset: int = 0) -> list[Note]:
        return await self.store.find_all(limit=limit, offset=offset)

    async def search_notes(
        self,
        query: Optional[str] = None,
        emotions: Optional[list[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Note]:
        return await self.store.search(query=query, emotions=emotions, start=start, end=end, limit=limit, offset=offset)

    async def find_related(self, emotion: str, exclude_id: Optional[str] = None) -> list[Note]:
        """up to related_limit notes tagged with the emotion, excluding one note"""
        if not emotion or not emotion.strip():
            raise NoteValidationError("Emotion is required")
        return await self.store.find_by_tag(emotion.strip(), exclude_id=exclude_id, limit=self.related_limit)

    # writes

    async def create_note(self, content: str, profile: Optional[UserProfile] = None) -> Note:
        """store a note, analyse it, expand it, and return the enriched note"""
        content = self._validate_content(content)
        note_id = str(uuid.uuid4())

        # held from insert to the enrichment write, so an edit that sees the new note waits for it
        async with self._lock_for(note_id):
            await self.store.create(NoteDraft(id=note_id, content=content))

            context = await self._recent_context(exclude_id=note_id)
            outcome = await self.analyze(content, profile, context)
            expansion = await self.expand(content, outcome.analysis)

            fields = _analysis_fields(outcome.analysis)
            fields["ai_expansion"] = expansion
            if not await self.store.update(note_id, fields):
                # deleted while the analysis was running
                raise NoteNotFoundError(note_id)

        logger.info(f"Note created: {note_id} (analysis: {outcome.source})")
        return await self.get_note(note_id)

    async def update_note(self, note_id: str, content: str, profile: Optional[UserProfile] = None) -> Note:
        """replace a note's content and re-run the analysis. the expansion is left as is."""
        content = self._validate_content(content)

        async with self._lock_for(note_id):
            if await self.store.find_by_id(note_id) is None:
                raise NoteNotFoundError(note_id)
            if not await self.store.update(note_id, {"content": content}):
                raise NoteNotFoundError(note_id)

            context = await self._recent_context(exclude_id=note_id)
            outcome = await self.analyze(content, profile, context)
            if not await self.store.update(note_id, _analysis_fields(outcome.analysis)):
                raise NoteNotFoundError(note_id)

        logger.info(f"Note updated: {note_id} (analysis: {outcome.source})")
        return await self.get_note(note_id)

    async def delete_note(self, note_id: str) -> None:
        async with self._lock_for(note_id):
            if not await self.store.delete(note_id):
                raise NoteNotFoundError(note_id)
        logger.info(f"Note deleted: {note_id}")

    # pipeline steps

    async def analyze(
        self,
        content: str,
        profile: Optional[UserProfile] = None,
        recent_notes: Optional[list[Note]] = None,
    ) -> AnalysisOutcome:
        """gemini analysis of the content, rule-based analysis if anything goes wrong"""
        try:
            prompt = build_analysis_prompt(content, profile, recent_notes, now=self.clock())
            raw = await self.model_client.generate(prompt)
            if count_recognized_labels(raw) == 0:
                logger.warning("Analysis degraded: model reply had no recognized fields")
            else:
                return AnalysisOutcome(parse_analysis_response(raw), SOURCE_MODEL)
        except Exception as e:
            logger.warning(f"Analysis degraded, using rule-based fallback: {e}")

        return AnalysisOutcome(self.fallback.analyze(content, profile), SOURCE_FALLBACK)

    async def expand(self, content: str, analysis: AIAnalysis) -> str:
        """gemini expansion of the note, local template if the reply is missing or off-layout"""
        try:
            raw = await self.model_client.generate(build_expansion_prompt(content, analysis))
            if follows_expansion_layout(raw, analysis):
                return raw.strip()
            logger.warning("Expansion degraded: model reply did not follow the section layout")
        except Exception as e:
            logger.warning(f"Expansion degraded, using local template: {e}")

        return render_expansion(content, analysis)

    # helpers

    def _validate_content(self, content: Optional[str]) -> str:
        if not isinstance(content, str) or not content.strip():
            raise NoteValidationError("Note content is required")
        content = content.strip()
        if self.max_length is not None and len(content) > self.max_length:
            raise NoteValidationError(f"Note content must be at most {self.max_length} characters")
        return content

    async def _recent_context(self, exclude_id: Optional[str] = None) -> list[Note]:
        """most recent notes other than the one being analysed, empty on failure"""
        try:
            notes = await self.store.find_all(limit=self.context_limit + 1, offset=0)
        except Exception as e:
            logger.warning(f"Could not load recent notes for context: {e}")
            return []
        return [n for n in notes if n.id != exclude_id][: self.context_limit]

    def _lock_for(self, note_id: str) -> asyncio.Lock:
        lock = self._locks.get(note_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[note_id] = lock
        return lock
