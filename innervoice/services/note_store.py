# note store: durable note records in the mongodb notes collection
# every write is a single acknowledged document operation, so updates are atomic

import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from innervoice.exceptions import DuplicateNoteError, PersistenceError
from innervoice.models.note import Note, NoteDraft
from innervoice.services.db import Database

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

# fields callers may change through update()
MUTABLE_FIELDS = frozenset({
    "content", "mood", "emotional_tone", "ai_analysis", "ai_expansion", "tags",
})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """fixed-width utc iso string so lexical order matches time order"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _doc_to_note(doc: dict) -> Note:
    """convert a mongodb note document to the note model"""
    created_at = doc.get("created_at")
    return Note(
        id=doc.get("note_id", str(doc.get("_id", ""))),
        content=doc.get("content", ""),
        mood=doc.get("mood"),
        emotionalTone=doc.get("emotional_tone"),
        aiAnalysis=doc.get("ai_analysis"),
        aiExpansion=doc.get("ai_expansion"),
        tags=doc.get("tags") or [],
        createdAt=created_at,
        updatedAt=doc.get("updated_at") or created_at,
    )


class NoteStore:
    """create, read, update and delete notes keyed by note id"""

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or _utcnow

    async def create(self, draft: NoteDraft) -> Note:
        """insert a new note. raises DuplicateNoteError if the id is taken."""
        now = format_timestamp(self.clock())
        doc = {
            "note_id": draft.id,
            "content": draft.content,
            "mood": draft.mood,
            "emotional_tone": draft.emotional_tone,
            "ai_analysis": draft.ai_analysis,
            "ai_expansion": draft.ai_expansion,
            "tags": list(draft.tags),
            "created_at": format_timestamp(draft.created_at) if draft.created_at else now,
            "updated_at": format_timestamp(draft.updated_at) if draft.updated_at else now,
        }
        try:
            await self.db.notes.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateNoteError(draft.id) from e
        except PyMongoError as e:
            logger.error(f"Could not insert note {draft.id}: {e}")
            raise PersistenceError(f"Could not insert note {draft.id}") from e

        logger.info(f"Note stored: {draft.id}")
        return _doc_to_note(doc)

    async def find_by_id(self, note_id: str) -> Optional[Note]:
        """fetch a note, None if it does not exist"""
        try:
            doc = await self.db.notes.find_one({"note_id": note_id})
        except PyMongoError as e:
            logger.error(f"Could not read note {note_id}: {e}")
            raise PersistenceError(f"Could not read note {note_id}") from e
        return _doc_to_note(doc) if doc else None

    async def find_all(self, limit: int = DEFAULT_LIMIT, offset: int = 0) -> list[Note]:
        """notes newest first, paginated"""
        return await self._find({}, limit, offset)

    async def find_by_tag(self, tag: str, exclude_id: Optional[str] = None, limit: int = 5) -> list[Note]:
        """newest notes whose tags contain the given label"""
        query: dict = {"tags": tag}
        if exclude_id:
            query["note_id"] = {"$ne": exclude_id}
        return await self._find(query, limit, 0)

    async def search(
        self,
        query: Optional[str] = None,
        emotions: Optional[list[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> list[Note]:
        """filter notes by content text, any of the given tags, and a created-at range"""
        conditions: dict = {}
        if query and query.strip():
            conditions["content"] = {"$regex": re.escape(query.strip()), "$options": "i"}
        if emotions:
            conditions["tags"] = {"$in": list(emotions)}
        date_range = {}
        if start is not None:
            date_range["$gte"] = format_timestamp(start)
        if end is not None:
            date_range["$lte"] = format_timestamp(end)
        if date_range:
            conditions["created_at"] = date_range
        return await self._find(conditions, limit, offset)

    async def update(self, note_id: str, fields: dict) -> bool:
        """apply the given fields and refresh updated_at in one write.
        returns False if the note does not exist, never inserts."""
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update note fields: {sorted(unknown)}")

        changes = dict(fields)
        if "tags" in changes:
            changes["tags"] = list(changes["tags"] or [])
        changes["updated_at"] = format_timestamp(self.clock())

        try:
            result = await self.db.notes.update_one({"note_id": note_id}, {"$set": changes})
        except PyMongoError as e:
            logger.error(f"Could not update note {note_id}: {e}")
            raise PersistenceError(f"Could not update note {note_id}") from e
        return result.matched_count > 0

    async def delete(self, note_id: str) -> bool:
        """remove a note. returns False if it was already gone."""
        try:
            result = await self.db.notes.delete_one({"note_id": note_id})
        except PyMongoError as e:
            logger.error(f"Could not delete note {note_id}: {e}")
            raise PersistenceError(f"Could not delete note {note_id}") from e
        return result.deleted_count > 0

    async def _find(self, query: dict, limit: int, offset: int) -> list[Note]:
        # mongodb treats limit 0 as unlimited
        if limit <= 0:
            return []
        try:
            cursor = (
                self.db.notes.find(query)
                .sort("created_at", DESCENDING)
                .skip(max(0, offset))
                .limit(limit)
            )
            notes = []
            async for doc in cursor:
                notes.append(_doc_to_note(doc))
        except PyMongoError as e:
            logger.error(f"Could not list notes: {e}")
            raise PersistenceError("Could not list notes") from e
        return notes
