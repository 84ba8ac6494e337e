# note pipeline errors
# raised by the store and the note service, mapped to http errors in the routers


class NoteError(Exception):
    """base class for note pipeline errors"""


class NoteValidationError(NoteError):
    """note content is empty or too long"""


class NoteNotFoundError(NoteError):
    """no note exists with the given id"""

    def __init__(self, note_id: str):
        super().__init__(f"Note not found: {note_id}")
        self.note_id = note_id


class DuplicateNoteError(NoteError):
    """a note with the given id already exists"""

    def __init__(self, note_id: str):
        super().__init__(f"Note already exists: {note_id}")
        self.note_id = note_id


class PersistenceError(NoteError):
    """the note store could not complete a read or write"""


class ModelInvocationError(Exception):
    """the generative model call failed, timed out, or returned nothing"""
