# fastapi dependency injection
# provides the process-wide note service built in the app lifespan

import logging
from fastapi import HTTPException, Request, status

from innervoice.services.note_service import NoteService

logger = logging.getLogger(__name__)


async def get_note_service(request: Request) -> NoteService:
    """return the note service created at startup"""
    service = getattr(request.app.state, "note_service", None)
    if service is None:
        logger.error("Note service requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return service
