"""
FastAPI dependencies (record store, error mapping)
"""
from fastapi import HTTPException, Response, status

from fleetscore.config import get_settings
from fleetscore.domain.identity import MissingIdentifierError
from fleetscore.infrastructure.db.session import get_session_factory
from fleetscore.infrastructure.records import RecordStore


def get_record_store() -> RecordStore:
    """
    Record store bound to the process-wide session factory

    Usage:
        @router.get("/fleet/ranking")
        def ranking(store: RecordStore = Depends(get_record_store)):
            ...
    """
    return RecordStore(get_session_factory())


def missing_identifier(exc: MissingIdentifierError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=str(exc),
    )


def set_cache_headers(response: Response) -> None:
    """Callers may reuse score responses for a few minutes."""
    max_age = get_settings().RESULT_MAX_AGE_SECONDS
    response.headers["Cache-Control"] = f"private, max-age={max_age}"
