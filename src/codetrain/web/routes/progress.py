"""Progress tracking endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from codetrain.core.catalog import ModuleCatalog
from codetrain.db.database import Database
from codetrain.db.progress_repository import get_progress_for_user, upsert_progress
from codetrain.web.dependencies import get_catalog, get_database, require_session
from codetrain.web.schemas import (
    ErrorResponse,
    MessageResponse,
    ProgressEntry,
    ProgressListResponse,
    ProgressSaveRequest,
)
from codetrain.web.sessions import Session

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/progress",
    tags=["progress"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.post("", response_model=MessageResponse)
async def save_progress(
    payload: ProgressSaveRequest,
    session: Session = Depends(require_session),
    db: Database = Depends(get_database),
    catalog: ModuleCatalog = Depends(get_catalog),
) -> MessageResponse:
    """Save the caller's progress on a module, replacing any earlier save."""
    if catalog.get(payload.module_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Module not found",
        )

    upsert_progress(
        db,
        user_id=session.user_id,
        module_id=payload.module_id,
        completed=payload.completed,
        score=payload.score,
        time_spent=payload.time_spent,
    )

    logger.info(
        "progress_saved",
        user_id=session.user_id,
        module_id=payload.module_id,
        completed=payload.completed,
    )
    return MessageResponse(message="Progress saved successfully")


@router.get("", response_model=ProgressListResponse)
async def get_progress(
    session: Session = Depends(require_session),
    db: Database = Depends(get_database),
) -> ProgressListResponse:
    """List the caller's progress rows with module titles."""
    records = get_progress_for_user(db, session.user_id)
    entries = [ProgressEntry(**r.to_dict()) for r in records]
    return ProgressListResponse(progress=entries, count=len(entries))
