# control_panel/api/v1/endpoints/tracks.py
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from control_panel.api.v1.dependencies import get_current_moderator
from control_panel.core.config import RATE_LIMITS
from control_panel.core.errors import (
    ConflictError,
    NotFoundError,
    OrphanError,
    StoreError,
    ValidationError,
)
from control_panel.core.limiter import limiter
from control_panel.core.validation import validate_track_id
from control_panel.db.mongodb_utils import get_store
from control_panel.db.store import RecordStore
from control_panel.schemas.track import ApprovalResponse, CatalogStats, PendingTrack, PublishedTrack
from control_panel.schemas.user import ModeratorSession
from control_panel.services import approval
from control_panel.services.moderation_session import DashboardTab, load_stats, load_tab

logger = logging.getLogger(__name__)

router = APIRouter()

def _store_failure(action: str, e: StoreError) -> HTTPException:
    logger.error(f"Error {action}: {e}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to {action}: {e.message}")

def _checked_id(pending_id: str) -> str:
    try:
        return validate_track_id(pending_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

@router.get("/pending", response_model=List[PendingTrack])
async def list_pending_tracks(
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    """Submissions waiting for review, newest first."""
    try:
        return await load_tab(store, DashboardTab.PENDING)
    except StoreError as e:
        raise _store_failure("load data", e)

@router.get("/approved", response_model=List[PublishedTrack])
async def list_approved_tracks(
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    """Published tracks outside the legacy range."""
    try:
        return await load_tab(store, DashboardTab.APPROVED)
    except StoreError as e:
        raise _store_failure("load data", e)

@router.get("/all", response_model=List[PublishedTrack])
async def list_all_tracks(
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    try:
        return await load_tab(store, DashboardTab.ALL)
    except StoreError as e:
        raise _store_failure("load data", e)

@router.get("/stats", response_model=CatalogStats)
async def catalog_stats(
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    return await load_stats(store)

@router.post("/{pending_id}/approve", response_model=ApprovalResponse)
@limiter.limit(RATE_LIMITS["moderation"])
async def approve_track(
    request: Request,
    pending_id: str,
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    """
    Publishes a pending track under the next free audio-<N> id.

    A 409 means another moderator took that id first; approving again
    rescans the catalog and picks the next one.
    """
    pending_id = _checked_id(pending_id)
    logger.info(f"Moderator {moderator.artist_name} approving {pending_id}")

    try:
        published_id = await approval.approve(store, pending_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ConflictError as e:
        logger.warning(f"Id collision while approving {pending_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another track was published at the same time, please approve again",
        )
    except OrphanError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
    except StoreError as e:
        raise _store_failure("approve track", e)

    return ApprovalResponse(
        pending_id=pending_id,
        published_id=published_id,
        message=f"Track approved! Published as {published_id}",
    )

@router.post("/{pending_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["moderation"])
async def reject_track(
    request: Request,
    pending_id: str,
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    """Permanently deletes a pending track."""
    pending_id = _checked_id(pending_id)
    logger.info(f"Moderator {moderator.artist_name} rejecting {pending_id}")

    try:
        await approval.reject(store, pending_id)
    except StoreError as e:
        raise _store_failure("reject track", e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
