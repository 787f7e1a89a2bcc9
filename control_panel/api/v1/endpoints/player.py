# control_panel/api/v1/endpoints/player.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status

from control_panel.api.v1.dependencies import get_current_moderator
from control_panel.core.errors import NotFoundError, StoreError, ValidationError
from control_panel.core.limiter import limiter
from control_panel.db.mongodb_utils import get_store
from control_panel.db.store import RecordStore
from control_panel.schemas.player import PlayerProgress, PlayerStatus, PlayerToggle
from control_panel.schemas.user import ModeratorSession
from control_panel.services.moderation_session import session_for

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=PlayerStatus)
async def read_player(moderator: ModeratorSession = Depends(get_current_moderator)):
    return session_for(moderator).player_status()

@router.post("/toggle", response_model=PlayerStatus)
async def toggle_player(
    body: PlayerToggle,
    store: RecordStore = Depends(get_store),
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    """Plays or pauses a track from the moderator's current tab."""
    session = session_for(moderator)
    try:
        await session.toggle_playback(store, body.track_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except StoreError as e:
        logger.error(f"Error loading tracks for playback: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to load data: {e.message}")

    return session.player_status()

@router.post("/progress", response_model=PlayerStatus)
@limiter.exempt
async def report_progress(
    body: PlayerProgress,
    moderator: ModeratorSession = Depends(get_current_moderator),
):
    """Position reports from the browser's audio element, about once a second while playing."""
    session = session_for(moderator)
    session.update_progress(body.position_seconds, body.duration_seconds)
    return session.player_status()

@router.post("/stop", response_model=PlayerStatus)
async def stop_player(moderator: ModeratorSession = Depends(get_current_moderator)):
    """Stops the preview. Also sent when a track plays to the end."""
    session = session_for(moderator)
    session.stop_playback()
    return session.player_status()
