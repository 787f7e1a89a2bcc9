# control_panel/api/v1/endpoints/moderators.py
from fastapi import APIRouter, Depends
from control_panel.schemas.user import ModeratorSession
from control_panel.api.v1.dependencies import get_current_moderator

router = APIRouter()

@router.get("/me", response_model=ModeratorSession)
async def read_moderator_me(moderator: ModeratorSession = Depends(get_current_moderator)):
    """The moderator the current session token was issued to."""
    return moderator
