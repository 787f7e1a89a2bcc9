# control_panel/api/v1/api.py
from fastapi import APIRouter
from control_panel.api.v1.endpoints import auth, moderators, player, tracks

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(moderators.router, prefix="/moderators", tags=["moderators"])
api_router.include_router(tracks.router, prefix="/tracks", tags=["tracks"])
api_router.include_router(player.router, prefix="/player", tags=["player"])
