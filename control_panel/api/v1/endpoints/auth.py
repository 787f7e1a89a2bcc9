# control_panel/api/v1/endpoints/auth.py
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Form, HTTPException, status, Request, Response

from control_panel.api.v1.dependencies import get_auth_provider, try_get_current_moderator
from control_panel.auth.provider import MongoAuthProvider
from control_panel.core.config import SECURE_COOKIES, ACCESS_TOKEN_EXPIRE_MINUTES, RATE_LIMITS
from control_panel.core.errors import AuthError, ValidationError
from control_panel.core.limiter import limiter
from control_panel.core.security import create_access_token
from control_panel.db.mongodb_utils import get_store
from control_panel.db.store import RecordStore
from control_panel.schemas.user import ModeratorSession, SessionStatus, Token
from control_panel.services import session_gate
from control_panel.services.moderation_session import end_session

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=Token)
@limiter.limit(RATE_LIMITS["auth"])
async def login(
    response: Response,
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    store: RecordStore = Depends(get_store),
    auth: MongoAuthProvider = Depends(get_auth_provider),
):
    """Signs a moderator in and returns a session token. The form's username is the email."""
    try:
        outcome = await session_gate.authenticate(auth, store, username, password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    if outcome.status == SessionStatus.AUTH_ERROR:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=outcome.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    if outcome.status == SessionStatus.ACCESS_DENIED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    moderator = outcome.to_session()
    access_token = create_access_token(
        data={"sub": moderator.user_id, "email": moderator.email, "artist_name": moderator.artist_name}
    )

    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        samesite="strict",
        secure=SECURE_COOKIES,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )

    logger.info(f"Login successful for moderator {moderator.artist_name}")
    return Token(access_token=access_token, token_type="bearer", artist_name=moderator.artist_name)

@router.post("/logout")
async def logout(
    response: Response,
    moderator: Optional[ModeratorSession] = Depends(try_get_current_moderator),
    auth: MongoAuthProvider = Depends(get_auth_provider),
):
    """Ends the moderator session and clears the authentication cookie."""
    if moderator is not None:
        try:
            await session_gate.sign_out(auth, moderator)
        except AuthError as e:
            logger.error(f"Logout error: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to logout: {e.message}",
            )
        end_session(moderator)

    response.delete_cookie(
        key="access_token",
        path="/",
        secure=SECURE_COOKIES,
        httponly=True,
        samesite="strict",
    )
    return {"message": "Successfully logged out"}
