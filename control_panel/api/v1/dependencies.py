# control_panel/api/v1/dependencies.py
import logging
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from control_panel.auth.provider import MongoAuthProvider
from control_panel.core.security import verify_token
from control_panel.db.mongodb_utils import get_store
from control_panel.db.store import RecordStore
from control_panel.schemas.user import ModeratorSession

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

async def get_auth_provider(store: RecordStore = Depends(get_store)) -> MongoAuthProvider:
    return MongoAuthProvider(store)

def _extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Bearer header first, then the httponly cookie set at login."""
    if bearer:
        return bearer

    token = request.cookies.get("access_token")
    # The cookie value is stored as 'Bearer <token>'
    if token and token.startswith("Bearer "):
        token = token.split(" ", 1)[1]
    return token or None

def _session_from_token(token: str) -> ModeratorSession:
    payload = verify_token(token)
    return ModeratorSession(
        user_id=payload["sub"],
        email=payload["email"],
        artist_name=payload["artist_name"],
        session_id=payload.get("session_id"),
    )

async def get_current_moderator(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
) -> ModeratorSession:
    """Decode the session token and return the moderator it was issued to."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = _extract_token(request, bearer)
    if not token:
        raise credentials_exception

    try:
        moderator = _session_from_token(token)
    except (JWTError, ValueError, KeyError) as e:
        logger.warning(f"Session token rejected: {e}")
        raise credentials_exception

    request.state.moderator = moderator
    return moderator

async def try_get_current_moderator(request: Request) -> Optional[ModeratorSession]:
    """Same as get_current_moderator but returns None instead of raising, for pages."""
    bearer = None
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        bearer = auth_header.split(" ", 1)[1]

    token = _extract_token(request, bearer)
    if not token:
        return None

    try:
        moderator = _session_from_token(token)
    except (JWTError, ValueError, KeyError) as e:
        logger.warning(f"Token validation failed in try_get_current_moderator: {e}")
        return None

    request.state.moderator = moderator
    return moderator
