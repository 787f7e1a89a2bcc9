# control_panel/schemas/user.py
from enum import Enum
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
import uuid

class Identity(BaseModel):
    """What the auth provider hands back for a successful sign-in."""
    id: str
    email: EmailStr

class UserInDB(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    email: EmailStr
    hashed_password: str
    is_active: bool = True

    class Config:
        from_attributes = True
        extra = "ignore"

class Profile(BaseModel):
    id: str
    artist_name: str

    class Config:
        extra = "ignore"

class ModeratorSession(BaseModel):
    """An authorized moderator, passed explicitly to every moderation operation."""
    user_id: str
    email: str
    artist_name: str
    # Token claim naming this login; dashboard state is kept per session_id
    session_id: Optional[str] = Field(None, exclude=True)

    @property
    def session_key(self) -> str:
        return self.session_id or self.user_id

    @property
    def short_id(self) -> str:
        return f"{self.user_id[:8]}..."

class SessionStatus(str, Enum):
    AUTHORIZED = "authorized"
    AUTH_ERROR = "auth_error"
    ACCESS_DENIED = "access_denied"

class SessionOutcome(BaseModel):
    status: SessionStatus
    user: Optional[Identity] = None
    artist_name: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_authorized(self) -> bool:
        return self.status == SessionStatus.AUTHORIZED

    def to_session(self) -> ModeratorSession:
        if not self.is_authorized:
            raise ValueError(f"Outcome {self.status.value} does not carry a session")
        return ModeratorSession(
            user_id=self.user.id,
            email=self.user.email,
            artist_name=self.artist_name,
        )

class Token(BaseModel):
    access_token: str
    token_type: str
    artist_name: str
