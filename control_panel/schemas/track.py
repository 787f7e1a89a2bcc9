# control_panel/schemas/track.py
from enum import Enum
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class TrackState(str, Enum):
    PENDING = "pending"
    PUBLISHED = "published"


class TrackBase(BaseModel):
    id: str
    user_id: Optional[str] = None
    artist_name: Optional[str] = None
    title: Optional[str] = None
    src: Optional[str] = None
    artist_link: Optional[str] = None
    buy_link: Optional[str] = None
    # Kept as stored: BSON dates from this service, ISO strings on older rows
    created_at: Union[datetime, str]

    class Config:
        # Rows come straight from the store; ignore store-only fields such as _id
        from_attributes = True
        extra = "ignore"


class PendingTrack(TrackBase):
    """A submission waiting for a moderation decision."""
    state: TrackState = TrackState.PENDING
    cover: Optional[str] = None


class PublishedTrack(TrackBase):
    """A track in the public catalog, identified by ``audio-<N>``."""
    state: TrackState = TrackState.PUBLISHED
    pfp_url: Optional[str] = None
    # Legacy catalog rows were written with a cover column
    cover: Optional[str] = None

    def to_row(self) -> dict:
        """Store representation; the lifecycle state is implied by the collection."""
        return self.model_dump(exclude={"state", "cover"})


Track = Union[PendingTrack, PublishedTrack]


class CatalogStats(BaseModel):
    all: int = 0
    pending: int = 0
    approved: int = 0


class ApprovalResponse(BaseModel):
    pending_id: str
    published_id: str
    message: str
