"""Per-moderator dashboard state: the selected tab, catalog stats and the preview player.

Nothing here is shared between moderators. Each login (one session token)
gets its own ModerationSession, kept in memory for as long as the token is
valid and dropped at sign-out.
"""
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from control_panel.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, APPROVED_MIN_ID, PLACEHOLDER_COVER
from control_panel.core.errors import NotFoundError, StoreError, ValidationError
from control_panel.crud import catalog
from control_panel.db.store import RecordStore
from control_panel.schemas.player import PlayerStatus
from control_panel.schemas.track import CatalogStats, Track
from control_panel.schemas.user import ModeratorSession

logger = logging.getLogger(__name__)


class DashboardTab(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ALL = "all"


async def load_tab(store: RecordStore, tab: DashboardTab) -> List[Track]:
    if tab == DashboardTab.PENDING:
        return await catalog.list_pending(store)
    if tab == DashboardTab.APPROVED:
        return await catalog.list_published(store, min_id=APPROVED_MIN_ID)
    return await catalog.list_published(store)


async def load_stats(store: RecordStore) -> CatalogStats:
    """Counts for the stat cards. A failure shows zeros instead of breaking the page."""
    try:
        return CatalogStats(
            all=await catalog.count_published_all(store),
            pending=await catalog.count_pending(store),
            approved=await catalog.count_published_approved(store, APPROVED_MIN_ID),
        )
    except StoreError as e:
        logger.error(f"Error loading stats: {e}")
        return CatalogStats()


def format_time(seconds: Optional[float]) -> str:
    """Format a position as M:SS."""
    total = int(seconds or 0)
    return f"{total // 60}:{total % 60:02d}"


def display_cover(track: Track) -> str:
    return getattr(track, "cover", None) or getattr(track, "pfp_url", None) or PLACEHOLDER_COVER


def split_created(value: Union[datetime, str]) -> Tuple[str, str]:
    """Date and time columns for a row. Stored values are dates or ISO strings."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value, ""
    return value.strftime("%Y-%m-%d"), value.strftime("%H:%M")


class PlaybackState(BaseModel):
    """What the preview player is doing. Transitions return a new state."""
    track_id: Optional[str] = None
    position_seconds: float = 0.0
    duration_seconds: Optional[float] = None
    is_playing: bool = False

    class Config:
        frozen = True

    @property
    def progress_percent(self) -> float:
        if not self.duration_seconds:
            return 0.0
        return min(100.0, self.position_seconds / self.duration_seconds * 100)

    def toggle(self, track: Track) -> "PlaybackState":
        """Play/pause the same track, or switch to another one from the start."""
        if not track.src:
            raise ValidationError("No audio file available")

        if self.track_id == track.id:
            return self.model_copy(update={"is_playing": not self.is_playing})

        return PlaybackState(track_id=track.id, is_playing=True)

    def pause(self) -> "PlaybackState":
        return self.model_copy(update={"is_playing": False})

    def progress(self, position_seconds: float, duration_seconds: Optional[float] = None) -> "PlaybackState":
        if self.track_id is None:
            return self
        return self.model_copy(update={
            "position_seconds": position_seconds,
            "duration_seconds": duration_seconds or self.duration_seconds,
        })

    def stop(self) -> "PlaybackState":
        return PlaybackState()

    def to_status(self, src: Optional[str] = None) -> PlayerStatus:
        return PlayerStatus(
            track_id=self.track_id,
            src=src,
            is_playing=self.is_playing,
            position_seconds=self.position_seconds,
            duration_seconds=self.duration_seconds,
            position_label=format_time(self.position_seconds),
            duration_label=format_time(self.duration_seconds),
            progress_percent=self.progress_percent,
        )


class ModerationSession:
    """Dashboard controller for one authorized moderator."""

    def __init__(self, moderator: ModeratorSession, tab: DashboardTab = DashboardTab.PENDING):
        self.moderator = moderator
        self.tab = tab
        self.tracks: List[Track] = []
        self.playback = PlaybackState()

    def select_tab(self, tab: DashboardTab) -> None:
        self.tab = tab

    def find_track(self, track_id: Optional[str]) -> Optional[Track]:
        return next((track for track in self.tracks if track.id == track_id), None)

    @property
    def current_track(self) -> Optional[Track]:
        return self.find_track(self.playback.track_id)

    async def load(self, store: RecordStore) -> Tuple[List[Track], CatalogStats]:
        logger.info(f"Loading data for tab: {self.tab.value}")
        self.tracks = await load_tab(store, self.tab)
        stats = await load_stats(store)

        if self.playback.track_id and self.current_track is None:
            # The previewed track was approved, rejected or is on another tab
            self.playback = self.playback.stop()
        else:
            # A freshly rendered page has no audio running
            self.playback = self.playback.pause()

        return self.tracks, stats

    async def toggle_playback(self, store: RecordStore, track_id: str) -> PlaybackState:
        """Play/pause a track from the current tab.

        Raises:
            NotFoundError: the track is not listed on the current tab.
            ValidationError: the track has no audio file.
        """
        track = self.find_track(track_id)
        if track is None:
            # Session state does not survive a restart; list the tab again
            self.tracks = await load_tab(store, self.tab)
            track = self.find_track(track_id)
        if track is None:
            raise NotFoundError(f"Track {track_id} is not on the {self.tab.value} tab")

        self.playback = self.playback.toggle(track)
        return self.playback

    def update_progress(self, position_seconds: float, duration_seconds: Optional[float] = None) -> PlaybackState:
        self.playback = self.playback.progress(position_seconds, duration_seconds)
        return self.playback

    def stop_playback(self) -> PlaybackState:
        self.playback = self.playback.stop()
        return self.playback

    def player_status(self) -> PlayerStatus:
        track = self.current_track
        return self.playback.to_status(track.src if track else None)


_SESSIONS: Dict[str, dict] = {}


def _cleanup_expired() -> None:
    """Remove sessions whose token has expired."""
    now = datetime.now(timezone.utc)
    for key in list(_SESSIONS):
        if _SESSIONS[key]["expires"] < now:
            _SESSIONS.pop(key, None)


def session_for(moderator: ModeratorSession) -> ModerationSession:
    """The dashboard state for this login, created on first use."""
    _cleanup_expired()
    entry = _SESSIONS.get(moderator.session_key)
    if entry is None or entry["session"].moderator.user_id != moderator.user_id:
        entry = {"session": ModerationSession(moderator)}
        _SESSIONS[moderator.session_key] = entry
    entry["expires"] = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return entry["session"]


def end_session(moderator: ModeratorSession) -> None:
    _SESSIONS.pop(moderator.session_key, None)
