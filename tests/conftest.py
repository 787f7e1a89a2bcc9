import os

# Required configuration must exist before control_panel modules are imported
os.environ.setdefault("MONGO_DATABASE_URL", "mongodb://localhost:27017")
os.environ.setdefault("SECRET_KEY", "Test-Secret-Key-For-Control-Panel-0123456789!")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest

from control_panel.core.limiter import limiter
from control_panel.services import moderation_session
from tests.fakes import FakeAuthProvider, InMemoryStore, pending_row, published_row


@pytest.fixture(autouse=True)
def _no_rate_limits():
    """Rate limits are per process; tests log in far more than five times a minute."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture(autouse=True)
def _fresh_dashboard_sessions():
    yield
    moderation_session._SESSIONS.clear()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        users=[],
        profiles=[
            {"id": "mod-1", "artist_name": "Moderator One"},
            {"id": "artist-2", "artist_name": "Just An Artist"},
        ],
        allowed_moderators=[{"artist_name": "Moderator One"}],
        pending_tracks=[
            pending_row("pen-1", minutes=1),
            pending_row("pen-2", minutes=2, artist_name="B", title="Second", cover=None),
        ],
        audio_tracks=[
            published_row("audio-3", minutes=3),
            published_row("audio-20", minutes=20),
            published_row("audio-21", minutes=21),
            published_row("audio-45", minutes=45),
        ],
    )


@pytest.fixture
def auth() -> FakeAuthProvider:
    return FakeAuthProvider({
        "mod@nolabel.fm": ("correct horse", "mod-1"),
        "artist@nolabel.fm": ("battery staple", "artist-2"),
        "ghost@nolabel.fm": ("no profile", "ghost-3"),
    })
