# control_panel/crud/user.py
from control_panel.core.config import USERS_COLLECTION, PROFILES_COLLECTION, MODERATORS_COLLECTION
from control_panel.core.security import get_password_hash
from control_panel.db.store import RecordStore
from control_panel.schemas.user import UserInDB, Profile

async def get_user_by_email(store: RecordStore, email: str) -> dict:
    """Finds a user by email. Raises NoRowsError when there is none."""
    return await store.select_one(USERS_COLLECTION, {"email": email.lower()})

async def create_user(store: RecordStore, email: str, password: str) -> UserInDB:
    """Creates a new user with a hashed password."""
    user_in_db = UserInDB(email=email.lower(), hashed_password=get_password_hash(password))
    await store.insert(USERS_COLLECTION, user_in_db.model_dump())
    return user_in_db

async def get_profile(store: RecordStore, user_id: str) -> Profile:
    """Reads the artist profile attached to an identity."""
    row = await store.select_one(PROFILES_COLLECTION, {"id": user_id}, columns=["id", "artist_name"])
    return Profile(**row)

async def create_profile(store: RecordStore, user_id: str, artist_name: str) -> Profile:
    profile = Profile(id=user_id, artist_name=artist_name)
    await store.insert(PROFILES_COLLECTION, profile.model_dump())
    return profile

async def get_allowed_moderator(store: RecordStore, artist_name: str) -> dict:
    """Looks up an allowlist row. Raises NoRowsError when the artist is not listed."""
    return await store.select_one(MODERATORS_COLLECTION, {"artist_name": artist_name}, columns=["artist_name"])

async def allow_moderator(store: RecordStore, artist_name: str) -> None:
    await store.insert(MODERATORS_COLLECTION, {"artist_name": artist_name})

async def delete_user(store: RecordStore, user_id: str) -> None:
    await store.delete(USERS_COLLECTION, {"id": user_id})
