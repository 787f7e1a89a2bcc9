#!/usr/bin/env python3
"""
Create a moderator account: a user with a password, its artist profile and
an allowlist row.

Run with:
    python -m control_panel.scripts.create_moderator <email> <artist_name>

The password is read from the terminal.
"""
import argparse
import asyncio
import getpass
import logging

from control_panel.core.errors import ConflictError, StoreError
from control_panel.crud import user as user_crud
from control_panel.db.mongodb_utils import connect_to_mongo, close_mongo_connection, get_store
from control_panel.db.store import RecordStore
from control_panel.schemas.user import UserInDB

logger = logging.getLogger(__name__)


async def register_moderator(store: RecordStore, email: str, artist_name: str, password: str) -> UserInDB:
    """Writes the user, its profile and the allowlist row.

    A user without a profile can sign in but is always denied, so the user
    row is removed again when the profile cannot be written.
    """
    user = await user_crud.create_user(store, email, password)
    try:
        await user_crud.create_profile(store, user.id, artist_name)
    except StoreError as e:
        logger.error(f"Could not create profile for {email}, removing the user: {e}")
        await user_crud.delete_user(store, user.id)
        raise

    try:
        await user_crud.allow_moderator(store, artist_name)
    except ConflictError:
        logger.info(f"{artist_name} is already an allowed moderator")

    logger.info(f"Moderator created: {artist_name} <{email}> ({user.id})")
    return user


async def create_moderator(email: str, artist_name: str, password: str) -> None:
    await connect_to_mongo()
    try:
        await register_moderator(await get_store(), email, artist_name, password)
    finally:
        await close_mongo_connection()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a NoLabel moderator account")
    parser.add_argument("email")
    parser.add_argument("artist_name")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if not password:
        parser.error("password must not be empty")

    asyncio.run(create_moderator(args.email, args.artist_name, password))


if __name__ == "__main__":
    main()
