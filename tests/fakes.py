"""In-memory collaborators used in place of MongoDB and the users collection."""
from __future__ import annotations

import asyncio
import copy
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from control_panel.core.errors import AuthError, ConflictError, NoRowsError
from control_panel.schemas.user import Identity, ModeratorSession

T0 = datetime(2025, 11, 4, 20, 15, tzinfo=timezone.utc)


def pending_row(pending_id: str, minutes: int = 0, **fields) -> dict:
    row = {
        "id": pending_id,
        "user_id": "user-42",
        "artist_name": "A",
        "title": "T",
        "src": "s.mp3",
        "cover": "c.png",
        "created_at": T0 + timedelta(minutes=minutes),
    }
    row.update(fields)
    return row


def published_row(published_id: str, minutes: int = 0, **fields) -> dict:
    row = {
        "id": published_id,
        "user_id": "user-7",
        "artist_name": "Legacy Artist",
        "title": f"Song {published_id}",
        "src": f"{published_id}.mp3",
        "pfp_url": "p.png",
        "artist_link": "#",
        "buy_link": "notforsale.html",
        "created_at": T0 - timedelta(days=30) + timedelta(minutes=minutes),
    }
    row.update(fields)
    return row


UNIQUE_KEYS = {
    "users": "email",
    "profiles": "id",
    "allowed_moderators": "artist_name",
    "pending_tracks": "id",
    "audio_tracks": "id",
}


def _matches(row: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    for key, condition in (filters or {}).items():
        value = row.get(key)
        if isinstance(condition, dict):
            if "$gte" in condition and (value is None or value < condition["$gte"]):
                return False
            if "$regex" in condition and (value is None or not re.search(condition["$regex"], value)):
                return False
        elif value != condition:
            return False
    return True


class InMemoryStore:
    """Record store with the same contract as MongoRecordStore.

    Each call yields to the event loop once, so concurrent callers interleave
    the way they would against a remote store. ``failures`` maps
    ``(operation, collection)`` to an exception raised instead of running it.
    """

    def __init__(self, **collections: List[Dict[str, Any]]):
        self.collections: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in collections.items()
        }
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.calls: List[Tuple[str, str]] = []

    def rows(self, collection: str) -> List[Dict[str, Any]]:
        return self.collections.setdefault(collection, [])

    def ids(self, collection: str) -> List[str]:
        return [row["id"] for row in self.rows(collection)]

    async def _enter(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        await asyncio.sleep(0)
        failure = self.failures.get((operation, collection))
        if failure is not None:
            raise failure

    async def select(self, collection, filters=None, order=None, columns=None):
        await self._enter("select", collection)
        rows = [row for row in self.rows(collection) if _matches(row, filters)]
        for key, direction in reversed(list(order or [])):
            rows.sort(key=lambda row: row[key], reverse=direction < 0)
        if columns:
            rows = [{column: row[column] for column in columns if column in row} for row in rows]
        return copy.deepcopy(rows)

    async def select_one(self, collection, filters, columns=None):
        rows = await self.select(collection, filters, columns=columns)
        if not rows:
            raise NoRowsError(f"No rows in {collection}", code="no_rows")
        return rows[0]

    async def insert(self, collection, row):
        await self._enter("insert", collection)
        key = UNIQUE_KEYS.get(collection)
        if key and any(existing.get(key) == row.get(key) for existing in self.rows(collection)):
            raise ConflictError(f"{row.get(key)} already exists in {collection}", code="duplicate_key")
        self.rows(collection).append(copy.deepcopy(dict(row)))

    async def delete(self, collection, filters):
        await self._enter("delete", collection)
        before = self.rows(collection)
        kept = [row for row in before if not _matches(row, filters)]
        self.collections[collection] = kept
        return len(before) - len(kept)

    async def count(self, collection, filters=None):
        await self._enter("count", collection)
        return sum(1 for row in self.rows(collection) if _matches(row, filters))


class FakeAuthProvider:
    def __init__(self, accounts: Optional[Dict[str, Tuple[str, str]]] = None):
        # email -> (password, user id)
        self.accounts = accounts or {}
        self.sign_in_calls: List[str] = []
        self.signed_out: List[ModeratorSession] = []
        self.sign_out_error: Optional[AuthError] = None

    async def sign_in(self, email: str, password: str) -> Identity:
        self.sign_in_calls.append(email)
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthError("Invalid login credentials")
        return Identity(id=account[1], email=email)

    async def sign_out(self, session: ModeratorSession) -> None:
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.signed_out.append(session)
