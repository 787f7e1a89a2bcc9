# control_panel/crud/catalog.py
"""Catalog repository: one store call per operation, no retries, no caching.

Rows are turned into PendingTrack/PublishedTrack here, so the lifecycle
state comes from the collection a row was read from.
"""
import logging
import re
from typing import Iterable, List, Optional, Type, TypeVar

from pydantic import ValidationError as SchemaError

from control_panel.core.config import (
    APPROVED_RANGE_COMPARISON,
    PENDING_COLLECTION,
    PUBLISHED_COLLECTION,
    PUBLISHED_ID_PREFIX,
)
from control_panel.core.errors import StoreError
from control_panel.db.store import NEWEST_FIRST, RecordStore
from control_panel.schemas.track import PendingTrack, PublishedTrack

logger = logging.getLogger(__name__)

TrackModel = TypeVar("TrackModel", PendingTrack, PublishedTrack)

PUBLISHED_ID_PATTERN = re.compile(rf"^{re.escape(PUBLISHED_ID_PREFIX)}(\d+)$")

def published_number(track_id: str) -> Optional[int]:
    """Numeric suffix of an ``audio-<N>`` id, or None for anything else."""
    match = PUBLISHED_ID_PATTERN.match(track_id)
    if not match:
        return None
    return int(match.group(1))

def _at_least(number: int) -> str:
    """Regex alternation matching decimal numbers >= ``number`` (no leading zeros)."""
    digits = str(number)
    width = len(digits)
    options = [rf"[1-9]\d{{{width},}}", digits]
    for position, digit in enumerate(digits):
        if digit == "9":
            continue
        rest = width - position - 1
        first = "[1-9]" if position == 0 and digit == "0" else f"[{int(digit) + 1}-9]"
        options.append(f"{digits[:position]}{first}" + (rf"\d{{{rest}}}" if rest else ""))
    return "|".join(options)

def approved_id_pattern(min_id: str) -> str:
    """Store-side regex for ``audio-<N>`` ids whose suffix is numerically >= that of ``min_id``."""
    floor = published_number(min_id)
    if floor is None:
        raise ValueError(f"min_id must look like {PUBLISHED_ID_PREFIX}<N>, got {min_id!r}")
    return rf"^{re.escape(PUBLISHED_ID_PREFIX)}0*({_at_least(floor)})$"

def _range_filter(min_id: str, comparison: str) -> dict:
    if comparison == "lexicographic":
        return {"id": {"$gte": min_id}}
    return {"id": {"$regex": approved_id_pattern(min_id)}}

def _to_track(model: Type[TrackModel], row: dict) -> TrackModel:
    try:
        return model(**row)
    except SchemaError as e:
        raise StoreError(
            f"Malformed {model.__name__} row {row.get('id')!r}: {e.error_count()} invalid field(s)",
            code="malformed_row",
        ) from e

def _to_tracks(model: Type[TrackModel], rows: Iterable[dict]) -> List[TrackModel]:
    """Converts listed rows, skipping the ones that do not parse so one bad row does not hide the rest."""
    tracks = []
    for row in rows:
        try:
            tracks.append(_to_track(model, row))
        except StoreError as e:
            logger.warning(f"Skipping row: {e.message}")
    return tracks

async def list_pending(store: RecordStore) -> List[PendingTrack]:
    """Gets the pending queue, newest submission first."""
    rows = await store.select(PENDING_COLLECTION, order=NEWEST_FIRST)
    return _to_tracks(PendingTrack, rows)

async def get_pending(store: RecordStore, pending_id: str) -> PendingTrack:
    """Gets one pending track.

    The store's NoRowsError propagates. A row that does not parse raises
    StoreError with code ``malformed_row``.
    """
    row = await store.select_one(PENDING_COLLECTION, {"id": pending_id})
    return _to_track(PendingTrack, row)

async def list_published(
    store: RecordStore,
    min_id: Optional[str] = None,
    comparison: str = APPROVED_RANGE_COMPARISON,
) -> List[PublishedTrack]:
    """Gets published tracks, newest first.

    With ``min_id`` only ids at or above it are returned. ``comparison``
    selects numeric suffix order or the store's plain string order, under
    which ``audio-9`` sorts after ``audio-21``.
    """
    filters = _range_filter(min_id, comparison) if min_id is not None else None
    rows = await store.select(PUBLISHED_COLLECTION, filters, order=NEWEST_FIRST)
    return _to_tracks(PublishedTrack, rows)

async def list_published_ids(store: RecordStore) -> List[str]:
    """Every published id carrying the ``audio-`` prefix."""
    pattern = f"^{re.escape(PUBLISHED_ID_PREFIX)}"
    rows = await store.select(
        PUBLISHED_COLLECTION, {"id": {"$regex": pattern}}, order=NEWEST_FIRST, columns=["id"]
    )
    return [row["id"] for row in rows]

async def count_pending(store: RecordStore) -> int:
    return await store.count(PENDING_COLLECTION)

async def count_published_all(store: RecordStore) -> int:
    return await store.count(PUBLISHED_COLLECTION)

async def count_published_approved(
    store: RecordStore,
    min_id: str,
    comparison: str = APPROVED_RANGE_COMPARISON,
) -> int:
    return await store.count(PUBLISHED_COLLECTION, _range_filter(min_id, comparison))

async def insert_published(store: RecordStore, track: PublishedTrack) -> None:
    """Inserts a published track. Raises ConflictError if the id is taken."""
    await store.insert(PUBLISHED_COLLECTION, track.to_row())

async def delete_pending(store: RecordStore, pending_id: str) -> None:
    """Deletes a pending track. Deleting an id that is not there is not an error."""
    await store.delete(PENDING_COLLECTION, {"id": pending_id})
