"""Approval engine: moves a submission from the pending queue into the catalog.

A track is either pending or published. Publishing is terminal; rejecting
deletes the submission without keeping a tombstone.

Published ids are allocated by rescanning the catalog on every approval.
Two moderators approving at the same time can compute the same id; the
unique index on ``audio_tracks.id`` rejects the second insert with
ConflictError and that moderator approves again, which rescans.
"""
from __future__ import annotations

import logging
from typing import Iterable

from control_panel.core.config import (
    DEFAULT_ARTIST_LINK,
    DEFAULT_BUY_LINK,
    LEGACY_RANGE_TOP,
    PUBLISHED_ID_PREFIX,
)
from control_panel.core.errors import NoRowsError, NotFoundError, OrphanError, StoreError
from control_panel.crud import catalog
from control_panel.db.store import RecordStore
from control_panel.schemas.track import PendingTrack, PublishedTrack

logger = logging.getLogger(__name__)


def next_published_number(ids: Iterable[str]) -> int:
    """One past the highest ``audio-<N>`` suffix in ``ids``, never below the legacy top.

    Ids that are not exactly ``audio-<digits>`` are skipped.
    """
    next_number = LEGACY_RANGE_TOP
    for track_id in ids:
        number = catalog.published_number(track_id)
        if number is not None and number >= next_number:
            next_number = number + 1
    return next_number


def allocate_published_id(ids: Iterable[str]) -> str:
    return f"{PUBLISHED_ID_PREFIX}{next_published_number(ids)}"


def build_published_track(pending: PendingTrack, published_id: str) -> PublishedTrack:
    """Publication copies the submission; only the id and the image column change."""
    return PublishedTrack(
        id=published_id,
        user_id=pending.user_id,
        artist_name=pending.artist_name,
        title=pending.title,
        src=pending.src,
        pfp_url=pending.cover or "",
        artist_link=pending.artist_link or DEFAULT_ARTIST_LINK,
        buy_link=pending.buy_link or DEFAULT_BUY_LINK,
        created_at=pending.created_at,
    )


async def approve(store: RecordStore, pending_id: str) -> str:
    """Publish a pending track and return its new ``audio-<N>`` id.

    Raises:
        NotFoundError: no pending track has this id; nothing was written.
        ConflictError: another approval took the allocated id first; the
            pending track is untouched and the call can be repeated.
        StoreError: any other store failure before or during the insert,
            including a pending row that does not parse (``malformed_row``).
        OrphanError: the track was published but is still in the pending queue.
    """
    logger.info(f"Approving track: {pending_id}")

    try:
        pending = await catalog.get_pending(store, pending_id)
    except NoRowsError:
        raise NotFoundError(f"Pending track {pending_id} not found")

    existing_ids = await catalog.list_published_ids(store)
    published_id = allocate_published_id(existing_ids)
    logger.info(f"Creating new track: {published_id} (scanned {len(existing_ids)} published ids)")

    await catalog.insert_published(store, build_published_track(pending, published_id))

    try:
        await catalog.delete_pending(store, pending_id)
    except StoreError as e:
        logger.error(f"Published {published_id} but failed to delete pending {pending_id}: {e}")
        raise OrphanError(published_id, pending_id, e) from e

    logger.info(f"Track approved: {pending_id} -> {published_id}")
    return published_id


async def reject(store: RecordStore, pending_id: str) -> None:
    """Delete a pending track. Rejecting an id that is already gone succeeds."""
    logger.info(f"Rejecting track: {pending_id}")
    await catalog.delete_pending(store, pending_id)
    logger.info(f"Track rejected and deleted: {pending_id}")
