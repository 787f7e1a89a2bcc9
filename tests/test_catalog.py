import asyncio
import re

import pytest

from control_panel.core.errors import ConflictError, NoRowsError, StoreError
from control_panel.crud import catalog
from control_panel.schemas.track import PublishedTrack, TrackState
from tests.fakes import T0, InMemoryStore, pending_row, published_row


def test_list_pending_is_newest_first_and_tagged_pending(store):
    tracks = asyncio.run(catalog.list_pending(store))

    assert [t.id for t in tracks] == ["pen-2", "pen-1"]
    assert all(t.state == TrackState.PENDING for t in tracks)


def test_list_published_without_floor_returns_everything(store):
    tracks = asyncio.run(catalog.list_published(store))

    assert [t.id for t in tracks] == ["audio-45", "audio-21", "audio-20", "audio-3"]
    assert all(t.state == TrackState.PUBLISHED for t in tracks)


def test_state_comes_from_collection_not_id_text():
    odd = InMemoryStore(pending_tracks=[], audio_tracks=[published_row("pen-legacy")])

    tracks = asyncio.run(catalog.list_published(odd))

    assert tracks[0].state == TrackState.PUBLISHED


def test_approved_view_excludes_legacy_range_numerically():
    rows = [published_row(f"audio-{n}", minutes=n) for n in (1, 9, 20, 21, 45, 100)]
    rows.append(published_row("audio-special", minutes=200))
    store = InMemoryStore(audio_tracks=rows)

    tracks = asyncio.run(catalog.list_published(store, min_id="audio-21", comparison="numeric"))

    assert [t.id for t in tracks] == ["audio-100", "audio-45", "audio-21"]


def test_lexicographic_mode_keeps_string_order_of_the_store():
    rows = [published_row(f"audio-{n}", minutes=n) for n in (1, 9, 20, 21, 45, 100)]
    store = InMemoryStore(audio_tracks=rows)

    tracks = asyncio.run(catalog.list_published(store, min_id="audio-21", comparison="lexicographic"))

    # audio-9 sorts after audio-21 as a string; audio-100 sorts before it
    assert [t.id for t in tracks] == ["audio-45", "audio-21", "audio-9"]


def test_floor_must_be_a_published_id(store):
    with pytest.raises(ValueError):
        asyncio.run(catalog.list_published(store, min_id="pen-21", comparison="numeric"))


def test_counts(store):
    assert asyncio.run(catalog.count_pending(store)) == 2
    assert asyncio.run(catalog.count_published_all(store)) == 4
    assert asyncio.run(catalog.count_published_approved(store, "audio-21", comparison="numeric")) == 2


def test_lexicographic_count_uses_store_filter(store):
    assert asyncio.run(catalog.count_published_approved(store, "audio-21", comparison="lexicographic")) == 3
    assert ("count", "audio_tracks") in store.calls


def test_list_published_ids_only_returns_prefixed_ids():
    store = InMemoryStore(audio_tracks=[published_row("audio-22"), published_row("legacy-1")])

    assert asyncio.run(catalog.list_published_ids(store)) == ["audio-22"]


def test_insert_published_rejects_duplicate_id(store):
    track = PublishedTrack(id="audio-21", title="dup", created_at=T0)

    with pytest.raises(ConflictError):
        asyncio.run(catalog.insert_published(store, track))


def test_inserted_row_has_no_state_column(store):
    track = PublishedTrack(id="audio-46", title="new", pfp_url="c.png", created_at=T0)

    asyncio.run(catalog.insert_published(store, track))

    row = store.rows("audio_tracks")[-1]
    assert row["id"] == "audio-46"
    assert "state" not in row
    assert "cover" not in row


def test_delete_pending_is_idempotent(store):
    asyncio.run(catalog.delete_pending(store, "pen-1"))
    asyncio.run(catalog.delete_pending(store, "pen-1"))

    assert store.ids("pending_tracks") == ["pen-2"]


def test_get_pending_signals_no_rows(store):
    with pytest.raises(NoRowsError):
        asyncio.run(catalog.get_pending(store, "pen-404"))


def test_store_errors_pass_through_unchanged(store):
    failure = StoreError("connection reset")
    store.failures[("select", "pending_tracks")] = failure

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(catalog.list_pending(store))

    assert excinfo.value is failure


def test_numeric_approved_count_is_a_single_store_count(store):
    assert asyncio.run(catalog.count_published_approved(store, "audio-21", comparison="numeric")) == 2
    assert store.calls == [("count", "audio_tracks")]


def test_numeric_approved_list_filters_in_the_store():
    rows = [published_row(f"audio-{n}", minutes=n) for n in (9, 20, 21, 100)]
    store = InMemoryStore(audio_tracks=rows)

    asyncio.run(catalog.list_published(store, min_id="audio-21", comparison="numeric"))

    assert store.calls == [("select", "audio_tracks")]


@pytest.mark.parametrize("floor", [0, 1, 9, 10, 19, 21, 99, 100, 109, 250])
def test_approved_id_pattern_agrees_with_numeric_order(floor):
    pattern = re.compile(catalog.approved_id_pattern(f"audio-{floor}"))

    for n in range(0, 1200):
        assert bool(pattern.search(f"audio-{n}")) == (n >= floor), n


def test_approved_id_pattern_ignores_stray_ids():
    pattern = re.compile(catalog.approved_id_pattern("audio-21"))

    assert pattern.search("audio-021")
    assert not pattern.search("audio-draft")
    assert not pattern.search("audio-30b")
    assert not pattern.search("xaudio-30")


def test_malformed_rows_are_skipped_in_listings():
    store = InMemoryStore(
        pending_tracks=[pending_row("pen-1", minutes=1), pending_row("pen-bad", minutes=2, title=["not", "text"])],
        audio_tracks=[published_row("audio-21"), published_row("audio-22", minutes=5, src=42)],
    )

    assert [t.id for t in asyncio.run(catalog.list_pending(store))] == ["pen-1"]
    assert [t.id for t in asyncio.run(catalog.list_published(store))] == ["audio-21"]


def test_get_pending_reports_malformed_row():
    store = InMemoryStore(pending_tracks=[pending_row("pen-bad", title=["not", "text"])])

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(catalog.get_pending(store, "pen-bad"))

    assert excinfo.value.code == "malformed_row"
    assert not isinstance(excinfo.value, NoRowsError)


def test_string_created_at_is_kept_as_stored():
    stamp = "2025-11-04T20:15:00+00:00"
    store = InMemoryStore(pending_tracks=[pending_row("pen-1", created_at=stamp)])

    assert asyncio.run(catalog.get_pending(store, "pen-1")).created_at == stamp
