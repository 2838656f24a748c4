"""Tests for the snapshot and delta readers."""

from unittest.mock import patch

import pytest

from ohabits.storage import HABITS
from ohabits.sync import EPOCH_CURSOR, SyncReadError, read_delta, read_snapshot


class TestSnapshot:
    def test_empty_owner_gets_every_bucket(self, catalog, store, owner):
        snapshot = read_snapshot(catalog, store, owner)

        assert list(snapshot.data) == catalog.buckets
        assert all(records == [] for records in snapshot.data.values())
        assert snapshot.record_count == 0

    def test_cursor_captured_before_reads(self, catalog, store, owner, make_item, reconciler):
        reconciler.push(owner, [make_item("L1", "habit", {"name": "Read"})])

        snapshot = read_snapshot(catalog, store, owner)

        habit = snapshot.data["habits"][0]
        assert habit["updated_at"] < snapshot.cursor

    def test_snapshot_only_has_own_records(self, catalog, store, owner, other_owner, reconciler, make_item):
        reconciler.push(other_owner, [make_item("L1", "habit", {"name": "Theirs"})])

        assert read_snapshot(catalog, store, owner).record_count == 0
        assert read_snapshot(catalog, store, other_owner).record_count == 1

    def test_snapshot_includes_tombstones(self, catalog, store, owner, reconciler, make_item):
        created = reconciler.push(owner, [make_item("L1", "habit", {"name": "Read"})])[0]
        reconciler.push(owner, [make_item("L1", "habit", server_id=created.server_id, is_deleted=True)])

        snapshot = read_snapshot(catalog, store, owner)

        assert snapshot.data["habits"][0]["is_deleted"] is True
        assert store.list_current(HABITS, owner) == []

    def test_failing_kind_aborts_read(self, catalog, store, owner):
        kind = catalog.get("todo")
        with patch.object(kind, "list_all", side_effect=RuntimeError("no such table: todos")):
            with pytest.raises(SyncReadError) as exc_info:
                read_snapshot(catalog, store, owner)

        assert exc_info.value.bucket == "todos"


class TestDelta:
    def test_epoch_delta_equals_snapshot(self, catalog, store, owner, reconciler, make_item):
        created = reconciler.push(
            owner,
            [
                make_item("L1", "habit", {"name": "Read"}),
                make_item("L2", "mood", {"rating": 4, "date": "2026-01-02"}),
            ],
        )
        reconciler.push(
            owner, [make_item("L1", "habit", server_id=created[0].server_id, is_deleted=True)]
        )

        snapshot = read_snapshot(catalog, store, owner)
        delta = read_delta(catalog, store, owner, None)

        non_empty = {bucket: records for bucket, records in snapshot.data.items() if records}
        assert delta.data == non_empty

    def test_empty_buckets_omitted(self, catalog, store, owner):
        delta = read_delta(catalog, store, owner, EPOCH_CURSOR)

        assert delta.data == {}
        assert delta.cursor > EPOCH_CURSOR

    def test_only_changes_after_cursor(self, catalog, store, owner, reconciler, make_item):
        reconciler.push(owner, [make_item("L1", "habit", {"name": "Old"})])
        cursor = read_snapshot(catalog, store, owner).cursor

        new = reconciler.push(owner, [make_item("L2", "todo", {"text": "New", "date": "2026-01-02"})])

        delta = read_delta(catalog, store, owner, cursor)
        assert list(delta.data) == ["todos"]
        assert delta.data["todos"][0]["id"] == new[0].server_id

    def test_resumed_client_sees_deletion(self, catalog, store, owner, reconciler, make_item):
        created = reconciler.push(owner, [make_item("L1", "habit", {"name": "Read"})])[0]
        cursor = read_snapshot(catalog, store, owner).cursor

        reconciler.push(owner, [make_item("L1", "habit", server_id=created.server_id, is_deleted=True)])

        delta = read_delta(catalog, store, owner, cursor)
        assert delta.data["habits"][0]["id"] == created.server_id
        assert delta.data["habits"][0]["is_deleted"] is True

    def test_mood_reupsert_visible_in_delta(self, catalog, store, owner, reconciler, make_item):
        reconciler.push(owner, [make_item("L1", "mood", {"rating": 2, "date": "2026-01-02"})])
        cursor = read_snapshot(catalog, store, owner).cursor

        reconciler.push(owner, [make_item("L1", "mood", {"rating": 5, "date": "2026-01-02"})])

        delta = read_delta(catalog, store, owner, cursor)
        assert delta.data["moodRatings"][0]["rating"] == 5

    def test_successive_cursors_advance(self, catalog, store, owner):
        first = read_delta(catalog, store, owner).cursor
        second = read_delta(catalog, store, owner, first).cursor

        assert second > first

    def test_invalid_since_rejected(self, catalog, store, owner):
        with pytest.raises(ValueError):
            read_delta(catalog, store, owner, "yesterday")

    def test_failing_kind_aborts_delta(self, catalog, store, owner):
        kind = catalog.get("habit")
        with patch.object(kind, "list_since", side_effect=RuntimeError("database is locked")):
            with pytest.raises(SyncReadError, match="Failed to read habits"):
                read_delta(catalog, store, owner)
