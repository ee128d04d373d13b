"""
Unit tests for the record store and its database handle.
"""

import threading

import pytest

from tagfolio.errors import NotFoundError
from tagfolio.storage import EntityKind, RecordPatch, RecordStore


def make_record(store: RecordStore, owner_id: str = "1", title: str = "Mustang", **kwargs):
    kwargs.setdefault("description", "Fastback")
    kwargs.setdefault("tags", ["classic"])
    return store.create(owner_id=owner_id, title=title, **kwargs)


class TestIdAllocation:
    """Tests for store-owned id sequences."""

    def test_ids_are_distinct_and_increasing(self, record_store):
        ids = [make_record(record_store, title=f"car {i}").id for i in range(10)]

        assert len(set(ids)) == 10
        assert [int(i) for i in ids] == sorted(int(i) for i in ids)
        assert ids[0] == "1"

    def test_ids_are_strings(self, record_store):
        record = make_record(record_store)
        assert isinstance(record.id, str)

    def test_ids_not_reused_after_delete(self, record_store):
        first = make_record(record_store)
        assert record_store.delete("1", first.id)

        second = make_record(record_store)
        assert int(second.id) > int(first.id)

    def test_sequences_are_per_kind(self, record_store):
        assert record_store.allocate_id(EntityKind.USER) == "1"
        assert record_store.allocate_id(EntityKind.RECORD) == "1"
        assert record_store.allocate_id(EntityKind.USER) == "2"

    def test_allocated_id_is_consumed(self, record_store):
        reserved = record_store.allocate_id(EntityKind.RECORD)
        record = make_record(record_store)
        assert int(record.id) == int(reserved) + 1

    def test_concurrent_creates_get_unique_ids(self, record_store):
        ids = []
        ids_lock = threading.Lock()

        def worker(n):
            for i in range(20):
                record = make_record(record_store, owner_id=str(n % 2), title=f"{n}-{i}")
                with ids_lock:
                    ids.append(record.id)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 80
        assert len(set(ids)) == 80


class TestCreate:
    """Tests for record creation."""

    def test_create_returns_full_record(self, record_store, clock):
        record = record_store.create(
            owner_id="7",
            title="Defender",
            description="Expedition build",
            tags=["offroad", "british"],
            images=["/uploads/a.jpg", "/uploads/b.jpg"],
        )

        assert record.owner_id == "7"
        assert record.title == "Defender"
        assert record.tags == ["offroad", "british"]
        assert record.images == ["/uploads/a.jpg", "/uploads/b.jpg"]
        assert record.created_at == clock.now
        assert record.updated_at == record.created_at

    def test_duplicate_tags_are_kept(self, record_store):
        record = make_record(record_store, tags=["red", "red"])
        assert record.tags == ["red", "red"]

    def test_image_order_is_preserved(self, record_store):
        images = [f"/uploads/{i}.jpg" for i in (3, 1, 2)]
        record = make_record(record_store, images=images)

        assert record_store.get_by_id(record.id).images == images


class TestUpdate:
    """Tests for partial updates."""

    def test_update_preserves_unspecified_fields(self, record_store, clock):
        record = make_record(record_store, tags=["classic", "ford"], images=["/uploads/a.jpg"])
        clock.advance(5)

        updated = record_store.update("1", record.id, RecordPatch(description="Restored"))

        assert updated.description == "Restored"
        assert updated.title == record.title
        assert updated.tags == ["classic", "ford"]
        assert updated.images == ["/uploads/a.jpg"]
        assert updated.created_at == record.created_at
        assert updated.updated_at > record.updated_at

    def test_update_replaces_lists_wholesale(self, record_store):
        record = make_record(record_store, tags=["a", "b"])
        updated = record_store.update("1", record.id, RecordPatch(tags=["c"]))
        assert updated.tags == ["c"]

    def test_update_is_persisted(self, record_store):
        record = make_record(record_store)
        record_store.update("1", record.id, RecordPatch(title="Shelby"))
        assert record_store.get_by_id(record.id).title == "Shelby"

    def test_updated_at_never_moves_backwards(self, record_store, clock):
        record = make_record(record_store)
        clock.advance(-60)

        updated = record_store.update("1", record.id, RecordPatch(title="Earlier"))

        assert updated.updated_at == record.updated_at

    def test_owner_cannot_be_changed(self, record_store):
        record = make_record(record_store)
        updated = record_store.update("1", record.id, RecordPatch(title="x"))
        assert updated.owner_id == "1"

    def test_update_missing_record_raises(self, record_store):
        with pytest.raises(NotFoundError):
            record_store.update("1", "999", RecordPatch(title="x"))

    def test_update_foreign_record_raises_not_found(self, record_store):
        record = make_record(record_store, owner_id="1")

        with pytest.raises(NotFoundError):
            record_store.update("2", record.id, RecordPatch(title="hijacked"))

        assert record_store.get_by_id(record.id).title == "Mustang"

    def test_empty_patch_still_touches_updated_at(self, record_store, clock):
        record = make_record(record_store)
        clock.advance(1)

        updated = record_store.update("1", record.id, RecordPatch())

        assert RecordPatch().is_empty()
        assert updated.updated_at == clock.now


class TestDelete:
    """Tests for owner-scoped deletion."""

    def test_delete_removes_record(self, record_store):
        record = make_record(record_store)

        assert record_store.delete("1", record.id) is True
        assert record_store.get_by_id(record.id) is None

    def test_delete_missing_returns_false(self, record_store):
        assert record_store.delete("1", "404") is False

    def test_delete_twice_returns_false(self, record_store):
        record = make_record(record_store)
        record_store.delete("1", record.id)
        assert record_store.delete("1", record.id) is False

    def test_delete_foreign_record_returns_false(self, record_store):
        record = make_record(record_store, owner_id="1")

        assert record_store.delete("2", record.id) is False
        assert record_store.get_by_id(record.id) is not None


class TestListing:
    """Tests for per-owner enumeration."""

    def test_list_orders_by_updated_at_desc(self, record_store, clock):
        first = make_record(record_store, title="first")
        clock.advance()
        second = make_record(record_store, title="second")
        clock.advance()
        record_store.update("1", first.id, RecordPatch(description="touched"))

        titles = [r.title for r in record_store.list_by_owner("1")]
        assert titles == ["first", "second"]

    def test_ties_broken_by_reverse_id(self, record_store):
        # FakeClock does not advance, so all timestamps tie
        for i in range(12):
            make_record(record_store, title=f"car {i}")

        ids = [r.id for r in record_store.list_by_owner("1")]
        assert ids == [str(i) for i in range(12, 0, -1)]

    def test_isolation_between_owners(self, record_store):
        for i in range(3):
            make_record(record_store, owner_id="1", title=f"a{i}")
            make_record(record_store, owner_id="2", title=f"b{i}")

        assert all(r.owner_id == "1" for r in record_store.list_by_owner("1"))
        assert all(r.owner_id == "2" for r in record_store.list_by_owner("2"))
        assert record_store.count_by_owner("1") == 3
        assert record_store.list_by_owner("3") == []

    def test_get_by_id_with_owner_hides_foreign_records(self, record_store):
        record = make_record(record_store, owner_id="1")

        assert record_store.get_by_id(record.id, owner_id="1") is not None
        assert record_store.get_by_id(record.id, owner_id="2") is None
        assert record_store.get_by_id(record.id) is not None


class TestRecordPatch:
    """Tests for the partial update structure."""

    def test_changes_skip_unset_fields(self):
        patch = RecordPatch(title="x", tags=("a", "b"))
        assert patch.changes() == {"title": "x", "tags": ["a", "b"]}

    def test_empty_patch(self):
        assert RecordPatch().changes() == {}
