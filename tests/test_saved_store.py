"""Tests for the JSON-file saved-search store."""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from reelfind.saved.models import SavedSearch, Scope, Visibility
from reelfind.saved.store import (
    JsonSavedSearchStore,
    SavedSearchError,
    SavedSearchNotFoundError,
)


def make_saved(saved_id: str = "s1", **overrides) -> SavedSearch:
    fields = dict(
        id=saved_id,
        name=f"Search {saved_id}",
        search_query="sarah",
        filters='{"assetTypes": ["video"]}',
        scope=Scope.ORGANIZATION,
        visibility=Visibility.PRIVATE,
        created_by="user-1",
        created_by_email="user1@example.com",
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return SavedSearch(**fields)


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    return tmp_path / "reelfind" / "saved-searches.json"


@pytest.fixture
def store(store_file: Path) -> JsonSavedSearchStore:
    return JsonSavedSearchStore(store_file)


class TestSavedSearchModel:
    """Tests for SavedSearch serialization."""

    def test_round_trip(self):
        saved = make_saved(
            usage_count=3,
            last_used_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
            is_pinned=True,
            project_id="p1",
            scope=Scope.PROJECT,
        )
        assert SavedSearch.from_dict(saved.to_dict()) == saved

    def test_record_uses_camel_case(self):
        record = make_saved().to_dict()
        assert record["searchQuery"] == "sarah"
        assert record["usageCount"] == 0
        assert record["isPinned"] is False
        assert record["createdByEmail"] == "user1@example.com"

    def test_missing_required_field_raises(self):
        record = make_saved().to_dict()
        del record["createdBy"]
        with pytest.raises(KeyError):
            SavedSearch.from_dict(record)


class TestJsonSavedSearchStore:
    """Tests for JsonSavedSearchStore."""

    @pytest.mark.asyncio
    async def test_list_empty_when_no_file(self, store):
        assert await store.list_all() == []

    @pytest.mark.asyncio
    async def test_create_and_list(self, store, store_file):
        await store.create(make_saved("s1"))
        await store.create(make_saved("s2"))

        items = await store.list_all()
        assert [s.id for s in items] == ["s1", "s2"]
        assert store_file.stat().st_mode & 0o777 == 0o600

    @pytest.mark.asyncio
    async def test_create_duplicate_id_fails(self, store):
        await store.create(make_saved("s1"))
        with pytest.raises(SavedSearchError):
            await store.create(make_saved("s1"))

    @pytest.mark.asyncio
    async def test_get(self, store):
        await store.create(make_saved("s1"))
        assert (await store.get("s1")).name == "Search s1"

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(SavedSearchNotFoundError):
            await store.get("nope")

    @pytest.mark.asyncio
    async def test_update(self, store):
        await store.create(make_saved("s1"))
        used_at = datetime(2024, 6, 1, tzinfo=timezone.utc)

        updated = await store.update("s1", usage_count=1, last_used_at=used_at)

        assert updated.usage_count == 1
        reloaded = await store.get("s1")
        assert reloaded.usage_count == 1
        assert reloaded.last_used_at == used_at

    @pytest.mark.asyncio
    async def test_update_unknown_field_fails(self, store):
        await store.create(make_saved("s1"))
        with pytest.raises(SavedSearchError):
            await store.update("s1", colour="red")

    @pytest.mark.asyncio
    async def test_update_missing(self, store):
        with pytest.raises(SavedSearchNotFoundError):
            await store.update("nope", is_pinned=True)

    @pytest.mark.asyncio
    async def test_delete_removes_only_that_entry(self, store):
        for saved_id in ("s1", "s2", "s3"):
            await store.create(make_saved(saved_id))

        await store.delete("s2")

        assert [s.id for s in await store.list_all()] == ["s1", "s3"]

    @pytest.mark.asyncio
    async def test_delete_missing(self, store):
        with pytest.raises(SavedSearchNotFoundError):
            await store.delete("nope")

    @pytest.mark.asyncio
    async def test_corrupted_file_reads_as_empty(self, store, store_file):
        store_file.parent.mkdir(parents=True)
        store_file.write_text("not valid json")

        assert await store.list_all() == []

    @pytest.mark.asyncio
    async def test_corrupted_file_is_not_overwritten(self, store, store_file):
        store_file.parent.mkdir(parents=True)
        store_file.write_text("not valid json")

        with pytest.raises(SavedSearchError):
            await store.create(make_saved("s1"))

        assert store_file.read_text() == "not valid json"

    @pytest.mark.asyncio
    async def test_increment_usage(self, store):
        await store.create(make_saved("s1", usage_count=2))
        used_at = datetime(2024, 6, 1, tzinfo=timezone.utc)

        await asyncio.gather(
            store.increment_usage("s1", used_at), store.increment_usage("s1", used_at)
        )

        saved = await store.get("s1")
        assert saved.usage_count == 4
        assert saved.last_used_at == used_at

    @pytest.mark.asyncio
    async def test_increment_usage_missing(self, store):
        with pytest.raises(SavedSearchNotFoundError):
            await store.increment_usage("nope", datetime.now(timezone.utc))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content", ['[{"id": "s1"}]', '{"savedSearches": "s1"}', "{}"]
    )
    async def test_wrong_structure_is_not_overwritten(
        self, store, store_file, content
    ):
        store_file.parent.mkdir(parents=True)
        store_file.write_text(content)

        assert await store.list_all() == []
        with pytest.raises(SavedSearchError):
            await store.create(make_saved("s1"))

        assert store_file.read_text() == content

    @pytest.mark.asyncio
    async def test_unreadable_records_are_skipped(self, store, store_file):
        store_file.parent.mkdir(parents=True)
        good = make_saved("s1").to_dict()
        store_file.write_text(
            json.dumps({"savedSearches": [good, {"id": "broken"}, "junk"]})
        )

        assert [s.id for s in await store.list_all()] == ["s1"]
