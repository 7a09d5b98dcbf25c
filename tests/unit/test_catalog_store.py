"""Unit tests for the catalog store."""

import pytest
import pytest_asyncio

from appvault.catalog.store import CATALOG_KEY, CatalogStore
from appvault.kernel.errors import NotFound, ValidationFailed
from appvault.schemas.catalog import AppRecord, AppUpdate


@pytest_asyncio.fixture
async def catalog(memory_store) -> CatalogStore:
    store = CatalogStore(memory_store)
    await store.load()
    return store


class TestReads:
    """Lookup and search."""

    @pytest.mark.asyncio
    async def test_known_ids(self, catalog):
        assert catalog.known_ids() == {"a1", "a2", "a3"}

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, catalog):
        assert [a.id for a in catalog.search("BUDGET")] == ["a2"]
        assert catalog.search("   ") == []

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, catalog):
        app = catalog.get("a1")
        app.plays = 0
        assert catalog.get("a1").plays == 1200


class TestLoad:
    """Reading the catalog slot."""

    @pytest.mark.asyncio
    async def test_invalid_records_are_skipped(self, memory_store, sample_apps):
        raw = [sample_apps[0].model_dump(mode="json"), {"id": "broken"}]
        await memory_store.set(CATALOG_KEY, raw)

        apps = await CatalogStore(memory_store).load()
        assert [a.id for a in apps] == ["a1"]

    @pytest.mark.asyncio
    async def test_missing_slot_is_empty(self, memory_store):
        await memory_store.delete(CATALOG_KEY)
        store = CatalogStore(memory_store)
        assert await store.load() == []
        assert store.known_ids() == set()


class TestAdministration:
    """add / update / remove written through to the store."""

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, catalog, sample_apps):
        with pytest.raises(ValidationFailed):
            await catalog.add(sample_apps[0])
        assert len(catalog) == 3

    @pytest.mark.asyncio
    async def test_add_persists(self, catalog, memory_store):
        await catalog.add(AppRecord(id="a9", name="Notes", url1="https://notes.example.com"))
        stored = await memory_store.get(CATALOG_KEY)
        assert stored[-1]["id"] == "a9"
        assert "a9" in catalog.known_ids()

    @pytest.mark.asyncio
    async def test_update_and_remove_unknown(self, catalog):
        with pytest.raises(NotFound):
            await catalog.update("ghost", AppUpdate(name="x"))
        with pytest.raises(NotFound):
            await catalog.remove("ghost")
