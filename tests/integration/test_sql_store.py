"""
SQL-backed slot store against a file-based SQLite database.

Covers the store contract and an engine restart over the same file.
"""

import pytest
import pytest_asyncio

from appvault.database import close_db, create_engine, create_session_maker, init_db
from appvault.kernel.store.key_value_store import SqlKeyValueStore
from appvault.main import open_vault
from appvault.orchestration.vault_engine import VaultEngine


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'appvault_test.db'}"


@pytest_asyncio.fixture
async def db_engine(db_url):
    engine = create_engine(db_url)
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest_asyncio.fixture
async def sql_store(db_engine) -> SqlKeyValueStore:
    return SqlKeyValueStore(create_session_maker(db_engine))


class TestSqlKeyValueStore:
    """Store contract."""

    @pytest.mark.asyncio
    async def test_absent_key_is_not_an_error(self, sql_store):
        assert await sql_store.get("appvault_user") is None
        assert await sql_store.get("appvault_history", []) == []

    @pytest.mark.asyncio
    async def test_set_many_then_get_many(self, sql_store):
        await sql_store.set_many({"k1": {"a": 1}, "k2": [1, 2, 3]})
        assert await sql_store.get_many(["k1", "k2", "k3"]) == {"k1": {"a": 1}, "k2": [1, 2, 3]}

    @pytest.mark.asyncio
    async def test_overwrite_and_delete(self, sql_store):
        await sql_store.set("k1", "first")
        await sql_store.set("k1", "second")
        assert await sql_store.get("k1") == "second"

        await sql_store.delete("k1")
        assert await sql_store.get("k1") is None


class TestEngineRestart:
    """An engine over the same database picks up where the last one stopped."""

    @pytest.mark.asyncio
    async def test_session_and_ledger_survive_restart(self, sql_store, settings):
        first = VaultEngine(sql_store, settings=settings)
        await first.load()
        await first.login("bob@construction.com")
        await first.record_usage("a1", "Chess Master", duration_seconds=30)

        second = VaultEngine(sql_store, settings=settings)
        await second.load()
        assert second.current_user.id == "u2"
        assert second.current_user.points == 21
        assert second.points_history[0].reason == "Used Chess Master"
        assert second.history[0].duration_seconds == 30

    @pytest.mark.asyncio
    async def test_deleted_seed_accounts_not_recreated(self, sql_store, settings):
        first = VaultEngine(sql_store, settings=settings)
        await first.load()
        await first.login(settings.admin_email)
        await first.delete_user("u1")
        await first.delete_user("u2")

        second = VaultEngine(sql_store, settings=settings)
        await second.load()
        assert [u.id for u in second.users] == ["admin"]


class TestOpenVault:
    """Bootstrap from settings."""

    @pytest.mark.asyncio
    async def test_open_vault_loads_engine(self, db_url, settings):
        configured = settings.model_copy(update={"database_url": db_url})
        async with open_vault(configured) as vault:
            user = await vault.login("carol@example.com")
            assert user.points == 100

        async with open_vault(configured) as vault:
            assert vault.current_user.email == "carol@example.com"
