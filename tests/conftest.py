"""
Pytest fixtures for AppVault engine tests.
"""

from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

from appvault.catalog.store import CATALOG_KEY
from appvault.config import Settings
from appvault.kernel.identity.session_manager import SessionManager
from appvault.kernel.store.key_value_store import InMemoryKeyValueStore
from appvault.orchestration.vault_engine import VaultEngine
from appvault.schemas.catalog import AppRecord, Category
from appvault.schemas.state import VaultState


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose writes can be switched to fail."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__(initial)
        self.fail_writes = False
        self.fail_reads = False

    async def get_many(self, keys):
        if self.fail_reads:
            raise OSError("storage unavailable")
        return await super().get_many(keys)

    async def set_many(self, items):
        if self.fail_writes:
            raise OSError("quota exceeded")
        await super().set_many(items)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        openai_api_key="",
        payment_api_url="",
        payment_api_key="",
    )


@pytest.fixture
def seeded_state(settings: Settings) -> VaultState:
    """State with the three seed accounts and nobody signed in."""
    state = VaultState()
    SessionManager(state, settings).seed_roster()
    return state


@pytest.fixture
def sample_apps() -> List[AppRecord]:
    return [
        AppRecord(
            id="a1",
            name="Chess Master",
            description="Classic chess against the computer",
            icon="https://cdn.example.com/chess.png",
            category=Category.GAMES,
            url1="https://chess.example.com",
            url2="https://mirror.chess.example.com",
            rating=4.5,
            plays=1200,
        ),
        AppRecord(
            id="a2",
            name="Budget Buddy",
            description="Track spending and savings goals",
            category=Category.FINANCE,
            url1="https://budget.example.com",
            is_premium=True,
            rating=4.1,
            plays=300,
        ),
        AppRecord(
            id="a3",
            name="Flashcards",
            description="Spaced repetition study cards",
            category=Category.EDUCATION,
            url1="https://cards.example.com",
            plays=45,
        ),
    ]


@pytest.fixture
def memory_store(sample_apps: List[AppRecord]) -> FlakyStore:
    """Store pre-loaded with the sample catalog and no engine state."""
    return FlakyStore({CATALOG_KEY: [a.model_dump(mode="json") for a in sample_apps]})


@pytest_asyncio.fixture
async def engine(memory_store: FlakyStore, settings: Settings) -> VaultEngine:
    """A loaded engine over the in-memory store."""
    vault = VaultEngine(memory_store, settings=settings)
    await vault.load()
    return vault


@pytest_asyncio.fixture
async def admin_engine(engine: VaultEngine, settings: Settings) -> VaultEngine:
    """Loaded engine with the seeded administrator signed in."""
    await engine.login(settings.admin_email)
    return engine
