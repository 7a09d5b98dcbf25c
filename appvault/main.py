"""
AppVault engine bootstrap.

Wires configuration, logging, the SQL-backed slot store, the catalog and
the recommendation service into a loaded VaultEngine.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from appvault.catalog.store import CatalogStore
from appvault.config import Settings, get_settings
from appvault.database import close_db, create_engine, create_session_maker, init_db
from appvault.integrations.recommendations import RecommendationService
from appvault.kernel.store.key_value_store import SqlKeyValueStore
from appvault.logging_config import configure_logging, get_logger
from appvault.orchestration.vault_engine import VaultEngine

logger = get_logger(__name__)


@asynccontextmanager
async def open_vault(settings: Optional[Settings] = None) -> AsyncGenerator[VaultEngine, None]:
    """
    Engine lifespan.

    Usage:
        async with open_vault() as vault:
            await vault.login("alice@example.com")
    """
    settings = settings or get_settings()
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    # Startup
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    db_engine = create_engine(settings.database_url, echo=settings.debug)
    await init_db(db_engine)
    logger.info("Database initialized")

    store = SqlKeyValueStore(create_session_maker(db_engine))
    vault = VaultEngine(
        store,
        settings=settings,
        catalog=CatalogStore(store),
        recommender=RecommendationService(settings),
    )
    try:
        await vault.load()
        yield vault
    finally:
        # Shutdown
        logger.info("Shutting down...")
        await close_db(db_engine)
        logger.info("Database connections closed")
