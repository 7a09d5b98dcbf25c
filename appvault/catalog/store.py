"""
Catalog Store - the passive list of app records.

The engine only reads it (id lookup, search, recommendation filtering).
Administrators maintain it through add / update / remove, each written
straight through to its own durable key.
"""

from typing import Iterable, List, Optional

from pydantic import ValidationError

from appvault.kernel.errors import NotFound, ValidationFailed
from appvault.kernel.store.key_value_store import KeyValueStore
from appvault.logging_config import get_logger
from appvault.schemas.catalog import AppRecord, AppUpdate

logger = get_logger(__name__)

CATALOG_KEY = "appvault_apps"


class CatalogStore:
    """In-memory catalog mirrored to the key-value store."""

    def __init__(self, store: KeyValueStore, apps: Optional[Iterable[AppRecord]] = None):
        self.store = store
        self._apps: List[AppRecord] = list(apps or [])

    async def load(self) -> List[AppRecord]:
        """Read the catalog; a missing or unreadable slot yields an empty catalog."""
        try:
            raw = await self.store.get(CATALOG_KEY)
        except Exception as exc:
            logger.error("Catalog read failed, starting empty: %s", exc)
            raw = None

        apps: List[AppRecord] = []
        for item in raw or []:
            try:
                apps.append(AppRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping invalid catalog record: %s", exc)
        self._apps = apps
        return self.list_apps()

    # -----------------------------
    # Reads
    # -----------------------------
    def list_apps(self) -> List[AppRecord]:
        return [a.model_copy() for a in self._apps]

    def get(self, app_id: str) -> Optional[AppRecord]:
        app = next((a for a in self._apps if a.id == app_id), None)
        return app.model_copy() if app else None

    def known_ids(self) -> set[str]:
        return {a.id for a in self._apps}

    def search(self, text: str) -> List[AppRecord]:
        """Case-insensitive substring match on the app name."""
        needle = (text or "").strip().lower()
        if not needle:
            return []
        return [a.model_copy() for a in self._apps if needle in a.name.lower()]

    def total_plays(self) -> int:
        return sum(a.plays for a in self._apps)

    def __len__(self) -> int:
        return len(self._apps)

    # -----------------------------
    # Administration
    # -----------------------------
    async def add(self, app: AppRecord) -> AppRecord:
        if app.id in self.known_ids():
            raise ValidationFailed(f"App {app.id} already exists", field="id")
        self._apps.append(app.model_copy())
        await self._persist()
        return app

    async def update(self, app_id: str, patch: AppUpdate) -> AppRecord:
        for i, existing in enumerate(self._apps):
            if existing.id == app_id:
                merged = AppRecord.model_validate(
                    {**existing.model_dump(), **patch.model_dump(exclude_unset=True, exclude_none=True)}
                )
                self._apps[i] = merged
                await self._persist()
                return merged.model_copy()
        raise NotFound(f"App {app_id} not found", field="app_id")

    async def remove(self, app_id: str) -> AppRecord:
        for i, existing in enumerate(self._apps):
            if existing.id == app_id:
                removed = self._apps.pop(i)
                await self._persist()
                return removed
        raise NotFound(f"App {app_id} not found", field="app_id")

    async def _persist(self) -> None:
        payload = [a.model_dump(mode="json") for a in self._apps]
        try:
            await self.store.set(CATALOG_KEY, payload)
        except Exception as exc:
            logger.error("Catalog write failed; keeping in-memory copy: %s", exc)
