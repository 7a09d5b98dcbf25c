"""
Catalog collaborator - app records the engine reads by id.
"""

from appvault.catalog.store import CATALOG_KEY, CatalogStore

__all__ = ["CatalogStore", "CATALOG_KEY"]
