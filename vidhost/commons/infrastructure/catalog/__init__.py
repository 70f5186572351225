"""Video catalog abstractions and implementations."""

from vidhost.commons.infrastructure.catalog.base import CatalogStoreBase
from vidhost.commons.infrastructure.catalog.blob_provider import BlobCatalogStore
from vidhost.commons.infrastructure.catalog.mongodb_provider import (
    MongoCatalogStore,
)
from vidhost.commons.infrastructure.catalog.sql_provider import SqlCatalogStore

__all__ = [
    # Base classes
    "CatalogStoreBase",
    # Implementations
    "MongoCatalogStore",
    "SqlCatalogStore",
    "BlobCatalogStore",
]
