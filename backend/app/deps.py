from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from .modules.catalog.consistency import ConsistencyManager
from .modules.catalog.lookup import CatalogLookup
from .modules.catalog.repair import ConsistencyAuditor
from .modules.catalog.store import EntityStore
from .modules.catalog.validation import CatalogValidator
from .settings import settings


@lru_cache(maxsize=1)
def get_entity_store() -> EntityStore:
    if settings.normalized_catalog_store == "memory":
        from .repositories.catalog.memory_store import InMemoryEntityStore

        return InMemoryEntityStore()

    from .repositories.catalog.dynamo_store import DynamoEntityStore

    return DynamoEntityStore()


def get_validator() -> CatalogValidator:
    return CatalogValidator()


def get_consistency_manager(
    store: EntityStore = Depends(get_entity_store),
    validator: CatalogValidator = Depends(get_validator),
) -> ConsistencyManager:
    return ConsistencyManager(store, validator)


def get_lookup(store: EntityStore = Depends(get_entity_store)) -> CatalogLookup:
    return CatalogLookup(store)


def get_auditor(store: EntityStore = Depends(get_entity_store)) -> ConsistencyAuditor:
    return ConsistencyAuditor(store)
