"""Idempotent synchronization of catalog entities into the store."""

import asyncio
from typing import Any, Callable, Dict, Tuple, TypeVar

from catalog_import import db
from catalog_import.config import STORE_NAME
from catalog_import.context import ImportRun
from catalog_import.errors import EntitySyncError
from catalog_import.models import EntityRecord, ProductPayload, SpecificationData

__all__ = ["DatabaseSync", "coerce_product_payload"]

T = TypeVar("T")

# Slug scope prefix per entity: '<prefix>-base' and '<prefix>-<id>'
SLUG_CONTEXTS = {
    "category": "category",
    "lighting_type": "lighting-type",
}


def _translation_meta(entity: str, name: str) -> Dict[str, str]:
    """Description and meta fields written when a translation row is created."""
    if entity == "category":
        return {
            "description": f"{name} products and lighting solutions",
            "meta_title": f"{name} | {STORE_NAME}",
            "meta_desc": f"Discover our premium {name.lower()} collection",
        }
    return {
        "description": f"Professional {name.lower()} lighting solutions",
        "meta_title": f"{name} | {STORE_NAME} Solutions",
        "meta_desc": f"Explore our {name.lower()} range for your lighting needs",
    }


def _number(value: Any, default: float = 0) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def coerce_product_payload(payload: ProductPayload) -> ProductPayload:
    """Replace missing or mistyped fields with safe defaults before writing."""
    payload.images = [str(img) for img in payload.images] if isinstance(payload.images, list) else []
    payload.price = _number(payload.price)
    payload.price_increase = _number(payload.price_increase)
    payload.quantity = int(_number(payload.quantity))
    payload.discount = _number(payload.discount)
    payload.brand = payload.brand or ""
    payload.is_active = bool(payload.is_active)
    payload.featured = bool(payload.featured)
    if payload.h_number is not None and payload.h_number <= 0:
        payload.h_number = None
    return payload


class DatabaseSync:
    """Async get-or-create / upsert operations keyed by natural identifiers.

    Store calls run in worker threads; CatalogStore serializes them on the
    run's connection. Category and lighting-type results are memoized on the
    ImportRun, with one asyncio.Lock per cache key so concurrent callers for
    the same label wait for the first one instead of racing it.
    """

    def __init__(self, store: db.CatalogStore, run: ImportRun):
        self.store = store
        self.run = run
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = {}

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        self.run.metrics.count_db_operation()
        return await asyncio.to_thread(self.store.run, fn, *args)

    async def seed_slug_scopes(self) -> int:
        """Reserve base slugs already persisted, owned by their entity names.

        Returns:
            Number of slugs reserved
        """
        reserved = 0
        for entity, prefix in SLUG_CONTEXTS.items():
            existing = await self._call(db.get_entity_slugs, entity)
            for name, slug in existing.items():
                self.run.slugs.reserve(slug, "en", f"{prefix}-base", owner=name)
                reserved += 1
        return reserved

    async def ensure_category(self, name: str) -> EntityRecord:
        return await self._ensure("category", name)

    async def ensure_lighting_type(self, name: str) -> EntityRecord:
        return await self._ensure("lighting_type", name)

    async def _ensure(self, entity: str, name: str) -> EntityRecord:
        cache_key = (entity, name)
        if cache_key in self.run.entity_cache:
            self.run.metrics.count_cache_hit()
            return self.run.entity_cache[cache_key]

        lock = self._locks.setdefault(cache_key, asyncio.Lock())
        async with lock:
            if cache_key in self.run.entity_cache:
                self.run.metrics.count_cache_hit()
                return self.run.entity_cache[cache_key]

            prefix = SLUG_CONTEXTS[entity]
            label = entity.replace("_", " ")
            try:
                base_slug = self.run.slugs.generate_unique_slug(name, "en", f"{prefix}-base", owner=name)
                record = await self._sync_with_translations(entity, name, base_slug)
            except Exception as e:
                self.run.error(f"Failed to ensure {label} {name}", e)
                fallback_slug = self.run.slugs.generate_hash_slug(name, prefix)
                self.run.warning(f"Using fallback slug for {label} {name}: {fallback_slug}")
                try:
                    record = await self._sync_with_translations(entity, name, fallback_slug)
                except Exception as fallback_error:
                    self.run.error(f"Fallback failed for {label} {name}", fallback_error)
                    raise EntitySyncError(entity, name, fallback_error) from fallback_error
                self.run.slugs.reserve(fallback_slug, "en", f"{prefix}-base", owner=name)

            self.run.entity_cache[cache_key] = record
            self.run.success(f"Successfully processed {label}: {name}")
            return record

    async def _sync_with_translations(self, entity: str, name: str, base_slug: str) -> EntityRecord:
        record = await self._call(db.upsert_entity, entity, name, base_slug)
        prefix = SLUG_CONTEXTS[entity]

        async def upsert_translation(language: str) -> None:
            if entity == "category":
                translated = self.run.translations.get_category_translation(name, language)
            else:
                translated = self.run.translations.get_lighting_type_translation(name, language)
            slug = self.run.slugs.generate_unique_slug(
                translated, language, f"{prefix}-{record.id}", owner=name
            )
            self.run.info(f"Creating {language} translation for {entity.replace('_', ' ')} {name}: {translated} -> {slug}")
            await self._call(
                db.upsert_entity_translation,
                entity,
                record.id,
                language,
                translated,
                slug,
                *_translation_meta(entity, translated).values(),
            )

        await asyncio.gather(*(upsert_translation(lang) for lang in self.run.languages))
        return record

    async def upsert_product(self, payload: ProductPayload) -> int:
        """Upsert a product keyed by product_id, returning its row id."""
        return await self._call(db.upsert_product, coerce_product_payload(payload))

    async def upsert_specification(self, product_id: str, language: str, fields: SpecificationData) -> None:
        """Upsert one language's specification row keyed by (product_id, language)."""
        await self._call(db.upsert_specification, product_id, language, fields)
