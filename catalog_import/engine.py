"""Catalog tree walk: brand -> category -> lighting type -> product.

The walk is an async generator yielding one NodeOutcome per visited node.
Failures are contained at the narrowest level that still lets the rest of
the catalog through:

    brand -> category -> lighting type -> batch chunk -> product -> spec language

A category or lighting type that cannot be ensured skips its whole subtree,
a product that raises is skipped on its own, and a failing specification
language only marks that language on the product outcome.
"""

import asyncio
import time
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Tuple

from catalog_import.batch import BatchProcessor
from catalog_import.context import ImportRun
from catalog_import.errors import EntitySyncError
from catalog_import.logging_config import get_logger, log_import_event
from catalog_import.models import (
    CatalogInputs,
    EntityRecord,
    ImportSummary,
    NodeOutcome,
    ProductPayload,
)
from catalog_import.specifications import (
    determine_product_color,
    determine_product_ip,
    extract_h_number,
    find_specifications_table,
    parse_number_value,
    process_specifications,
)
from catalog_import.sync import DatabaseSync

__all__ = ["ImportEngine", "flatten_products"]

logger = get_logger("engine")

ProductItem = Tuple[str, Any]

SHUTDOWN_REASON = "shutdown requested"


def flatten_products(products: Any) -> List[ProductItem]:
    """Turn a lighting-type list of ``{productId: data}`` maps into pairs."""
    if not isinstance(products, list):
        return []
    items: List[ProductItem] = []
    for entry in products:
        if isinstance(entry, Mapping):
            items.extend((str(key), value) for key, value in entry.items())
    return items


def _numeric(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


class ImportEngine:
    """Drives one import run over the catalog tree."""

    def __init__(self, run: ImportRun, sync: DatabaseSync):
        self.context = run
        self.sync = sync
        self.batch = BatchProcessor(run.chunk_size, metrics=run.metrics)

    # -- timing -------------------------------------------------------------

    def _start(self, operation: str) -> None:
        self.context.metrics.start(operation)

    def _end(self, operation: str) -> None:
        duration = self.context.metrics.end(operation)
        logger.info(f"⏱️ {operation} completed in {duration * 1000:.2f}ms")

    # -- run ----------------------------------------------------------------

    def load_inputs(self) -> CatalogInputs:
        """Load every input file; raises MissingInputFileError before any write."""
        operation = "Data Loading"
        self._start(operation)
        try:
            return self.context.files.load_inputs(self.context.languages)
        finally:
            self._end(operation)

    async def run(self, inputs: Optional[CatalogInputs] = None) -> ImportSummary:
        """Load inputs, seed slug scopes and drain the walk into a summary."""
        if inputs is None:
            inputs = self.load_inputs()

        reserved = await self.sync.seed_slug_scopes()
        logger.debug(f"Reserved {reserved} existing slugs")

        summary = ImportSummary()
        operation = "Product Import"
        self._start(operation)
        try:
            async for outcome in self.walk(inputs):
                summary.add(outcome)
                if not outcome.ok:
                    log_import_event(
                        f"{outcome.level}_skipped",
                        {
                            "message": f"Skipped {outcome.level} {'/'.join(outcome.path)}",
                            "path": list(outcome.path),
                            "error": outcome.error,
                        },
                        logger_name="engine",
                    )
        finally:
            self._end(operation)

        summary.interrupted = self.context.stop_requested
        if summary.interrupted:
            self.context.warning("Import interrupted by shutdown request; remaining nodes were not visited")

        log_import_event("run_complete", {
            "message": f"Import finished: {summary.processed_products} products processed, "
                       f"{summary.skipped_products} skipped",
            "processed_products": summary.processed_products,
            "skipped_products": summary.skipped_products,
            "skipped_nodes": len(summary.skipped_nodes),
            "interrupted": summary.interrupted,
        }, logger_name="engine")
        return summary

    # -- walk ---------------------------------------------------------------

    async def walk(self, inputs: CatalogInputs) -> AsyncIterator[NodeOutcome]:
        """Visit the catalog tree, yielding one outcome per node."""
        for brand, categories in inputs.brands.items():
            if self.context.stop_requested:
                return

            if not isinstance(categories, Mapping):
                self.context.warning(f"Brand {brand} has no category map, skipping")
                yield NodeOutcome("brand", (brand,), "skipped", error="no category map")
                continue

            operation = f"Brand Processing: {brand}"
            self._start(operation)
            logger.info(f"🏢 Processing brand: {brand}")
            try:
                async for outcome in self._walk_brand(inputs, brand, categories):
                    yield outcome
            except Exception as e:
                self.context.error(f"Failed to process brand {brand}", e)
                yield NodeOutcome("brand", (brand,), "skipped", error=str(e))
                continue
            finally:
                self._end(operation)

            if self.context.stop_requested:
                return
            yield NodeOutcome("brand", (brand,), "done")

    async def _walk_brand(
        self,
        inputs: CatalogInputs,
        brand: str,
        categories: Mapping[str, Any],
    ) -> AsyncIterator[NodeOutcome]:
        for category, lighting_types in categories.items():
            if self.context.stop_requested:
                return

            path = (brand, category)
            if not isinstance(lighting_types, Mapping):
                self.context.warning(f"Category {brand}/{category} has no lighting types, skipping")
                yield NodeOutcome("category", path, "skipped", error="no lighting type map")
                continue

            logger.info(f"📂 Processing category: {category}")
            try:
                category_record = await self.sync.ensure_category(category)
            except EntitySyncError as e:
                yield NodeOutcome("category", path, "skipped", error=str(e))
                continue
            except Exception as e:
                self.context.error(f"Failed to ensure category {category}", e)
                yield NodeOutcome("category", path, "skipped", error=str(e))
                continue

            for lighting_type, products in lighting_types.items():
                if self.context.stop_requested:
                    return
                async for outcome in self._walk_lighting_type(
                    inputs, brand, category, lighting_type, products, category_record
                ):
                    yield outcome

            yield NodeOutcome("category", path, "done")

    async def _walk_lighting_type(
        self,
        inputs: CatalogInputs,
        brand: str,
        category: str,
        lighting_type: str,
        products: Any,
        category_record: EntityRecord,
    ) -> AsyncIterator[NodeOutcome]:
        path = (brand, category, lighting_type)
        logger.info(f"💡 Processing lighting type: {lighting_type}")
        try:
            lighting_type_record = await self.sync.ensure_lighting_type(lighting_type)
        except EntitySyncError as e:
            yield NodeOutcome("lighting_type", path, "skipped", error=str(e))
            return
        except Exception as e:
            self.context.error(f"Failed to ensure lighting type {lighting_type}", e)
            yield NodeOutcome("lighting_type", path, "skipped", error=str(e))
            return

        items = flatten_products(products)
        if not isinstance(products, list):
            self.context.warning(f"Lighting type {'/'.join(path)} has no product list")

        async def process(item: ProductItem) -> NodeOutcome:
            product_id, data = item
            return await self.process_product(
                inputs, brand, category, lighting_type, product_id, data,
                category_record, lighting_type_record,
            )

        try:
            outcomes = await self.batch.process_batch(items, process, f"{category}/{lighting_type}")
        except Exception as e:
            self.context.error(f"Batch failed for {'/'.join(path)}", e)
            yield NodeOutcome("lighting_type", path, "skipped", error=str(e))
            return

        for outcome in outcomes:
            yield outcome
        yield NodeOutcome("lighting_type", path, "done")

    # -- products -----------------------------------------------------------

    def spec_table(self, inputs: CatalogInputs, language: str, brand: str, category: str,
                   product_id: str) -> Optional[Dict[str, Any]]:
        """Cached lookup of a product's specificationsTable in one overlay."""
        key = (language, brand, category, product_id)
        if key in self.context.spec_tables:
            self.context.metrics.count_cache_hit()
            return self.context.spec_tables[key]
        table = find_specifications_table(inputs.overlays.get(language), brand, category, product_id)
        self.context.spec_tables[key] = table
        return table

    def build_payload(
        self,
        inputs: CatalogInputs,
        brand: str,
        category: str,
        lighting_type: str,
        product_key: str,
        data: Mapping[str, Any],
        category_record: EntityRecord,
        lighting_type_record: EntityRecord,
    ) -> ProductPayload:
        """Resolve specs, derive enums and the unit count, and build the row."""
        primary = self.spec_table(inputs, self.context.primary_language, brand, category, product_key)
        fallback = self.spec_table(inputs, self.context.fallback_language, brand, category, product_key)
        enum_specs = primary or fallback or {}

        h_number = extract_h_number(data, primary)
        if h_number is None and fallback:
            h_number = extract_h_number(None, fallback)
        if h_number is None:
            logger.warning(f"⚠️ No hNumber found for {product_key} - will be stored as NULL")

        max_ip = None
        if data.get("MaxIP"):
            parsed = parse_number_value(data["MaxIP"])
            max_ip = parsed.value if parsed.ok else None

        images = data.get("productImages")

        return ProductPayload(
            product_id=str(data.get("ProductId") or product_key),
            name=str(data.get("productName") or product_key),
            category_id=category_record.id,
            lighting_type_id=lighting_type_record.id,
            brand=data.get("brand") or brand,
            images=list(images) if isinstance(images, list) else [],
            price=_numeric(data.get("price")),
            price_increase=_numeric(data.get("priceIncrease")),
            quantity=int(_numeric(data.get("quantity"))),
            discount=_numeric(data.get("discount")),
            product_color=determine_product_color(enum_specs),
            product_ip=determine_product_ip(enum_specs),
            h_number=h_number,
            max_ip=max_ip,
            spotlight_type=data.get("spotlightType") or lighting_type,
            section_type=data.get("sectionType") or category,
            chandelier_lighting_type=data.get("chandelierLightingType") or None,
            is_active=True,
            featured=False,
        )

    async def process_product(
        self,
        inputs: CatalogInputs,
        brand: str,
        category: str,
        lighting_type: str,
        product_key: str,
        data: Any,
        category_record: EntityRecord,
        lighting_type_record: EntityRecord,
    ) -> NodeOutcome:
        """Persist one product and its specifications; never raises."""
        path = (brand, category, lighting_type, product_key)
        if self.context.stop_requested:
            return NodeOutcome("product", path, "skipped", error=SHUTDOWN_REASON)

        started = time.perf_counter()
        try:
            if not isinstance(data, Mapping):
                raise ValueError(f"product data must be an object, got {type(data).__name__}")

            payload = self.build_payload(
                inputs, brand, category, lighting_type, product_key, data,
                category_record, lighting_type_record,
            )
            await self.sync.upsert_product(payload)

            results = await asyncio.gather(*(
                self._persist_specification(inputs, brand, category, product_key, payload.product_id, language)
                for language in self.context.languages
            ))
        except Exception as e:
            self.context.error(f"Error processing product {product_key}", e)
            return NodeOutcome("product", path, "skipped", error=str(e))
        finally:
            self.context.metrics.record("Product Processing", time.perf_counter() - started)

        self.context.success(f"Processed product: {product_key}")
        return NodeOutcome("product", path, "done", spec_languages=dict(results))

    async def _persist_specification(
        self,
        inputs: CatalogInputs,
        brand: str,
        category: str,
        product_key: str,
        product_id: str,
        language: str,
    ) -> Tuple[str, str]:
        try:
            if not inputs.overlays.get(language):
                self.context.warning(f"No {language} data available for {brand}/{category}")
                return language, "missing"

            table = self.spec_table(inputs, language, brand, category, product_key)
            if not table:
                self.context.warning(f"No specifications found for product {product_key} in {language}")
                return language, "missing"

            fields = process_specifications(table, language)
            await self.sync.upsert_specification(product_id, language, fields)
        except Exception as e:
            self.context.error(f"Error processing {language} specifications for {product_key}", e)
            return language, "failed"

        logger.debug(f"Stored {language} specifications for {product_key}")
        return language, "persisted"
