"""Pre-run health check and post-run import report."""

from typing import Callable, Optional

import pandas as pd

from catalog_import import db
from catalog_import.config import REQUIRED_TABLES
from catalog_import.errors import SchemaIncompleteError
from catalog_import.files import FileResolver
from catalog_import.logging_config import get_logger
from catalog_import.metrics import RunMetrics
from catalog_import.models import ImportReport

__all__ = ["perform_health_check", "generate_import_report", "print_report"]

logger = get_logger("diagnostics")


def perform_health_check(
    store: db.CatalogStore,
    resolver: FileResolver,
    metrics: Optional[RunMetrics] = None,
) -> None:
    """Verify the store answers, report input files and check the schema.

    Missing input files are only reported here; the engine decides whether
    that is fatal when it loads them.

    Raises:
        StoreUnavailableError: If the store does not answer
        SchemaIncompleteError: If any required table is missing
    """
    metrics = metrics or RunMetrics()
    with metrics.measure("System Health Check"):
        try:
            store.ping()
            logger.info("✅ Database connection: OK")

            for file_type in resolver.patterns:
                path = resolver.resolve_file(file_type)
                if file_type == "static":
                    status = f"✅ Found ({path})" if path else "❌ Missing"
                else:
                    status = f"✅ Found ({path})" if path else "⚠️ Missing (optional)"
                logger.info(f"{file_type} file: {status}")

            tables = store.run(db.get_table_names)
            missing = [table for table in REQUIRED_TABLES if table not in tables]
            if missing:
                raise SchemaIncompleteError(missing)

            logger.info("✅ Database schema: OK")
        except Exception as e:
            logger.error(f"❌ System health check failed: {e}")
            raise

    logger.info("✅ System health check passed")


def _frame(store: db.CatalogStore, query: str) -> pd.DataFrame:
    return store.run(lambda conn: pd.read_sql_query(query, conn))


def generate_import_report(store: db.CatalogStore) -> ImportReport:
    """Read back what the store holds after the run."""
    products = _frame(store, "SELECT brand, price, h_number, is_active FROM products")
    specs = _frame(store, "SELECT language FROM product_specifications")
    category_count = store.run(db.count_rows, "categories")
    lighting_type_count = store.run(db.count_rows, "lighting_types")

    report = ImportReport(
        product_count=len(products),
        active_product_count=int(products["is_active"].astype(bool).sum()) if len(products) else 0,
        category_count=category_count,
        lighting_type_count=lighting_type_count,
    )

    if len(products):
        by_brand = products.groupby("brand").size().sort_values(ascending=False)
        report.products_by_brand = {str(brand): int(n) for brand, n in by_brand.items()}
        report.products_with_h_number = int(products["h_number"].notna().sum())

        prices = pd.to_numeric(products["price"], errors="coerce").dropna()
        if len(prices):
            report.price_min = float(prices.min())
            report.price_max = float(prices.max())
            report.price_avg = round(float(prices.mean()), 2)

    if len(specs):
        by_language = specs.groupby("language").size()
        report.specifications_by_language = {str(lang): int(n) for lang, n in by_language.items()}

    return report


def print_report(report: ImportReport, out: Optional[Callable[[str], None]] = None) -> None:
    """Print the post-run import report."""
    out = out or print
    out("\n📊 COMPREHENSIVE IMPORT REPORT")
    out("━" * 50)

    out("\n📦 PRODUCTS:")
    out(f"   Total Products: {report.product_count}")
    out(f"   Active Products: {report.active_product_count}")
    out(f"   Inactive Products: {report.product_count - report.active_product_count}")

    out("\n📂 CATEGORIES:")
    out(f"   Total Categories: {report.category_count}")

    out("\n💡 LIGHTING TYPES:")
    out(f"   Total Lighting Types: {report.lighting_type_count}")

    out("\n🏢 BRANDS:")
    for brand, count in report.products_by_brand.items():
        out(f"   {brand}: {count} products")

    out("\n📋 SPECIFICATIONS BY LANGUAGE:")
    for language, count in report.specifications_by_language.items():
        out(f"   {language.upper()}: {count} specification sets")

    out("\n🔢 HNUMBER ANALYSIS:")
    out(f"   Products with hNumber: {report.products_with_h_number}")
    out(f"   Products without hNumber: {report.products_without_h_number}")
    out(f"   hNumber coverage: {report.h_number_coverage}%")

    if report.price_min is not None:
        out("\n💰 PRICES:")
        out(f"   Min: {report.price_min:.2f}  Max: {report.price_max:.2f}  Avg: {report.price_avg:.2f}")
