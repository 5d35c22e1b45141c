"""Command-line interface for the catalog import."""

import argparse
import asyncio
import logging
import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from catalog_import import db
from catalog_import.config import BATCH_SIZE, get_data_dirs, get_database_url
from catalog_import.context import ImportRun
from catalog_import.diagnostics import generate_import_report, perform_health_check, print_report
from catalog_import.engine import ImportEngine
from catalog_import.errors import FatalImportError
from catalog_import.files import FileResolver, default_base_paths
from catalog_import.logging_config import get_logger, setup_logging
from catalog_import.shutdown import get_shutdown_handler
from catalog_import.sync import DatabaseSync

__all__ = ["main", "parse_args"]

logger = get_logger("cli")

TROUBLESHOOTING = """
🔧 TROUBLESHOOTING GUIDE:
1. Verify all JSON files are present and valid
2. Check database connection and schema (--init-db bootstraps a fresh database)
3. Review the error logs above for specific issues"""


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import the lighting product catalog JSON into the relational store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import using DATABASE_URL from the environment or .env
  python -m catalog_import

  # Bootstrap a fresh development database and import into it
  python -m catalog_import --database-url sqlite:///data/catalog.db --init-db

  # Read the JSON files from a specific directory, smaller batches
  python -m catalog_import --data-dir ./exports --chunk-size 20
        """,
    )

    parser.add_argument(
        "--data-dir",
        action="append",
        type=Path,
        default=[],
        help="Extra directory to search for the input files (repeatable, searched first)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Store URL (default: DATABASE_URL environment variable)",
    )
    parser.add_argument(
        "--chunk-size",
        type=_positive_int,
        default=BATCH_SIZE,
        help=f"Products persisted concurrently per batch (default: {BATCH_SIZE})",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the catalog schema before importing",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Skip the post-run import report",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug output on the console",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Do not write the JSONL log file",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run one import. Returns the process exit code."""
    load_dotenv()
    args = parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
    )

    start_time = time.perf_counter()
    logger.info("🚀 Starting catalog import...")

    shutdown = get_shutdown_handler().install()
    run = ImportRun(
        files=FileResolver(default_base_paths(list(args.data_dir) + get_data_dirs())),
        shutdown=shutdown,
        chunk_size=args.chunk_size,
    )
    store: Optional[db.CatalogStore] = None

    try:
        store = db.CatalogStore(args.database_url or get_database_url()).connect()
        shutdown.register_cleanup(store.close)
        logger.info(f"Database connection established ({store.db_path})")

        if args.init_db:
            store.run(db.create_schema)
            logger.info("✅ Database schema initialized")

        perform_health_check(store, run.files, run.metrics)

        engine = ImportEngine(run, DatabaseSync(store, run))
        summary = asyncio.run(engine.run())

        if not args.no_report:
            with run.metrics.measure("Import Report Generation"):
                report = generate_import_report(store)
            print_report(report)

        total_time = time.perf_counter() - start_time
        print(f"\n⏱️ TOTAL EXECUTION TIME: {total_time:.2f}s")
        rate = summary.processed_products / total_time if total_time > 0 else 0.0
        print(f"🎯 PROCESSING RATE: {rate:.2f} products/second")
        print(f"   Brands: {summary.processed_brands}, categories: {summary.processed_categories}, "
              f"lighting types: {summary.processed_lighting_types}, "
              f"products: {summary.processed_products} (skipped {summary.skipped_products})")

        if summary.interrupted:
            logger.warning("⚠️ Import stopped early; rerun to import the remaining products")
        else:
            logger.info("🎉 Import completed successfully!")
        return 0

    except FatalImportError as e:
        logger.error(f"💥 Import aborted: {e}")
        print(TROUBLESHOOTING)
        return 1
    except Exception as e:
        logger.exception(f"💥 Critical import failure: {e}")
        print(TROUBLESHOOTING)
        return 1
    finally:
        run.metrics.display_dashboard()
        if store is not None:
            store.close()
            logger.info("Database connection closed")
        shutdown.uninstall()
        # The handler is process-wide; the next run starts unflagged
        shutdown.reset()


if __name__ == "__main__":
    raise SystemExit(main())
