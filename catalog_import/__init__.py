"""Lighting catalog import package."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from catalog_import.batch import BatchProcessor
from catalog_import.config import (
    BATCH_SIZE,
    DB_PATH,
    SPECIFICATION_FIELD_MAPPING,
    SUPPORTED_LANGUAGES,
)
from catalog_import.context import ImportRun
from catalog_import.db import CatalogStore, init_db
from catalog_import.diagnostics import generate_import_report, perform_health_check
from catalog_import.engine import ImportEngine
from catalog_import.errors import (
    CatalogImportError,
    EntitySyncError,
    FatalImportError,
    MissingInputFileError,
    SchemaIncompleteError,
    StoreUnavailableError,
)
from catalog_import.files import FileResolver
from catalog_import.models import ImportReport, ImportSummary, NodeOutcome, ProductPayload
from catalog_import.slugs import SlugGenerator
from catalog_import.sync import DatabaseSync
from catalog_import.translations import TranslationRegistry

__all__ = [
    # Version
    "__version__",
    # Config
    "BATCH_SIZE",
    "DB_PATH",
    "SPECIFICATION_FIELD_MAPPING",
    "SUPPORTED_LANGUAGES",
    # Models
    "ImportReport",
    "ImportSummary",
    "NodeOutcome",
    "ProductPayload",
    # Errors
    "CatalogImportError",
    "FatalImportError",
    "MissingInputFileError",
    "StoreUnavailableError",
    "SchemaIncompleteError",
    "EntitySyncError",
    # Components
    "BatchProcessor",
    "CatalogStore",
    "DatabaseSync",
    "FileResolver",
    "ImportEngine",
    "ImportRun",
    "SlugGenerator",
    "TranslationRegistry",
    "init_db",
    "perform_health_check",
    "generate_import_report",
]
