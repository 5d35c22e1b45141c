"""Per-run state shared by the import components.

Everything mutable during an import (issued slugs, entity memoization,
file cache, overlay lookups, metrics) hangs off one ImportRun, so two runs
in the same process never see each other's state.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from catalog_import.config import BATCH_SIZE, FALLBACK_LANGUAGE, PRIMARY_LANGUAGE, SUPPORTED_LANGUAGES
from catalog_import.files import FileResolver
from catalog_import.logging_config import get_logger
from catalog_import.metrics import RunMetrics
from catalog_import.shutdown import ShutdownHandler
from catalog_import.slugs import SlugGenerator
from catalog_import.translations import TranslationRegistry

__all__ = ["ImportRun"]

logger = get_logger("run")


@dataclass
class ImportRun:
    """Context value threaded through every component of one import."""

    files: FileResolver = field(default_factory=FileResolver)
    slugs: SlugGenerator = field(default_factory=SlugGenerator)
    translations: TranslationRegistry = field(default_factory=TranslationRegistry)
    metrics: RunMetrics = field(default_factory=RunMetrics)
    shutdown: ShutdownHandler = field(default_factory=ShutdownHandler)
    languages: Tuple[str, ...] = SUPPORTED_LANGUAGES
    primary_language: str = PRIMARY_LANGUAGE
    fallback_language: str = FALLBACK_LANGUAGE
    chunk_size: int = BATCH_SIZE

    # (entity, name) -> EntityRecord
    entity_cache: Dict[Tuple[str, str], Any] = field(default_factory=dict)
    # (language, brand, category, product_id) -> specificationsTable or None
    spec_tables: Dict[Tuple[str, str, str, str], Optional[Dict[str, Any]]] = field(default_factory=dict)

    @property
    def stop_requested(self) -> bool:
        return self.shutdown.shutdown_requested

    # -- logging with metrics ----------------------------------------------

    def success(self, message: str) -> None:
        logger.info(f"✅ {message}")
        self.metrics.count_success()

    def warning(self, message: str) -> None:
        logger.warning(f"⚠️ {message}")
        self.metrics.count_warning()

    def error(self, message: str, exc: Optional[BaseException] = None) -> None:
        detail = f": {exc}" if exc is not None else ""
        logger.error(f"❌ {message}{detail}", exc_info=exc if logger.isEnabledFor(logging.DEBUG) else None)
        self.metrics.count_error()

    def info(self, message: str) -> None:
        logger.info(message)
