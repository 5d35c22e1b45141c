"""Exception hierarchy for the catalog import.

Fatal errors abort the whole run before (or instead of) further writes.
Entity sync errors skip one branch of the brand/category/lighting-type tree.
"""

from typing import Optional, Sequence

__all__ = [
    "CatalogImportError",
    "FatalImportError",
    "MissingInputFileError",
    "StoreUnavailableError",
    "SchemaIncompleteError",
    "EntitySyncError",
]


class CatalogImportError(Exception):
    """Base class for all import errors."""


class FatalImportError(CatalogImportError):
    """Condition that aborts the run with a non-zero exit code."""


class MissingInputFileError(FatalImportError):
    """Required input file could not be found or parsed."""

    def __init__(self, file_type: str, path: Optional[str] = None, reason: str = "not found"):
        self.file_type = file_type
        self.path = path
        self.reason = reason
        location = f" at {path}" if path else ""
        super().__init__(f"Required '{file_type}' data file {reason}{location}")


class StoreUnavailableError(FatalImportError):
    """The relational store cannot be reached or the URL is unsupported."""


class SchemaIncompleteError(FatalImportError):
    """Required tables are missing from the store."""

    def __init__(self, missing_tables: Sequence[str]):
        self.missing_tables = list(missing_tables)
        super().__init__(f"Missing database tables: {', '.join(self.missing_tables)}")


class EntitySyncError(CatalogImportError):
    """A category or lighting type could not be created, even with a hash slug."""

    def __init__(self, entity: str, name: str, cause: Optional[BaseException] = None):
        self.entity = entity
        self.name = name
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to ensure {entity} '{name}'{detail}")
