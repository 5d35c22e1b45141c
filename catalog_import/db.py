"""SQLite store schema and upsert helpers for the catalog import.

Every write is keyed by a natural identifier (name, product_id,
(entity_id, language), (product_id, language)) so reruns converge.
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional, Set, TypeVar

from catalog_import.config import CANONICAL_SPEC_FIELDS, DB_PATH
from catalog_import.errors import StoreUnavailableError
from catalog_import.models import EntityRecord, ProductPayload, SpecificationData

__all__ = [
    "ENTITY_TABLES",
    "resolve_db_path",
    "get_connection",
    "create_schema",
    "init_db",
    "get_table_names",
    "upsert_entity",
    "upsert_entity_translation",
    "get_entity",
    "get_entity_slugs",
    "get_entity_translations",
    "upsert_product",
    "get_product",
    "upsert_specification",
    "get_specifications",
    "count_rows",
    "CatalogStore",
]

T = TypeVar("T")

# entity -> (table, translation table, foreign key column)
ENTITY_TABLES: Dict[str, tuple] = {
    "category": ("categories", "category_translations", "category_id"),
    "lighting_type": ("lighting_types", "lighting_type_translations", "lighting_type_id"),
}

PRODUCT_COLUMNS = (
    "product_id", "name", "images", "brand", "price", "price_increase",
    "quantity", "discount", "category_id", "lighting_type_id",
    "product_color", "product_ip", "h_number", "max_ip", "spotlight_type",
    "section_type", "chandelier_lighting_type", "is_active", "featured",
)


def _entity_tables(entity: str) -> tuple:
    """Validate the entity name against the whitelist to prevent SQL injection."""
    if entity not in ENTITY_TABLES:
        raise ValueError(f"Invalid entity: {entity}. Must be one of {sorted(ENTITY_TABLES)}")
    return ENTITY_TABLES[entity]


def resolve_db_path(database_url: Optional[str]) -> str:
    """Turn a store connection string into a SQLite database path.

    Accepts ``sqlite:///relative.db``, ``sqlite:////absolute.db``,
    ``sqlite:///:memory:`` or a bare filesystem path.

    Raises:
        StoreUnavailableError: For any other URL scheme
    """
    if not database_url:
        return DB_PATH
    if database_url.startswith("sqlite:///"):
        return database_url[len("sqlite:///"):] or ":memory:"
    if "://" in database_url:
        scheme = database_url.split("://", 1)[0]
        raise StoreUnavailableError(f"Unsupported store URL scheme '{scheme}' (only sqlite is supported)")
    return database_url


@contextmanager
def get_connection(db_path: str = DB_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for short-lived database connections."""
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all catalog tables on an open connection."""
    cursor = conn.cursor()

    for table, translation_table, fk in (ENTITY_TABLES["category"], ENTITY_TABLES["lighting_type"]):
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                slug TEXT UNIQUE NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                sort_order INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS {translation_table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                {fk} INTEGER NOT NULL,
                language TEXT NOT NULL,
                name TEXT NOT NULL,
                slug TEXT NOT NULL,
                description TEXT,
                meta_title TEXT,
                meta_desc TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE ({fk}, language),
                FOREIGN KEY ({fk}) REFERENCES {table}(id) ON DELETE CASCADE
            )
        """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            product_id TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            images TEXT NOT NULL DEFAULT '[]',
            brand TEXT NOT NULL DEFAULT '',
            price REAL NOT NULL DEFAULT 0,
            price_increase REAL NOT NULL DEFAULT 0,
            quantity INTEGER NOT NULL DEFAULT 0,
            discount REAL NOT NULL DEFAULT 0,
            category_id INTEGER NOT NULL,
            lighting_type_id INTEGER NOT NULL,
            product_color TEXT NOT NULL DEFAULT 'warm'
                CHECK (product_color IN ('warm', 'cool', 'white')),
            product_ip TEXT NOT NULL DEFAULT 'IP20'
                CHECK (product_ip IN ('IP20', 'IP44', 'IP54', 'IP65', 'IP68')),
            h_number INTEGER CHECK (h_number IS NULL OR h_number > 0),
            max_ip INTEGER,
            spotlight_type TEXT,
            section_type TEXT,
            chandelier_lighting_type TEXT,
            is_active INTEGER NOT NULL DEFAULT 1,
            featured INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (category_id) REFERENCES categories(id),
            FOREIGN KEY (lighting_type_id) REFERENCES lighting_types(id)
        )
    """)

    spec_columns = ",\n".join(f"            {name} TEXT" for name in CANONICAL_SPEC_FIELDS)
    cursor.execute(f"""
        CREATE TABLE IF NOT EXISTS product_specifications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            product_id TEXT NOT NULL,
            language TEXT NOT NULL,
{spec_columns},
            custom_specs TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (product_id, language),
            FOREIGN KEY (product_id) REFERENCES products(product_id) ON DELETE CASCADE
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_products_brand ON products(brand)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_products_category_id ON products(category_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_products_lighting_type_id ON products(lighting_type_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_specs_language ON product_specifications(language)")

    conn.commit()


def init_db(db_path: str = DB_PATH) -> None:
    """Bootstrap the catalog schema (development and tests only)."""
    with get_connection(db_path) as conn:
        create_schema(conn)


def get_table_names(conn: sqlite3.Connection) -> Set[str]:
    """Names of all user tables in the database."""
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row[0] for row in cursor.fetchall()}


# =============================================================================
# Categories & Lighting Types
# =============================================================================

def upsert_entity(conn: sqlite3.Connection, entity: str, name: str, slug: str) -> EntityRecord:
    """Get-or-create a category / lighting type by name, refreshing its slug.

    Raises:
        sqlite3.IntegrityError: If the slug belongs to a different row
    """
    table, _, _ = _entity_tables(entity)
    conn.execute(f"""
        INSERT INTO {table} (name, slug, is_active, sort_order)
        VALUES (?, ?, 1, 0)
        ON CONFLICT(name) DO UPDATE SET
            slug = excluded.slug,
            updated_at = CURRENT_TIMESTAMP
    """, (name, slug))
    record = get_entity(conn, entity, name)
    if record is None:
        raise sqlite3.DatabaseError(f"{entity} '{name}' missing after upsert")
    return record


def get_entity(conn: sqlite3.Connection, entity: str, name: str) -> Optional[EntityRecord]:
    table, _, _ = _entity_tables(entity)
    row = conn.execute(f"SELECT id, name, slug FROM {table} WHERE name = ?", (name,)).fetchone()
    if row is None:
        return None
    return EntityRecord(id=row[0], name=row[1], slug=row[2])


def get_entity_slugs(conn: sqlite3.Connection, entity: str) -> Dict[str, str]:
    """Map of entity name -> persisted base slug."""
    table, _, _ = _entity_tables(entity)
    return {row[0]: row[1] for row in conn.execute(f"SELECT name, slug FROM {table}").fetchall()}


def upsert_entity_translation(
    conn: sqlite3.Connection,
    entity: str,
    entity_id: int,
    language: str,
    name: str,
    slug: str,
    description: Optional[str] = None,
    meta_title: Optional[str] = None,
    meta_desc: Optional[str] = None,
) -> None:
    """Insert or update the translation row keyed by (entity_id, language).

    Description and meta fields are only written when the row is created.
    """
    _, translation_table, fk = _entity_tables(entity)
    conn.execute(f"""
        INSERT INTO {translation_table} ({fk}, language, name, slug, description, meta_title, meta_desc)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT({fk}, language) DO UPDATE SET
            name = excluded.name,
            slug = excluded.slug,
            updated_at = CURRENT_TIMESTAMP
    """, (entity_id, language, name, slug, description, meta_title, meta_desc))


def get_entity_translations(conn: sqlite3.Connection, entity: str, entity_id: int) -> Dict[str, Dict[str, Any]]:
    """Translation rows of one entity keyed by language."""
    _, translation_table, fk = _entity_tables(entity)
    cursor = conn.execute(
        f"SELECT * FROM {translation_table} WHERE {fk} = ? ORDER BY language", (entity_id,)
    )
    return {row["language"]: dict(row) for row in cursor.fetchall()}


# =============================================================================
# Products & Specifications
# =============================================================================

def upsert_product(conn: sqlite3.Connection, payload: ProductPayload) -> int:
    """Insert or update a product keyed by product_id, returning its row id."""
    data = asdict(payload)
    data["images"] = json.dumps(data["images"], ensure_ascii=False)
    data["is_active"] = int(bool(data["is_active"]))
    data["featured"] = int(bool(data["featured"]))

    columns = ", ".join(PRODUCT_COLUMNS)
    placeholders = ", ".join("?" for _ in PRODUCT_COLUMNS)
    updates = ",\n            ".join(
        f"{col} = excluded.{col}" for col in PRODUCT_COLUMNS if col != "product_id"
    )
    conn.execute(f"""
        INSERT INTO products ({columns})
        VALUES ({placeholders})
        ON CONFLICT(product_id) DO UPDATE SET
            {updates},
            updated_at = CURRENT_TIMESTAMP
    """, [data[col] for col in PRODUCT_COLUMNS])

    row = conn.execute("SELECT id FROM products WHERE product_id = ?", (payload.product_id,)).fetchone()
    return row[0]


def get_product(conn: sqlite3.Connection, product_id: str) -> Optional[Dict[str, Any]]:
    """Retrieve one product with images decoded."""
    row = conn.execute("SELECT * FROM products WHERE product_id = ?", (product_id,)).fetchone()
    if row is None:
        return None
    product = dict(row)
    product["images"] = json.loads(product["images"] or "[]")
    return product


def upsert_specification(
    conn: sqlite3.Connection,
    product_id: str,
    language: str,
    spec: SpecificationData,
) -> None:
    """Insert or update the specification row keyed by (product_id, language).

    The row mirrors the source table: canonical fields and custom_specs
    absent from it are stored as NULL on update. This is a full replacement,
    not a merge that keeps previously stored values.
    """
    data = asdict(spec)
    custom_specs = data.pop("custom_specs")
    values = [data[name] for name in CANONICAL_SPEC_FIELDS]
    custom_json = json.dumps(custom_specs, ensure_ascii=False) if custom_specs else None

    columns = ("product_id", "language") + CANONICAL_SPEC_FIELDS + ("custom_specs",)
    placeholders = ", ".join("?" for _ in columns)
    updates = ",\n            ".join(
        f"{col} = excluded.{col}" for col in CANONICAL_SPEC_FIELDS + ("custom_specs",)
    )
    conn.execute(f"""
        INSERT INTO product_specifications ({", ".join(columns)})
        VALUES ({placeholders})
        ON CONFLICT(product_id, language) DO UPDATE SET
            {updates},
            updated_at = CURRENT_TIMESTAMP
    """, [product_id, language] + values + [custom_json])


def get_specifications(conn: sqlite3.Connection, product_id: str) -> Dict[str, Dict[str, Any]]:
    """Specification rows of a product keyed by language, custom_specs decoded."""
    cursor = conn.execute(
        "SELECT * FROM product_specifications WHERE product_id = ? ORDER BY language", (product_id,)
    )
    result = {}
    for row in cursor.fetchall():
        spec = dict(row)
        spec["custom_specs"] = json.loads(spec["custom_specs"]) if spec["custom_specs"] else None
        result[spec["language"]] = spec
    return result


def count_rows(conn: sqlite3.Connection, table: str) -> int:
    """Row count of one of the catalog tables."""
    valid = {t for tables in ENTITY_TABLES.values() for t in tables[:2]}
    valid.update({"products", "product_specifications"})
    if table not in valid:
        raise ValueError(f"Invalid table name: {table}. Must be one of {sorted(valid)}")
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


# =============================================================================
# Run-scoped Store
# =============================================================================

class CatalogStore:
    """Owns the run's single connection and serializes access to it.

    Store calls arrive from worker threads (see sync.DatabaseSync); each
    ``run`` holds the lock for one unit of work and commits it, or rolls it
    back if it raised.
    """

    def __init__(self, database_url: Optional[str] = None, timeout: float = 30.0):
        self.db_path = resolve_db_path(database_url)
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def connect(self) -> "CatalogStore":
        """Open the connection.

        Raises:
            StoreUnavailableError: If the database cannot be opened
        """
        if self._conn is not None:
            return self
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open store at {self.db_path}: {e}") from e
        self._conn = conn
        return self

    def run(self, fn: Callable[..., T], *args: Any) -> T:
        """Call ``fn(conn, *args)`` under the lock and commit."""
        if self._conn is None:
            raise StoreUnavailableError("Store is not connected")
        with self._lock:
            try:
                result = fn(self._conn, *args)
                self._conn.commit()
                return result
            except Exception:
                self._conn.rollback()
                raise

    def ping(self) -> None:
        """Round-trip a trivial query.

        Raises:
            StoreUnavailableError: If the store does not answer
        """
        try:
            self.run(lambda conn: conn.execute("SELECT 1").fetchone())
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Store did not answer: {e}") from e

    def close(self) -> None:
        """Close the connection; safe to call more than once."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "CatalogStore":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
