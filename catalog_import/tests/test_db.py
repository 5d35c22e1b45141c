"""Tests for the SQLite store layer."""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from catalog_import.db import (
    CatalogStore,
    count_rows,
    get_connection,
    get_entity,
    get_entity_slugs,
    get_entity_translations,
    get_product,
    get_specifications,
    get_table_names,
    init_db,
    resolve_db_path,
    upsert_entity,
    upsert_entity_translation,
    upsert_product,
    upsert_specification,
)
from catalog_import.config import REQUIRED_TABLES
from catalog_import.errors import StoreUnavailableError
from catalog_import.models import ProductPayload, SpecificationData


def _payload(product_id="P-1", **overrides):
    data = dict(product_id=product_id, name="Product", category_id=1, lighting_type_id=1)
    data.update(overrides)
    return ProductPayload(**data)


class TestResolveDbPath:

    @pytest.mark.parametrize("url,expected", [
        ("sqlite:///data/catalog.db", "data/catalog.db"),
        ("sqlite:////var/db/catalog.db", "/var/db/catalog.db"),
        ("sqlite:///:memory:", ":memory:"),
        ("local.db", "local.db"),
    ])
    def test_sqlite_forms(self, url, expected):
        assert resolve_db_path(url) == expected

    def test_empty_uses_default(self):
        assert resolve_db_path(None) == "data/catalog.db"

    def test_other_schemes_are_unavailable(self):
        with pytest.raises(StoreUnavailableError, match="postgresql"):
            resolve_db_path("postgresql://user@localhost/catalog")


class TestSchema:
    """Tests for the schema bootstrap."""

    @pytest.fixture
    def temp_db(self):
        """Create a temporary database."""
        with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
            db_path = f.name
        init_db(db_path)
        yield db_path
        # Cleanup
        Path(db_path).unlink(missing_ok=True)

    def test_init_db_creates_required_tables(self, temp_db):
        with get_connection(temp_db) as conn:
            assert set(REQUIRED_TABLES) <= get_table_names(conn)

    def test_init_db_is_repeatable(self, temp_db):
        init_db(temp_db)
        with get_connection(temp_db) as conn:
            assert count_rows(conn, "products") == 0

    def test_h_number_must_be_positive(self, temp_db):
        with get_connection(temp_db) as conn:
            conn.execute("INSERT INTO categories (name, slug) VALUES ('c', 'c')")
            conn.execute("INSERT INTO lighting_types (name, slug) VALUES ('l', 'l')")
            with pytest.raises(sqlite3.IntegrityError):
                upsert_product(conn, _payload(h_number=0))

    def test_product_requires_existing_parents(self, temp_db):
        with get_connection(temp_db) as conn:
            with pytest.raises(sqlite3.IntegrityError):
                upsert_product(conn, _payload(category_id=99, lighting_type_id=99))


class TestEntities:
    """Tests for category / lighting type upserts."""

    def test_upsert_is_idempotent(self, store):
        first = store.run(upsert_entity, "category", "indoor", "indoor")
        second = store.run(upsert_entity, "category", "indoor", "indoor")

        assert first == second
        assert store.run(count_rows, "categories") == 1

    def test_upsert_refreshes_slug(self, store):
        store.run(upsert_entity, "lighting_type", "cob", "cob")
        record = store.run(upsert_entity, "lighting_type", "cob", "item-1234abcd")

        assert record.slug == "item-1234abcd"
        assert store.run(get_entity, "lighting_type", "cob").slug == "item-1234abcd"

    def test_slug_taken_by_other_name_raises(self, store):
        store.run(upsert_entity, "category", "indoor", "indoor")
        with pytest.raises(sqlite3.IntegrityError):
            store.run(upsert_entity, "category", "Indoor", "indoor")

    def test_invalid_entity(self, store):
        with pytest.raises(ValueError):
            store.run(upsert_entity, "brands; DROP TABLE products", "x", "x")

    def test_get_entity_slugs(self, store):
        store.run(upsert_entity, "category", "indoor", "indoor")
        store.run(upsert_entity, "category", "outdoor", "outdoor")
        assert store.run(get_entity_slugs, "category") == {"indoor": "indoor", "outdoor": "outdoor"}

    def test_translation_update_keeps_description(self, store):
        record = store.run(upsert_entity, "category", "indoor", "indoor")
        store.run(upsert_entity_translation, "category", record.id, "en", "Indoor", "indoor", "First description")
        store.run(upsert_entity_translation, "category", record.id, "en", "Indoor Lighting", "indoor-lighting", "Second")

        translations = store.run(get_entity_translations, "category", record.id)

        assert list(translations) == ["en"]
        assert translations["en"]["name"] == "Indoor Lighting"
        assert translations["en"]["slug"] == "indoor-lighting"
        assert translations["en"]["description"] == "First description"


class TestProducts:
    """Tests for product and specification upserts."""

    @pytest.fixture
    def parents(self, store):
        category = store.run(upsert_entity, "category", "indoor", "indoor")
        lighting_type = store.run(upsert_entity, "lighting_type", "cob", "cob")
        return category.id, lighting_type.id

    def test_product_round_trip(self, store, parents):
        category_id, lighting_type_id = parents
        payload = _payload(
            category_id=category_id,
            lighting_type_id=lighting_type_id,
            images=["a.jpg", "ب.jpg"],
            h_number=12,
            featured=False,
        )
        store.run(upsert_product, payload)

        product = store.run(get_product, "P-1")
        assert product["images"] == ["a.jpg", "ب.jpg"]
        assert product["h_number"] == 12
        assert product["is_active"] == 1
        assert product["product_ip"] == "IP20"

    def test_product_upsert_updates_in_place(self, store, parents):
        category_id, lighting_type_id = parents
        first_id = store.run(upsert_product, _payload(category_id=category_id, lighting_type_id=lighting_type_id))
        second_id = store.run(upsert_product, _payload(
            category_id=category_id, lighting_type_id=lighting_type_id, price=99.5,
        ))

        assert first_id == second_id
        assert store.run(get_product, "P-1")["price"] == 99.5
        assert store.run(count_rows, "products") == 1

    def test_specification_row_is_replaced(self, store, parents):
        category_id, lighting_type_id = parents
        store.run(upsert_product, _payload(category_id=category_id, lighting_type_id=lighting_type_id))

        store.run(upsert_specification, "P-1", "en", SpecificationData(input="220V", cri=">80"))
        store.run(upsert_specification, "P-1", "en", SpecificationData(
            input="110V", custom_specs={"Warranty": "2 years"},
        ))

        specs = store.run(get_specifications, "P-1")
        assert specs["en"]["input"] == "110V"
        assert specs["en"]["cri"] is None
        assert specs["en"]["custom_specs"] == {"Warranty": "2 years"}
        assert store.run(count_rows, "product_specifications") == 1

        store.run(upsert_specification, "P-1", "en", SpecificationData(input="110V"))
        assert store.run(get_specifications, "P-1")["en"]["custom_specs"] is None

    def test_specification_requires_product(self, store, parents):
        with pytest.raises(sqlite3.IntegrityError):
            store.run(upsert_specification, "missing", "en", SpecificationData(input="220V"))

    def test_count_rows_rejects_unknown_table(self, store):
        with pytest.raises(ValueError):
            store.run(count_rows, "sqlite_master")


class TestCatalogStore:
    """Tests for the run-scoped store."""

    def test_run_rolls_back_on_error(self, store):
        def failing(conn):
            upsert_entity(conn, "category", "indoor", "indoor")
            raise RuntimeError("after insert")

        with pytest.raises(RuntimeError):
            store.run(failing)

        assert store.run(count_rows, "categories") == 0

    def test_run_requires_connection(self, db_url):
        with pytest.raises(StoreUnavailableError):
            CatalogStore(db_url).run(count_rows, "products")

    def test_ping(self, store):
        store.ping()

    def test_close_is_idempotent(self, db_url):
        catalog_store = CatalogStore(db_url).connect()
        catalog_store.close()
        catalog_store.close()
        assert not catalog_store.is_open

    def test_context_manager(self, db_url):
        with CatalogStore(db_url) as catalog_store:
            assert catalog_store.is_open
        assert not catalog_store.is_open

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StoreUnavailableError):
            CatalogStore(str(blocker / "catalog.db")).connect()
