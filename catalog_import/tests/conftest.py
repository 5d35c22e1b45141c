"""Shared test fixtures for the catalog import test suite."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

import pytest

from catalog_import.context import ImportRun
from catalog_import.db import CatalogStore, create_schema
from catalog_import.files import FileResolver


STATIC_CATALOG: Dict[str, Any] = {
    "categories": {
        "ArtLight": {
            "indoor": {
                "track-light": [
                    {"TL-100": {
                        "productName": "Track 100",
                        "price": 120,
                        "productImages": ["tl-100-a.jpg", "tl-100-b.jpg"],
                        "Hnumber": "12 units",
                    }},
                    {"TL-200": {
                        "productName": "Track 200",
                        "price": "n/a",
                        "MaxIP": "IP65",
                    }},
                ],
                "panel-light": [
                    {"PL-1": {"productName": "Panel 1", "quantity": 3}},
                ],
            },
            "outdoor": {
                "spikes": [
                    {"SP-1": {"productName": "Spike 1", "brand": "GardenCo"}},
                ],
            },
        },
    },
}

EN_OVERLAY: Dict[str, Any] = {
    "categories": {
        "ArtLight": {
            "indoor": {
                "Track light": [
                    {"TL-100": {"specificationsTable": {
                        "Input": "220V",
                        "Color Temperature": "4000K",
                        "IP": "65",
                        "Hnumber": 5,
                        "Warranty": "2 years",
                    }}},
                    {"TL-200": {"specificationsTable": {"Input": "110V"}}},
                ],
                "Panel light": [
                    {"PL-1": {"specificationsTable": {"Maximum wattage": 18}}},
                ],
            },
        },
    },
}

AR_OVERLAY: Dict[str, Any] = {
    "categories": {
        "ArtLight": {
            "indoor": {
                "تراك لايت": [
                    {"TL-100": {"specificationsTable": {"المدخل": "220 فولت", "درجة الحماية": "٦٥"}}},
                    {"TL-200": {"specificationsTable": {"عدد الوحدات": "٣ وحدات"}}},
                ],
            },
            "outdoor": {
                "حربات": [
                    {"SP-1": {"specificationsTable": {"درجة حرارة لون الإضاءة": "٦٥٠٠"}}},
                ],
            },
        },
    },
}


def write_catalog(base: Path, static: Any = STATIC_CATALOG, en: Any = EN_OVERLAY, ar: Any = AR_OVERLAY) -> Path:
    """Write the catalog files under base/data/ (None skips a file)."""
    data_dir = base / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    for file_type, content in (("static", static), ("en", en), ("ar", ar)):
        if content is not None:
            path = data_dir / f"products-details-{file_type}.json"
            path.write_text(json.dumps(content, ensure_ascii=False), encoding="utf-8")
    return base


@pytest.fixture
def catalog_files():
    """The write_catalog helper, for tests that need custom catalog layouts."""
    return write_catalog


@pytest.fixture
def catalog_dir(tmp_path):
    """Directory holding the sample static catalog and both overlays."""
    return write_catalog(tmp_path / "catalog")


@pytest.fixture
def empty_dir(tmp_path):
    """Directory without any input files."""
    path = tmp_path / "empty"
    path.mkdir()
    return path


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
def store(db_url):
    """Connected store with the catalog schema."""
    catalog_store = CatalogStore(db_url).connect()
    catalog_store.run(create_schema)
    yield catalog_store
    catalog_store.close()


@pytest.fixture
def bare_store(tmp_path):
    """Connected store without any tables."""
    catalog_store = CatalogStore(f"sqlite:///{tmp_path / 'bare.db'}").connect()
    yield catalog_store
    catalog_store.close()


@pytest.fixture
def make_run(catalog_dir):
    """Factory for a fresh ImportRun reading the sample catalog."""
    def _make_run(base_dir: Path = catalog_dir, **kwargs) -> ImportRun:
        return ImportRun(files=FileResolver([base_dir]), **kwargs)
    return _make_run


@pytest.fixture
def reset_package_logger():
    """Drop handlers installed by setup_logging after the test."""
    yield
    logger = logging.getLogger("catalog_import")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
