"""Configuration and constants for the catalog import."""

import os
from pathlib import Path
from typing import Dict, List, Optional

__all__ = [
    "SUPPORTED_LANGUAGES",
    "PRIMARY_LANGUAGE",
    "FALLBACK_LANGUAGE",
    "BATCH_SIZE",
    "DB_PATH",
    "DATABASE_URL_ENV",
    "DATA_DIR_ENV",
    "STORE_NAME",
    "REQUIRED_TABLES",
    "FILE_SEARCH_PATTERNS",
    "DEFAULT_BASE_PATHS",
    "ARABIC_SLUG_MAP",
    "SLUG_MAX_LENGTH",
    "CATEGORY_TRANSLATIONS",
    "LIGHTING_TYPE_TRANSLATIONS",
    "SPECIFICATION_FIELD_MAPPING",
    "CANONICAL_SPEC_FIELDS",
    "NON_SPEC_KEYS",
    "H_NUMBER_FIELDS",
    "H_NUMBER_SPEC_FIELDS",
    "COLOR_TEMPERATURE_KEYS",
    "IP_KEYS",
    "get_database_url",
    "get_data_dirs",
]

SUPPORTED_LANGUAGES = ("ar", "en")

# Overlay used for enum derivation; the other one is consulted when it has no entry
PRIMARY_LANGUAGE = "en"
FALLBACK_LANGUAGE = "ar"

# Products processed concurrently per chunk
BATCH_SIZE = 50

# Default store when DATABASE_URL is not set
DB_PATH = "data/catalog.db"

DATABASE_URL_ENV = "DATABASE_URL"
DATA_DIR_ENV = "CATALOG_DATA_DIR"

# Used in translation meta titles
STORE_NAME = "Art Lighting"

REQUIRED_TABLES = (
    "categories",
    "category_translations",
    "lighting_types",
    "lighting_type_translations",
    "products",
    "product_specifications",
)


# =============================================================================
# Input File Resolution
# =============================================================================
# Relative path patterns tried (in order) against every base directory.

FILE_SEARCH_PATTERNS: Dict[str, List[str]] = {
    "static": [
        "src/data/products-details-static.json",
        "data/products-details-static.json",
        "products-details-static.json",
        "apps/web/src/data/products-details-static.json",
    ],
    "ar": [
        "src/data/products-details-ar.json",
        "data/products-details-ar.json",
        "products-details-ar.json",
        "apps/web/src/data/products-details-ar.json",
    ],
    "en": [
        "src/data/products-details-en.json",
        "data/products-details-en.json",
        "products-details-en.json",
        "apps/web/src/data/products-details-en.json",
    ],
}

_PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_BASE_PATHS: List[Path] = [
    _PACKAGE_DIR,
    _PACKAGE_DIR.parent,
    _PACKAGE_DIR.parent.parent,
    _PACKAGE_DIR.parent.parent.parent,
]


# =============================================================================
# Slugs
# =============================================================================

# Curated Arabic lighting terms with fixed English slugs
ARABIC_SLUG_MAP: Dict[str, str] = {
    "داخلي": "indoor",
    "خارجي": "outdoor",
    "نجف": "chandelier",
    "معلق": "pendant",
    "سقف": "ceiling",
    "جداري": "wall",
    "اضاءه جدارية": "wall-washer",
    "إضاءة سفلية": "downlight",
    "كشاف ضوء": "spotlight",
    "العائله 202": "family-202",
    "العائله 500": "family-500",
    "العائله 800": "family-800",
    "العائله 900": "family-900",
    "شريط ليد": "led-strip",
    "اضاءة خطية": "linear-lighting",
    "إضاءة علوية": "uplight",
    "حربات": "spikes",
    "اعمدة": "bollards",
}

SLUG_MAX_LENGTH = 50


# =============================================================================
# Label Translations
# =============================================================================
# Canonical label -> {language: display name}. Copied into every
# TranslationRegistry instance, never mutated directly.

CATEGORY_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "indoor": {"en": "Indoor Lighting", "ar": "إضاءة داخلية"},
    "outdoor": {"en": "Outdoor Lighting", "ar": "إضاءة خارجية"},
    "chandelier": {"en": "Chandeliers", "ar": "النجف"},
}

LIGHTING_TYPE_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "track-light": {"en": "Track light", "ar": "تراك لايت"},
    "cob": {"en": "COB", "ar": "COB"},
    "panel-light": {"en": "Panel light", "ar": "إضاءة بانل"},
    "led-strip": {"en": "LED Strips", "ar": "شرائط الليد"},
    "linear-lighting": {"en": "Linear Lighting", "ar": "الإضاءة الخطية"},
    "uplight": {"en": "Uplights", "ar": "الإضاءة العلوية"},
    "spikes": {"en": "Spike Lights", "ar": "الحربات"},
    "bollard": {"en": "Bollard Lights", "ar": "إضاءة الأعمدة"},
    "flood-light": {"en": "Flood Lights", "ar": "كشافات الوجهات و الملاعب"},
    "wall-washer": {"en": "Wall Washer Lights", "ar": "إضاءة جدارية"},
}


# =============================================================================
# Specification Field Definitions
# =============================================================================
# Each language maps the labels found in `specificationsTable` to the
# canonical column of the product_specifications table.

CANONICAL_SPEC_FIELDS = (
    "input",
    "maximum_wattage",
    "brand_of_led",
    "luminous_flux",
    "main_material",
    "cri",
    "beam_angle",
    "working_temperature",
    "fixture_dimmable",
    "electrical",
    "power_factor",
    "color_temperature",
    "ip",
    "energy_saving",
    "life_time",
    "finish",
    "lamp_base",
    "bulb",
)

SPECIFICATION_FIELD_MAPPING: Dict[str, Dict[str, str]] = {
    "ar": {
        "المدخل": "input",
        "أقصى قوة كهربائية (w)": "maximum_wattage",
        "علامة الليد التجارية": "brand_of_led",
        "الومن": "luminous_flux",
        "مادة التصنيع": "main_material",
        "مؤشر تجسيد الألوان": "cri",
        "زاوية الإضاءة°": "beam_angle",
        "درجة حرارة التشغيل": "working_temperature",
        "قابلية التعتيم": "fixture_dimmable",
        "الترانس": "electrical",
        "معامل القدرة": "power_factor",
        "عامل القدرة": "power_factor",
        "درجة حرارة لون الاضاءة": "color_temperature",
        "درجة حرارة لون الإضاءة": "color_temperature",
        "درجة الحماية": "ip",
        "توفير الطاقة": "energy_saving",
        "العمر الافتراضي": "life_time",
        "التشطيب": "finish",
        "قاعدة المصباح": "lamp_base",
        "المصباح": "bulb",
    },
    "en": {
        "Input": "input",
        "Maximum wattage": "maximum_wattage",
        "Brand Of Led": "brand_of_led",
        "Luminous Flux": "luminous_flux",
        "Main Material": "main_material",
        "CRI": "cri",
        "Beam Angle": "beam_angle",
        "Working Temperature": "working_temperature",
        "Fixture Dimmable": "fixture_dimmable",
        "Electrical": "electrical",
        "Power Factor": "power_factor",
        "Color Temperature": "color_temperature",
        "IP": "ip",
        "Energy Saving": "energy_saving",
        "Life Time": "life_time",
        "Finished": "finish",
        "Lamp Base": "lamp_base",
        "BULB": "bulb",
    },
}

# Product-record fields that may carry the unit count, in priority order
H_NUMBER_FIELDS = ("Hnumber", "hnumber", "HNumber", "hNumber", "number", "units")

# Same fields inside a specification table, plus the Arabic labels
H_NUMBER_SPEC_FIELDS = H_NUMBER_FIELDS + ("عدد الوحدات", "وحدات")

# Keys that are not specifications and never land in custom_specs
NON_SPEC_KEYS = frozenset(H_NUMBER_SPEC_FIELDS + ("maxIP", "MaxIP"))

COLOR_TEMPERATURE_KEYS = (
    "Color Temperature",
    "درجة حرارة لون الإضاءة",
    "درجة حرارة لون الاضاءة",
)

IP_KEYS = ("IP", "درجة الحماية")


def get_database_url(default: Optional[str] = None) -> str:
    """Return the store connection string from the environment.

    Call ``dotenv.load_dotenv()`` first if a ``.env`` file should be honored.
    """
    return os.environ.get(DATABASE_URL_ENV) or default or DB_PATH


def get_data_dirs() -> List[Path]:
    """Extra base directories from CATALOG_DATA_DIR (os.pathsep separated)."""
    raw = os.environ.get(DATA_DIR_ENV, "")
    return [Path(part) for part in raw.split(os.pathsep) if part.strip()]
