"""Specification table normalization and derived product attributes.

Source specification tables are free-form ``{label: value}`` dicts whose
labels depend on the overlay language. This module maps them onto the
canonical product_specifications columns and derives the color-temperature
bucket, the IP-rating bucket and the hNumber (unit count).
"""

import json
import math
import re
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Optional

from catalog_import.config import (
    COLOR_TEMPERATURE_KEYS,
    H_NUMBER_FIELDS,
    H_NUMBER_SPEC_FIELDS,
    IP_KEYS,
    NON_SPEC_KEYS,
    SPECIFICATION_FIELD_MAPPING,
)
from catalog_import.logging_config import get_logger
from catalog_import.models import SpecificationData

__all__ = [
    "NumberParse",
    "normalize_value",
    "process_specifications",
    "determine_product_color",
    "determine_product_ip",
    "parse_number_value",
    "extract_h_number",
    "find_specifications_table",
    "PRODUCT_COLORS",
    "PRODUCT_IPS",
]

logger = get_logger("specifications")

PRODUCT_COLORS = ("warm", "cool", "white")
PRODUCT_IPS = ("IP20", "IP44", "IP54", "IP65", "IP68")

# Checked in order; the first matching marker wins
COLOR_MARKERS = (
    (("3000", "٣٠٠٠"), "warm"),
    (("4000", "٤٠٠٠"), "cool"),
    (("6500", "٦٥٠٠"), "white"),
)

IP_BUCKETS = {
    "20": "IP20", "٢٠": "IP20",
    "44": "IP44", "٤٤": "IP44",
    "54": "IP54", "٥٤": "IP54",
    "65": "IP65", "٦٥": "IP65",
    "68": "IP68", "٦٨": "IP68",
}

IP_PREFIX_RE = re.compile(r"^ip\s*", re.IGNORECASE)
NON_DIGIT_RE = re.compile(r"[^\d]")

# Largest value a store INTEGER column accepts
MAX_STORED_INT = 2 ** 63 - 1


class NumberParse(NamedTuple):
    """Result of parsing a loosely typed numeric value."""

    ok: bool
    value: Optional[int] = None
    reason: str = ""

    @classmethod
    def success(cls, value: int) -> "NumberParse":
        return cls(True, value)

    @classmethod
    def failure(cls, reason: str) -> "NumberParse":
        return cls(False, None, reason)


def normalize_value(value: Any) -> str:
    """Stringify a specification value for a canonical column."""
    if isinstance(value, str):
        return value.strip()
    if value is None:
        return ""
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return json.dumps(value, ensure_ascii=False)


def process_specifications(raw_table: Optional[Mapping[str, Any]], language: str) -> SpecificationData:
    """Map a raw specification table onto canonical fields.

    Args:
        raw_table: ``{label: value}`` from an overlay's specificationsTable
        language: Overlay language, selects the label mapping

    Returns:
        SpecificationData with canonical fields set for every mapped label and
        every other label (except unit-count and max-IP keys) in custom_specs
    """
    field_mapping = SPECIFICATION_FIELD_MAPPING.get(language, {})
    result = SpecificationData()
    custom_specs: Dict[str, Any] = {}

    for key, value in (raw_table or {}).items():
        mapped_field = field_mapping.get(key)
        if mapped_field:
            setattr(result, mapped_field, normalize_value(value))
        elif key not in NON_SPEC_KEYS:
            custom_specs[key] = value

    if custom_specs:
        result.custom_specs = custom_specs

    return result


def _first_present(specs: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = specs.get(key)
        if value:
            return value
    return None


def determine_product_color(specs: Optional[Mapping[str, Any]]) -> str:
    """Bucket the color temperature into warm / cool / white (default warm)."""
    color_temp = _first_present(specs or {}, COLOR_TEMPERATURE_KEYS)
    if not color_temp:
        return "warm"

    color_str = str(color_temp).lower()
    for markers, bucket in COLOR_MARKERS:
        if any(marker in color_str for marker in markers):
            return bucket
    return "warm"


def determine_product_ip(specs: Optional[Mapping[str, Any]]) -> str:
    """Bucket the IP rating into one of PRODUCT_IPS (default IP20).

    Accepts "65", 65, "IP65" and Arabic-Indic "٦٥".
    """
    ip = _first_present(specs or {}, IP_KEYS)
    if not ip:
        return "IP20"

    ip_str = IP_PREFIX_RE.sub("", normalize_value(ip))
    return IP_BUCKETS.get(ip_str, "IP20")


def parse_number_value(value: Any) -> NumberParse:
    """Parse an int out of a number, numeric string or boolean.

    Strings lose every non-digit character first ("12 units" -> 12).
    Arabic-Indic digits count as digits. Values a store INTEGER column
    cannot hold fail.
    """
    if isinstance(value, bool):
        return NumberParse.success(1 if value else 0)
    if isinstance(value, int):
        return _bounded(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return NumberParse.failure("not a finite number")
        return _bounded(math.floor(value))
    if isinstance(value, str):
        digits = NON_DIGIT_RE.sub("", value.strip())
        if not digits:
            return NumberParse.failure("no digits")
        return _bounded(int(digits))
    return NumberParse.failure(f"unsupported type {type(value).__name__}")


def _bounded(number: int) -> NumberParse:
    if abs(number) > MAX_STORED_INT:
        return NumberParse.failure("out of integer range")
    return NumberParse.success(number)


def _search_h_number(source: Mapping[str, Any], fields: Iterable[str], where: str) -> Optional[int]:
    for field_name in fields:
        value = source.get(field_name)
        if value is None or value == "":
            continue
        parsed = parse_number_value(value)
        if parsed.ok and parsed.value > 0:
            logger.debug(f"Found hNumber {parsed.value} in {where} field {field_name!r}")
            return parsed.value
    return None


def extract_h_number(
    product_record: Optional[Mapping[str, Any]],
    specs: Optional[Mapping[str, Any]] = None,
) -> Optional[int]:
    """Find the product's unit count.

    The product record is searched first; the specification table is only a
    fallback, so a record hit always wins.

    Example:
        >>> extract_h_number({"Hnumber": "12 units"}, {"Hnumber": 5})
        12
    """
    if isinstance(product_record, Mapping):
        found = _search_h_number(product_record, H_NUMBER_FIELDS, "product data")
        if found is not None:
            return found

    if isinstance(specs, Mapping):
        return _search_h_number(specs, H_NUMBER_SPEC_FIELDS, "specifications")

    return None


def find_specifications_table(
    overlay: Optional[Mapping[str, Any]],
    brand: str,
    category: str,
    product_id: str,
) -> Optional[Dict[str, Any]]:
    """Locate a product's specificationsTable inside a language overlay.

    Lighting-type keys may be translated in overlays, so every list under
    ``categories[brand][category]`` is searched.
    """
    if not overlay:
        return None

    category_data = ((overlay.get("categories") or {}).get(brand) or {}).get(category)
    if not isinstance(category_data, Mapping):
        return None

    for products in category_data.values():
        if not isinstance(products, list):
            continue
        for entry in products:
            if not isinstance(entry, Mapping):
                continue
            product = entry.get(product_id)
            if isinstance(product, Mapping) and isinstance(product.get("specificationsTable"), Mapping):
                return dict(product["specificationsTable"])
    return None
