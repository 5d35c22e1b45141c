"""Data models for catalog import records, outcomes and reports."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

__all__ = [
    "EntityRecord",
    "SpecificationData",
    "ProductPayload",
    "CatalogInputs",
    "NodeOutcome",
    "ImportSummary",
    "ImportReport",
]


@dataclass
class EntityRecord:
    """A category or lighting type row as stored."""

    id: int
    name: str
    slug: str


@dataclass
class SpecificationData:
    """One language's specification table, normalized.

    Canonical fields match the product_specifications columns. Source keys
    without a canonical field are kept verbatim in custom_specs.
    """

    input: Optional[str] = None
    maximum_wattage: Optional[str] = None
    brand_of_led: Optional[str] = None
    luminous_flux: Optional[str] = None
    main_material: Optional[str] = None
    cri: Optional[str] = None
    beam_angle: Optional[str] = None
    working_temperature: Optional[str] = None
    fixture_dimmable: Optional[str] = None
    electrical: Optional[str] = None
    power_factor: Optional[str] = None
    color_temperature: Optional[str] = None
    ip: Optional[str] = None
    energy_saving: Optional[str] = None
    life_time: Optional[str] = None
    finish: Optional[str] = None
    lamp_base: Optional[str] = None
    bulb: Optional[str] = None
    custom_specs: Optional[Dict[str, Any]] = None

    def canonical_fields(self) -> Dict[str, str]:
        """Canonical fields that were present in the source table."""
        return {
            k: v for k, v in asdict(self).items()
            if k != "custom_specs" and v is not None
        }


@dataclass
class ProductPayload:
    """Product row ready for upsert."""

    # Required fields
    product_id: str
    name: str
    category_id: int
    lighting_type_id: int

    brand: str = ""
    images: List[str] = field(default_factory=list)
    price: float = 0
    price_increase: float = 0
    quantity: int = 0
    discount: float = 0

    # Derived
    product_color: str = "warm"
    product_ip: str = "IP20"
    h_number: Optional[int] = None

    max_ip: Optional[int] = None
    spotlight_type: Optional[str] = None
    section_type: Optional[str] = None
    chandelier_lighting_type: Optional[str] = None
    is_active: bool = True
    featured: bool = False


@dataclass
class CatalogInputs:
    """Parsed input files. Overlays are keyed by language and may be missing."""

    static: Dict[str, Any]
    overlays: Dict[str, Optional[Dict[str, Any]]] = field(default_factory=dict)

    @property
    def brands(self) -> Dict[str, Any]:
        return self.static.get("categories") or {}


@dataclass
class NodeOutcome:
    """Result of visiting one node of the catalog tree.

    level is one of 'brand', 'category', 'lighting_type', 'product'.
    status is 'done' or 'skipped'. For products, spec_languages records the
    per-language specification result ('persisted', 'missing', 'failed').
    """

    level: str
    path: tuple
    status: str
    error: Optional[str] = None
    spec_languages: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.path[-1] if self.path else ""

    @property
    def ok(self) -> bool:
        return self.status == "done"


@dataclass
class ImportSummary:
    """Aggregated outcomes of one run."""

    processed_products: int = 0
    skipped_products: int = 0
    processed_brands: int = 0
    processed_categories: int = 0
    processed_lighting_types: int = 0
    skipped_nodes: List[NodeOutcome] = field(default_factory=list)
    interrupted: bool = False

    def add(self, outcome: NodeOutcome) -> None:
        """Fold one node outcome into the totals."""
        if not outcome.ok:
            self.skipped_nodes.append(outcome)
            if outcome.level == "product":
                self.skipped_products += 1
            return

        if outcome.level == "product":
            self.processed_products += 1
        elif outcome.level == "brand":
            self.processed_brands += 1
        elif outcome.level == "category":
            self.processed_categories += 1
        elif outcome.level == "lighting_type":
            self.processed_lighting_types += 1


@dataclass
class ImportReport:
    """Post-run statistics read back from the store."""

    product_count: int = 0
    active_product_count: int = 0
    category_count: int = 0
    lighting_type_count: int = 0
    products_by_brand: Dict[str, int] = field(default_factory=dict)
    specifications_by_language: Dict[str, int] = field(default_factory=dict)
    products_with_h_number: int = 0
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    price_avg: Optional[float] = None

    @property
    def products_without_h_number(self) -> int:
        return self.product_count - self.products_with_h_number

    @property
    def h_number_coverage(self) -> float:
        """Percentage of products with an hNumber (0.0 when there are none)."""
        if not self.product_count:
            return 0.0
        return round(self.products_with_h_number / self.product_count * 100, 1)
