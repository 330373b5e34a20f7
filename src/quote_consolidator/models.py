"""
Data models for the Quote Consolidator.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Dict, Any, Optional, Tuple

DEFAULT_PRODUCT_COLOR = '#3B82F6'
DEFAULT_MAP_ADDON_COLOR = '#F59E0B'


@dataclass
class Variation:
    """A selected product variation (height, style, material...)."""
    id: str
    name: str
    price_adjustment: Decimal = Decimal('0')
    adjustment_type: str = 'fixed'
    height_value: Optional[Decimal] = None
    unit_of_measurement: str = 'ft'
    affects_area_calculation: bool = False


@dataclass
class Addon:
    """Canonical traditional add-on selection attached to a measurement."""
    id: str
    name: str
    price_value: Decimal = Decimal('0')
    price_type: str = 'fixed'
    calculation_type: str = 'total'
    quantity: Decimal = Decimal('0')
    selected_option: str = ''
    selected_option_label: str = ''
    selected_option_price_adjustment: Decimal = Decimal('0')
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_identity(self) -> bool:
        return bool(self.id or self.selected_option)


@dataclass
class Measurement:
    """Measurement payload captured on the map or entered manually."""
    type: str = 'area'
    value: Decimal = Decimal('0')
    unit: str = ''
    variations: List[Variation] = field(default_factory=list)
    addons: List[Addon] = field(default_factory=list)
    map_color: Optional[str] = None
    manual_entry: bool = False


@dataclass
class QuoteItem:
    """A single purchased line of a quote."""
    id: str
    product_id: str
    product_name: str
    unit_type: str
    unit_price: Decimal
    quantity: Decimal
    line_total: Decimal
    measurement: Measurement = field(default_factory=Measurement)
    parent_quote_item_id: Optional[str] = None
    custom_name: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_child(self) -> bool:
        return bool(self.parent_quote_item_id)


@dataclass
class AddonInstance:
    """Back-reference to one raw add-on occurrence folded into a row."""
    parent_item_id: str
    addon_data: Dict[str, Any]


@dataclass
class ConsolidatedAddon:
    """One row per distinct (addon id, selected option) within a product group."""
    id: str
    name: str
    price_value: Decimal
    price_type: str
    calculation_type: str
    quantity: Decimal
    selected_option: str = ''
    selected_option_price_adjustment: Decimal = Decimal('0')
    instances: List[AddonInstance] = field(default_factory=list)


@dataclass
class ConsolidatedMapAddon:
    """One row per child product placed on the map under a product group."""
    product_id: str
    product_name: str
    unit_price: Decimal
    unit_type: str
    total_quantity: Decimal
    total_line_total: Decimal
    map_color: str
    items: List[QuoteItem] = field(default_factory=list)


@dataclass
class ConsolidatedMainProduct:
    """One display row per (product id, variation signature)."""
    product_id: str
    product_name: str
    unit_type: str
    unit_price: Decimal
    total_quantity: Decimal
    total_line_total: Decimal
    color: str
    instances: List[QuoteItem] = field(default_factory=list)
    variations: List[Variation] = field(default_factory=list)
    traditional_addons: List[ConsolidatedAddon] = field(default_factory=list)
    map_placed_addons: List[ConsolidatedMapAddon] = field(default_factory=list)


@dataclass
class ConsolidatedQuoteData:
    """Result of consolidating a flat quote item list."""
    consolidated_main_products: List[ConsolidatedMainProduct] = field(default_factory=list)
    dropped_orphans: List[QuoteItem] = field(default_factory=list)
    malformed_addons: int = 0


# (product id, ((variation id, variation name), ...)) sorted by variation id
GroupKey = Tuple[str, Tuple[Tuple[str, str], ...]]


@dataclass
class PriceRangeSettings:
    """Contractor-level price display configuration."""
    use_price_ranges: bool = False
    price_range_lower_percentage: Decimal = Decimal('10')
    price_range_upper_percentage: Decimal = Decimal('20')
    price_range_display_format: str = 'dollar_amounts'
    currency_symbol: str = '$'
    decimal_precision: int = 2
    global_markup_percentage: Decimal = Decimal('0')
    global_tax_rate: Decimal = Decimal('0')

    def __post_init__(self):
        # settings built in code often pass plain ints or floats
        for name in ('price_range_lower_percentage', 'price_range_upper_percentage',
                     'global_markup_percentage', 'global_tax_rate'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                setattr(self, name, Decimal(str(value)))


@dataclass
class PriceRange:
    """Low/high display band around a point price."""
    lower: Decimal
    upper: Decimal
    original: Decimal


@dataclass
class PricingTier:
    """Quantity break for tiered product pricing."""
    id: str
    tier_name: str
    min_quantity: Decimal
    max_quantity: Optional[Decimal]
    tier_price: Decimal
    is_active: bool = True
    display_order: int = 0
