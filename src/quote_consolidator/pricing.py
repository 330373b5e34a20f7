#!/usr/bin/env python3
"""
Pricing helpers: global markup and tax, variation-adjusted product prices,
height-adjusted area, add-on calculation types and quantity-tiered pricing.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Any, Optional

from .models import PriceRangeSettings, PricingTier, Variation
from .normalization import to_decimal
from .price_formatting import display_price, format_exact_price

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')
CENT = Decimal('0.01')

# multipliers to feet
HEIGHT_TO_FEET = {
    'm': Decimal('3.28084'),
    'cm': Decimal('0.0328084'),
}
INCHES_PER_FOOT = Decimal('12')

UNIT_ABBREVIATIONS = {
    'sq_ft': 'SF',
    'linear_ft': 'LF',
    'cubic_yard': 'CY',
    'each': 'ea',
}


@dataclass
class ProductPrice:
    adjusted_unit_price: Decimal
    total_price: Decimal
    display_equation: str


def get_unit_abbreviation(unit_type: str) -> str:
    return UNIT_ABBREVIATIONS.get(unit_type, unit_type)


def apply_global_markup(base_price: Any, markup_percentage: Any) -> Decimal:
    return to_decimal(base_price) * (1 + to_decimal(markup_percentage) / HUNDRED)


def apply_global_tax(price: Any, tax_rate: Any) -> Decimal:
    return to_decimal(price) * (1 + to_decimal(tax_rate) / HUNDRED)


def calculate_final_price(base_price: Any, markup_percentage: Any = 0, tax_rate: Any = 0) -> Decimal:
    """Apply markup first, then tax, and round to cents."""
    final_price = to_decimal(base_price)

    if to_decimal(markup_percentage) > 0:
        final_price = apply_global_markup(final_price, markup_percentage)

    if to_decimal(tax_rate) > 0:
        final_price = apply_global_tax(final_price, tax_rate)

    return final_price.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_adjusted_unit_price(base_unit_price: Any, variations: Optional[List[Variation]] = None) -> Decimal:
    """
    Apply variation price adjustments to a base unit price.

    Percentage adjustments are taken from the base price, not from the running
    total, so the order of variations does not change the result.
    """
    base = to_decimal(base_unit_price)
    adjusted = base
    for variation in variations or []:
        if variation.adjustment_type == 'percentage':
            adjusted += base * variation.price_adjustment / HUNDRED
        else:
            adjusted += variation.price_adjustment
    return adjusted


def calculate_product_price(base_unit_price: Any, quantity: Any, unit_type: str,
                            settings: PriceRangeSettings,
                            variations: Optional[List[Variation]] = None) -> ProductPrice:
    """Price a product line and render it as ``45 LF × $35.00/LF = $1,575.00``."""
    qty = to_decimal(quantity)
    adjusted_unit_price = calculate_adjusted_unit_price(base_unit_price, variations)
    total_price = qty * adjusted_unit_price
    unit_abbr = get_unit_abbreviation(unit_type)

    equation = (f"{qty:,} {unit_abbr} × {format_exact_price(adjusted_unit_price, settings)}/{unit_abbr}"
                f" = {format_exact_price(total_price, settings)}")
    return ProductPrice(adjusted_unit_price, total_price, equation)


def calculate_area_with_height(base_quantity: Any, height_value: Any = None,
                               unit_of_measurement: str = 'ft') -> Decimal:
    """Turn linear footage into square footage using a variation's height."""
    quantity = to_decimal(base_quantity)
    height = to_decimal(height_value)
    if not height:
        return quantity

    if unit_of_measurement == 'inches':
        height_in_feet = height / INCHES_PER_FOOT
    elif unit_of_measurement in HEIGHT_TO_FEET:
        height_in_feet = height * HEIGHT_TO_FEET[unit_of_measurement]
    else:
        if unit_of_measurement != 'ft':
            logger.debug(f"Unknown height unit {unit_of_measurement!r}, assuming feet")
        height_in_feet = height

    return quantity * height_in_feet


def calculate_addon_with_area_data(addon_price: Any, base_quantity: Any, calculation_type: str,
                                   variation: Optional[Variation] = None) -> Decimal:
    """
    Price a single add-on unit against its product.

    ``area_calculation`` multiplies by height-adjusted area when the variation
    affects area, ``per_unit`` by the product quantity, anything else is a
    flat total.
    """
    price = to_decimal(addon_price)

    if (calculation_type == 'area_calculation' and variation is not None
            and variation.affects_area_calculation and variation.height_value):
        area = calculate_area_with_height(base_quantity, variation.height_value,
                                          variation.unit_of_measurement)
        return price * area

    if calculation_type == 'per_unit':
        return price * to_decimal(base_quantity)

    return price


def _active_tiers(tiers: List[PricingTier]) -> List[PricingTier]:
    return sorted((tier for tier in tiers if tier.is_active), key=lambda tier: tier.min_quantity)


def get_tier_for_quantity(quantity: Any, tiers: List[PricingTier]) -> Optional[PricingTier]:
    """First active tier (by minimum quantity) whose bounds contain ``quantity``."""
    qty = to_decimal(quantity)
    for tier in _active_tiers(tiers):
        if qty >= tier.min_quantity and (tier.max_quantity is None or qty <= tier.max_quantity):
            return tier
    return None


def calculate_tiered_price(quantity: Any, tiers: List[PricingTier], fallback_price: Any) -> Decimal:
    tier = get_tier_for_quantity(quantity, tiers)
    if tier is None:
        return to_decimal(fallback_price)
    return tier.tier_price


def format_tier_info(tier: PricingTier, settings: PriceRangeSettings) -> str:
    price = format_exact_price(tier.tier_price, settings)
    if tier.max_quantity is not None:
        quantity_range = f"{tier.min_quantity}-{tier.max_quantity}"
    else:
        quantity_range = f"{tier.min_quantity}+"
    return f"{tier.tier_name}: {quantity_range} @ {price}"


def validate_tiers(tiers: List[PricingTier]) -> List[str]:
    """Report gaps, overlaps and inverted ranges between consecutive tiers."""
    errors = []
    sorted_tiers = sorted(tiers, key=lambda tier: tier.min_quantity)

    for index, tier in enumerate(sorted_tiers):
        if index > 0:
            previous = sorted_tiers[index - 1]
            if previous.max_quantity is not None and previous.max_quantity < tier.min_quantity - 1:
                errors.append(f"Gap between {previous.tier_name} and {tier.tier_name}")
            if previous.max_quantity is not None and previous.max_quantity >= tier.min_quantity:
                errors.append(f"Overlap between {previous.tier_name} and {tier.tier_name}")

        if tier.max_quantity is not None and tier.max_quantity <= tier.min_quantity:
            errors.append(f"{tier.tier_name}: max quantity must be greater than min quantity")

    return errors


def display_tiered_price(quantity: Any, base_price: Any, tiers: List[PricingTier],
                         use_tiered_pricing: bool, settings: PriceRangeSettings) -> str:
    if use_tiered_pricing and tiers:
        return format_exact_price(calculate_tiered_price(quantity, tiers, base_price), settings)
    return display_price(base_price, settings)
