#!/usr/bin/env python3
"""
Add-on display calculations shared by every quote view.
Resolves consolidated add-ons (including percentage add-ons) to a monetary
total and a human readable equation.
"""

from dataclasses import dataclass
from decimal import Decimal

from .models import ConsolidatedAddon, ConsolidatedMainProduct, PriceRangeSettings
from .price_formatting import format_exact_price
from .pricing import calculate_area_with_height, get_unit_abbreviation

HUNDRED = Decimal('100')


@dataclass
class AddonDisplay:
    display_name: str
    display_equation: str
    total: Decimal


def _quantity_text(value: Decimal) -> str:
    return f"{value:,}"


def calculate_addon_display(addon: ConsolidatedAddon, product: ConsolidatedMainProduct,
                            settings: PriceRangeSettings) -> AddonDisplay:
    """Compute name, equation and total for one consolidated add-on row."""
    display_name = f"{addon.name} ({addon.selected_option})" if addon.selected_option else addon.name

    effective_price = addon.price_value + addon.selected_option_price_adjustment
    unit_abbr = get_unit_abbreviation(product.unit_type)
    base_product_total = product.total_quantity * product.unit_price

    if addon.price_type == 'percentage':
        total = (base_product_total * effective_price / HUNDRED) * addon.quantity
        multiplier = f" × {_quantity_text(addon.quantity)}" if addon.quantity > 1 else ''
        equation = (f"{effective_price.normalize():f}% of "
                    f"{format_exact_price(base_product_total, settings)}{multiplier}")
        return AddonDisplay(display_name, equation, total)

    multiplier = f"{_quantity_text(addon.quantity)} × " if addon.quantity > 1 else ''

    if addon.calculation_type == 'area_calculation':
        variation = product.variations[0] if product.variations else None
        if variation is not None and variation.height_value and variation.affects_area_calculation:
            area = calculate_area_with_height(product.total_quantity, variation.height_value,
                                              variation.unit_of_measurement)
            total = effective_price * area * addon.quantity
            equation = (f"{multiplier}{_quantity_text(area)} SF × "
                        f"{format_exact_price(effective_price, settings)}/SF")
            return AddonDisplay(display_name, equation, total)

    if addon.calculation_type == 'per_unit':
        total = effective_price * product.total_quantity * addon.quantity
        equation = (f"{multiplier}{_quantity_text(product.total_quantity)} {unit_abbr} × "
                    f"{format_exact_price(effective_price, settings)}/{unit_abbr}")
        return AddonDisplay(display_name, equation, total)

    # flat price per add-on quantity
    total = effective_price * addon.quantity
    equation = f"{multiplier}{format_exact_price(effective_price, settings)}"
    return AddonDisplay(display_name, equation, total)
