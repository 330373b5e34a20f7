#!/usr/bin/env python3
"""
Quote summary builder.
Consolidates quote items and applies price formatting to produce the
display-ready structure consumed by quote review and CRM views.
"""

import logging
from decimal import Decimal
from typing import List, Dict, Any, Iterable

from .addon_display import calculate_addon_display
from .consolidation import RawOrItem, consolidate_quote_items
from .models import ConsolidatedMainProduct, PriceRangeSettings
from .normalization import normalize_quote_items, to_decimal
from .price_formatting import display_line_item_price, display_quote_total, round_amount
from .pricing import calculate_product_price, get_unit_abbreviation

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')


def _product_row(product: ConsolidatedMainProduct, settings: PriceRangeSettings) -> Dict[str, Any]:
    unit_abbr = get_unit_abbreviation(product.unit_type)

    addons = []
    for addon in product.traditional_addons:
        display = calculate_addon_display(addon, product, settings)
        addons.append({
            'name': display.display_name,
            'equation': display.display_equation,
            'quantity': str(addon.quantity),
            'total': str(round_amount(display.total, settings.decimal_precision)),
            'totalDisplay': display_line_item_price(display.total, settings),
        })

    map_addons = []
    for map_addon in product.map_placed_addons:
        map_addons.append({
            'productName': map_addon.product_name,
            'quantity': str(map_addon.total_quantity),
            'unit': get_unit_abbreviation(map_addon.unit_type),
            'mapColor': map_addon.map_color,
            'lineTotal': str(map_addon.total_line_total),
            'lineTotalDisplay': display_line_item_price(map_addon.total_line_total, settings),
        })

    product_price = calculate_product_price(product.unit_price, product.total_quantity,
                                            product.unit_type, settings, product.variations)

    name = product.product_name
    if product.variations:
        name = f"{name} ({', '.join(v.name for v in product.variations)})"

    return {
        'productId': product.product_id,
        'name': name,
        'color': product.color,
        'quantity': str(product.total_quantity),
        'unit': unit_abbr,
        'instanceCount': len(product.instances),
        'unitPriceDisplay': display_line_item_price(product_price.adjusted_unit_price, settings),
        'equation': product_price.display_equation,
        'lineTotal': str(product.total_line_total),
        'lineTotalDisplay': display_line_item_price(product.total_line_total, settings),
        'traditionalAddons': addons,
        'mapPlacedAddons': map_addons,
    }


def build_quote_summary(items: Iterable[RawOrItem], settings: PriceRangeSettings,
                        quote_status: str = 'draft', strict: bool = False) -> Dict[str, Any]:
    """
    Build the display-ready summary of a quote.

    The subtotal is the sum of every item's line total, children whose parent
    is missing included; item line totals already carry their add-on charges,
    so add-on totals are a breakdown only. Markup then tax are applied from
    ``settings``. Totals are banded according to ``quote_status``.
    """
    quote_items = normalize_quote_items(items)
    consolidated = consolidate_quote_items(quote_items, strict=strict)
    products = consolidated.consolidated_main_products

    subtotal = sum((item.line_total for item in quote_items), Decimal('0'))

    markup_percentage = to_decimal(settings.global_markup_percentage)
    tax_rate = to_decimal(settings.global_tax_rate)
    markup_amount = subtotal * markup_percentage / HUNDRED
    taxable_amount = subtotal + markup_amount
    tax_amount = taxable_amount * tax_rate / HUNDRED
    total = taxable_amount + tax_amount

    precision = settings.decimal_precision
    summary: Dict[str, Any] = {
        'status': quote_status,
        'products': [_product_row(product, settings) for product in products],
        'subtotal': str(round_amount(subtotal, precision)),
        'markupAmount': str(round_amount(markup_amount, precision)),
        'taxRate': f"{tax_rate.normalize():f}%",
        'taxAmount': str(round_amount(tax_amount, precision)),
        'total': str(round_amount(total, precision)),
        'subtotalDisplay': display_quote_total(subtotal, settings, quote_status),
        'taxAmountDisplay': display_quote_total(tax_amount, settings, quote_status),
        'totalDisplay': display_quote_total(total, settings, quote_status),
    }

    if consolidated.dropped_orphans:
        summary['droppedOrphans'] = [item.id for item in consolidated.dropped_orphans]

    logger.info(f"Quote summary built: {len(products)} products, total={summary['total']}")
    return summary


def summary_rows(summary: Dict[str, Any]) -> List[List[str]]:
    """Flatten a summary into (description, quantity, price) rows for tabular output."""
    rows = []
    for product in summary['products']:
        rows.append([product['name'], f"{product['quantity']} {product['unit']}", product['lineTotalDisplay']])
        for addon in product['traditionalAddons']:
            rows.append([f"  + {addon['name']}", addon['equation'], addon['totalDisplay']])
        for map_addon in product['mapPlacedAddons']:
            rows.append([
                f"  @ {map_addon['productName']}",
                f"{map_addon['quantity']} {map_addon['unit']}",
                map_addon['lineTotalDisplay'],
            ])
    return rows
