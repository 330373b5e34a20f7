#!/usr/bin/env python3
"""
Example usage of the Quote Consolidator
Consolidates a small fence quote and prints exact and ranged prices.
"""

import json
import sys
from decimal import Decimal
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quote_consolidator import PriceRangeSettings, build_quote_summary, consolidate_quote_items


def create_sample_items():
    """Two fence runs drawn on the map, one gate add-on and two placed post caps."""
    return [
        {
            'id': 'run-1', 'productId': 'cedar-fence', 'productName': 'Cedar Fence',
            'unitType': 'linear_ft', 'unitPrice': 32, 'quantity': 120, 'lineTotal': 4190,
            'measurement': {
                'type': 'linear', 'value': 120, 'mapColor': '#16A34A',
                'variations': [{'id': 'h6', 'name': '6ft'}, {'id': 'stain', 'name': 'Stained'}],
                'addons': [{'id': 'gate', 'name': 'Walk Gate', 'priceValue': 350, 'quantity': 1,
                            'selectedOption': {'name': 'Single'}}],
            },
        },
        {
            'id': 'run-2', 'productId': 'cedar-fence', 'productName': 'Cedar Fence',
            'unitType': 'linear_ft', 'unitPrice': 32, 'quantity': 45, 'lineTotal': 1440,
            'measurement': {
                'type': 'linear', 'value': 45,
                'variations': [{'id': 'stain', 'name': 'Stained'}, {'id': 'h6', 'name': '6ft'}],
            },
        },
        {
            'id': 'cap-1', 'productId': 'post-cap', 'productName': 'Solar Post Cap',
            'unitType': 'each', 'unitPrice': 45, 'quantity': 2, 'lineTotal': 90,
            'parentQuoteItemId': 'run-1', 'measurement': {'type': 'point', 'value': 2},
        },
    ]


def demonstrate_consolidation():
    print("=" * 60)
    print("DEMONSTRATION: Consolidation")
    print("=" * 60)

    result = consolidate_quote_items(create_sample_items())
    for product in result.consolidated_main_products:
        print(f"{product.product_name}: {product.total_quantity} {product.unit_type} "
              f"= {product.total_line_total} ({len(product.instances)} runs)")
        for addon in product.traditional_addons:
            print(f"  + {addon.name} ({addon.selected_option}) x {addon.quantity}")
        for map_addon in product.map_placed_addons:
            print(f"  @ {map_addon.product_name} x {map_addon.total_quantity}")


def demonstrate_summary():
    print("\n" + "=" * 60)
    print("DEMONSTRATION: Submitted quote with price ranges")
    print("=" * 60)

    settings = PriceRangeSettings(
        use_price_ranges=True,
        price_range_lower_percentage=Decimal('10'),
        price_range_upper_percentage=Decimal('15'),
        global_tax_rate=Decimal('8.25'),
    )
    summary = build_quote_summary(create_sample_items(), settings, quote_status='pending')
    print(json.dumps(summary, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    demonstrate_consolidation()
    demonstrate_summary()
