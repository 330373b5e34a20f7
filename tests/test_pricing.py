#!/usr/bin/env python3
"""
Tests for pricing helpers and add-on display calculations.
"""

import unittest
from decimal import Decimal

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quote_consolidator.addon_display import calculate_addon_display
from quote_consolidator.models import (
    ConsolidatedAddon,
    ConsolidatedMainProduct,
    PriceRangeSettings,
    PricingTier,
    Variation,
)
from quote_consolidator.pricing import (
    apply_global_markup,
    apply_global_tax,
    calculate_addon_with_area_data,
    calculate_adjusted_unit_price,
    calculate_area_with_height,
    calculate_final_price,
    calculate_product_price,
    calculate_tiered_price,
    display_tiered_price,
    format_tier_info,
    get_tier_for_quantity,
    get_unit_abbreviation,
    validate_tiers,
)


def tier(name, min_quantity, max_quantity, price, active=True):
    return PricingTier(
        id=name.lower(),
        tier_name=name,
        min_quantity=Decimal(min_quantity),
        max_quantity=Decimal(max_quantity) if max_quantity is not None else None,
        tier_price=Decimal(price),
        is_active=active,
    )


class TestMarkupAndTax(unittest.TestCase):

    def test_markup_and_tax(self):
        self.assertEqual(apply_global_markup(100, 10), Decimal('110'))
        self.assertEqual(apply_global_tax(200, '8.25'), Decimal('216.5'))

    def test_final_price_applies_markup_then_tax(self):
        self.assertEqual(calculate_final_price(100, 10, 5), Decimal('115.50'))
        self.assertEqual(calculate_final_price('19.999'), Decimal('20.00'))
        self.assertEqual(calculate_final_price(100, 0, 0), Decimal('100.00'))


class TestProductPrice(unittest.TestCase):

    def setUp(self):
        self.settings = PriceRangeSettings()
        self.stained = Variation(id='s', name='Stained', price_adjustment=Decimal('5'))
        self.premium = Variation(id='p', name='Premium', price_adjustment=Decimal('10'),
                                 adjustment_type='percentage')

    def test_adjusted_unit_price(self):
        test_cases = [
            ([], Decimal('30')),
            ([self.stained], Decimal('35')),
            ([self.premium], Decimal('33')),
            ([self.premium, self.stained], Decimal('38')),
            ([self.stained, self.premium], Decimal('38')),
        ]

        for variations, expected in test_cases:
            with self.subTest(variations=[v.name for v in variations]):
                self.assertEqual(calculate_adjusted_unit_price(30, variations), expected)

    def test_product_price_equation(self):
        result = calculate_product_price(30, 45, 'linear_ft', self.settings, [self.stained])
        self.assertEqual(result.adjusted_unit_price, Decimal('35'))
        self.assertEqual(result.total_price, Decimal('1575'))
        self.assertEqual(result.display_equation, '45 LF × $35.00/LF = $1,575.00')

    def test_percentage_adjustment_equation(self):
        result = calculate_product_price('12.50', 1200, 'sq_ft', self.settings, [self.premium])
        self.assertEqual(result.display_equation, '1,200 SF × $13.75/SF = $16,500.00')


class TestAreaCalculations(unittest.TestCase):

    def test_height_units(self):
        test_cases = [
            (None, 'ft', Decimal('100')),
            (6, 'ft', Decimal('600')),
            (72, 'inches', Decimal('600')),
            (2, 'm', Decimal('656.168')),
            (100, 'cm', Decimal('328.084')),
        ]

        for height, unit, expected in test_cases:
            with self.subTest(height=height, unit=unit):
                self.assertEqual(calculate_area_with_height(100, height, unit), expected)

    def test_addon_calculation_types(self):
        tall = Variation(id='v1', name='6ft', height_value=Decimal('6'), affects_area_calculation=True)
        flat = Variation(id='v2', name='Plain')

        self.assertEqual(calculate_addon_with_area_data(2, 100, 'area_calculation', tall), Decimal('1200'))
        self.assertEqual(calculate_addon_with_area_data(2, 100, 'area_calculation', flat), Decimal('2'))
        self.assertEqual(calculate_addon_with_area_data(2, 100, 'per_unit'), Decimal('200'))
        self.assertEqual(calculate_addon_with_area_data(2, 100, 'total'), Decimal('2'))


class TestTieredPricing(unittest.TestCase):

    def setUp(self):
        self.tiers = [
            tier('Bulk', 100, None, 8),
            tier('Standard', 0, 99, 10),
            tier('Promo', 50, 200, 1, active=False),
        ]
        self.settings = PriceRangeSettings()

    def test_tier_lookup(self):
        self.assertEqual(get_tier_for_quantity(50, self.tiers).tier_name, 'Standard')
        self.assertEqual(get_tier_for_quantity(150, self.tiers).tier_name, 'Bulk')
        self.assertIsNone(get_tier_for_quantity(5, []))

    def test_tiered_price_and_fallback(self):
        self.assertEqual(calculate_tiered_price(150, self.tiers, 12), Decimal('8'))
        self.assertEqual(calculate_tiered_price(150, [], 12), Decimal('12'))

    def test_validate_tiers(self):
        self.assertEqual(validate_tiers([tier('A', 0, 49, 10), tier('B', 50, None, 8)]), [])
        self.assertEqual(validate_tiers([tier('A', 0, 40, 10), tier('B', 50, None, 8)]),
                         ['Gap between A and B'])
        self.assertEqual(validate_tiers([tier('A', 0, 60, 10), tier('B', 50, None, 8)]),
                         ['Overlap between A and B'])
        self.assertEqual(validate_tiers([tier('A', 10, 10, 10)]),
                         ['A: max quantity must be greater than min quantity'])

    def test_format_and_display(self):
        self.assertEqual(format_tier_info(self.tiers[0], self.settings), 'Bulk: 100+ @ $8.00')
        self.assertEqual(format_tier_info(self.tiers[1], self.settings), 'Standard: 0-99 @ $10.00')
        self.assertEqual(display_tiered_price(150, 12, self.tiers, True, self.settings), '$8.00')
        self.assertEqual(display_tiered_price(150, 12, self.tiers, False, self.settings), '$12.00')


class TestAddonDisplay(unittest.TestCase):

    def setUp(self):
        self.settings = PriceRangeSettings()
        self.product = ConsolidatedMainProduct(
            product_id='fence',
            product_name='Fence',
            unit_type='linear_ft',
            unit_price=Decimal('10'),
            total_quantity=Decimal('100'),
            total_line_total=Decimal('1000'),
            color='#3B82F6',
        )

    def addon(self, **overrides):
        values = dict(id='a1', name='Gate', price_value=Decimal('50'), price_type='fixed',
                      calculation_type='total', quantity=Decimal('1'))
        values.update(overrides)
        return ConsolidatedAddon(**values)

    def test_flat_total(self):
        display = calculate_addon_display(self.addon(quantity=Decimal('2')), self.product, self.settings)
        self.assertEqual(display.display_name, 'Gate')
        self.assertEqual(display.display_equation, '2 × $50.00')
        self.assertEqual(display.total, Decimal('100'))

    def test_option_name_and_adjustment(self):
        addon = self.addon(selected_option='Black', selected_option_price_adjustment=Decimal('25'))
        display = calculate_addon_display(addon, self.product, self.settings)
        self.assertEqual(display.display_name, 'Gate (Black)')
        self.assertEqual(display.display_equation, '$75.00')
        self.assertEqual(display.total, Decimal('75'))

    def test_per_unit(self):
        addon = self.addon(name='Stain', price_value=Decimal('2'), calculation_type='per_unit')
        display = calculate_addon_display(addon, self.product, self.settings)
        self.assertEqual(display.display_equation, '100 LF × $2.00/LF')
        self.assertEqual(display.total, Decimal('200'))

    def test_percentage_of_product_total(self):
        addon = self.addon(name='Rush', price_value=Decimal('10'), price_type='percentage')
        display = calculate_addon_display(addon, self.product, self.settings)
        self.assertEqual(display.display_equation, '10% of $1,000.00')
        self.assertEqual(display.total, Decimal('100'))

    def test_area_calculation_uses_first_variation_height(self):
        self.product.variations = [Variation(id='v1', name='6ft', height_value=Decimal('6'),
                                             affects_area_calculation=True)]
        addon = self.addon(name='Sealant', price_value=Decimal('1.5'), calculation_type='area_calculation')
        display = calculate_addon_display(addon, self.product, self.settings)
        self.assertEqual(display.display_equation, '600 SF × $1.50/SF')
        self.assertEqual(display.total, Decimal('900'))

    def test_unit_abbreviations(self):
        self.assertEqual(get_unit_abbreviation('sq_ft'), 'SF')
        self.assertEqual(get_unit_abbreviation('each'), 'ea')
        self.assertEqual(get_unit_abbreviation('pallet'), 'pallet')


if __name__ == '__main__':
    unittest.main()
