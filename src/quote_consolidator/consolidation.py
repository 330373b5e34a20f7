#!/usr/bin/env python3
"""
Quote Consolidator
Groups a flat list of quote line items into display rows:
- Main products by product id + variation signature
- Traditional add-ons by addon id + selected option
- Map-placed add-ons (child items) by product id under their parent's group
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import List, Dict, Any, Iterable, Tuple, Union, Mapping

from .models import (
    AddonInstance,
    ConsolidatedAddon,
    ConsolidatedMainProduct,
    ConsolidatedMapAddon,
    ConsolidatedQuoteData,
    DEFAULT_MAP_ADDON_COLOR,
    DEFAULT_PRODUCT_COLOR,
    GroupKey,
    QuoteItem,
)
from .normalization import normalize_quote_items

logger = logging.getLogger(__name__)

RawOrItem = Union[QuoteItem, Mapping[str, Any]]


def variation_signature(item: QuoteItem) -> Tuple[Tuple[str, str], ...]:
    """Order-independent signature of an item's selected variations."""
    pairs = [(v.id, v.name) for v in item.measurement.variations]
    return tuple(sorted(pairs, key=lambda pair: pair[0]))


def group_key(item: QuoteItem) -> GroupKey:
    return (item.product_id, variation_signature(item))


class QuoteConsolidator:
    """
    Builds the consolidated view of a quote.

    With ``strict=True`` child items whose parent is missing are reported in
    ``ConsolidatedQuoteData.dropped_orphans``; the groups themselves are the
    same in both modes.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def consolidate(self, items: Iterable[RawOrItem]) -> ConsolidatedQuoteData:
        quote_items = normalize_quote_items(items)

        parent_items = [item for item in quote_items if not item.is_child]
        child_items = [item for item in quote_items if item.is_child]

        groups = self._group_main_products(parent_items)

        children_by_parent: Dict[str, List[QuoteItem]] = defaultdict(list)
        for child in child_items:
            children_by_parent[child.parent_quote_item_id].append(child)

        result = ConsolidatedQuoteData()
        for product in groups:
            product.traditional_addons, malformed = self._consolidate_traditional_addons(product)
            result.malformed_addons += malformed
            product.map_placed_addons = self._consolidate_map_addons(product, children_by_parent)
        result.consolidated_main_products = groups

        parent_ids = {item.id for item in parent_items}
        orphans = [child for child in child_items if child.parent_quote_item_id not in parent_ids]
        if orphans:
            if self.strict:
                for orphan in orphans:
                    logger.warning(
                        f"Dropping child item {orphan.id!r} ({orphan.product_id}): "
                        f"parent {orphan.parent_quote_item_id!r} not in quote"
                    )
                result.dropped_orphans = orphans
            else:
                logger.debug(f"Dropped {len(orphans)} child items without a parent")

        logger.info(
            f"Consolidated {len(quote_items)} items into {len(groups)} product groups "
            f"({len(child_items)} map-placed children)"
        )
        return result

    def _group_main_products(self, parent_items: List[QuoteItem]) -> List[ConsolidatedMainProduct]:
        """Merge parent instances sharing product id and variation signature."""
        groups: Dict[GroupKey, ConsolidatedMainProduct] = {}

        for item in parent_items:
            key = group_key(item)
            group = groups.get(key)

            if group is None:
                groups[key] = ConsolidatedMainProduct(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    unit_type=item.unit_type,
                    unit_price=item.unit_price,
                    total_quantity=item.quantity,
                    total_line_total=item.line_total,
                    color=item.measurement.map_color or DEFAULT_PRODUCT_COLOR,
                    instances=[item],
                    variations=list(item.measurement.variations),
                )
                logger.debug(f"New product group {key!r}")
            else:
                group.instances.append(item)
                group.total_quantity += item.quantity
                group.total_line_total += item.line_total

        return list(groups.values())

    def _consolidate_traditional_addons(
        self, product: ConsolidatedMainProduct
    ) -> Tuple[List[ConsolidatedAddon], int]:
        """Fold inline add-ons of every instance; zero-quantity rows are dropped."""
        addon_rows: Dict[Tuple[str, str], ConsolidatedAddon] = {}
        malformed = 0

        for instance in product.instances:
            for addon in instance.measurement.addons:
                if not addon.has_identity:
                    # lenient: anonymous add-ons share the ('', '') row
                    malformed += 1
                    logger.debug(f"Add-on without id or option on item {instance.id!r}")

                key = (addon.id, addon.selected_option)
                row = addon_rows.get(key)
                if row is None:
                    row = ConsolidatedAddon(
                        id=addon.id,
                        name=addon.name,
                        price_value=addon.price_value,
                        price_type=addon.price_type,
                        calculation_type=addon.calculation_type,
                        quantity=Decimal('0'),
                        selected_option=addon.selected_option_label,
                        selected_option_price_adjustment=addon.selected_option_price_adjustment,
                    )
                    addon_rows[key] = row

                row.quantity += addon.quantity
                row.instances.append(AddonInstance(parent_item_id=instance.id, addon_data=addon.raw))

        return [row for row in addon_rows.values() if row.quantity > 0], malformed

    def _consolidate_map_addons(
        self,
        product: ConsolidatedMainProduct,
        children_by_parent: Dict[str, List[QuoteItem]],
    ) -> List[ConsolidatedMapAddon]:
        """Group the children of every instance by child product id."""
        map_rows: Dict[str, ConsolidatedMapAddon] = {}

        for instance in product.instances:
            for child in children_by_parent.get(instance.id, []):
                row = map_rows.get(child.product_id)
                if row is None:
                    map_rows[child.product_id] = ConsolidatedMapAddon(
                        product_id=child.product_id,
                        product_name=child.product_name,
                        unit_price=child.unit_price,
                        unit_type=child.unit_type,
                        total_quantity=child.quantity,
                        total_line_total=child.line_total,
                        map_color=child.measurement.map_color or DEFAULT_MAP_ADDON_COLOR,
                        items=[child],
                    )
                else:
                    row.total_quantity += child.quantity
                    row.total_line_total += child.line_total
                    row.items.append(child)

        return list(map_rows.values())


def consolidate_quote_items(items: Iterable[RawOrItem], strict: bool = False) -> ConsolidatedQuoteData:
    """
    Convenience function to consolidate quote items.
    """
    consolidator = QuoteConsolidator(strict=strict)
    return consolidator.consolidate(items)


def consolidated_to_dict(data: ConsolidatedQuoteData) -> Dict[str, Any]:
    """JSON-safe camelCase view of a consolidation result (Decimals as strings)."""

    def item_ref(item: QuoteItem) -> Dict[str, Any]:
        return {
            'id': item.id,
            'productId': item.product_id,
            'quantity': str(item.quantity),
            'lineTotal': str(item.line_total),
            'parentQuoteItemId': item.parent_quote_item_id,
        }

    products = []
    for product in data.consolidated_main_products:
        products.append({
            'productId': product.product_id,
            'productName': product.product_name,
            'unitType': product.unit_type,
            'unitPrice': str(product.unit_price),
            'totalQuantity': str(product.total_quantity),
            'totalLineTotal': str(product.total_line_total),
            'color': product.color,
            'variations': [{'id': v.id, 'name': v.name} for v in product.variations],
            'instances': [item_ref(item) for item in product.instances],
            'traditionalAddons': [
                {
                    'id': addon.id,
                    'name': addon.name,
                    'priceValue': str(addon.price_value),
                    'priceType': addon.price_type,
                    'calculationType': addon.calculation_type,
                    'quantity': str(addon.quantity),
                    'selectedOption': addon.selected_option,
                    'selectedOptionPriceAdjustment': str(addon.selected_option_price_adjustment),
                    'instances': [
                        {'parentItemId': ref.parent_item_id, 'addonData': ref.addon_data}
                        for ref in addon.instances
                    ],
                }
                for addon in product.traditional_addons
            ],
            'mapPlacedAddons': [
                {
                    'productId': addon.product_id,
                    'productName': addon.product_name,
                    'unitPrice': str(addon.unit_price),
                    'unitType': addon.unit_type,
                    'totalQuantity': str(addon.total_quantity),
                    'totalLineTotal': str(addon.total_line_total),
                    'mapColor': addon.map_color,
                    'items': [item_ref(item) for item in addon.items],
                }
                for addon in product.map_placed_addons
            ],
        })

    return {
        'consolidatedMainProducts': products,
        'droppedOrphans': [item_ref(item) for item in data.dropped_orphans],
        'malformedAddons': data.malformed_addons,
    }
