#!/usr/bin/env python3
"""
Ingestion helpers for the Quote Consolidator.
Maps raw quote payloads (widget session state uses camelCase, stored rows use
snake_case) onto the canonical records in models.py.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import List, Any, Optional, Iterable, Mapping

from .models import Addon, Measurement, QuoteItem, Variation

logger = logging.getLogger(__name__)

# canonical field -> accepted raw keys, widget (camelCase) shape first
ADDON_FIELDS = {
    'id': ('id', 'addon_id'),
    'name': ('name', 'addon_name'),
    'price_value': ('priceValue', 'addon_price', 'price_value'),
    'price_type': ('priceType', 'price_type'),
    'calculation_type': ('calculationType', 'calculation_type'),
    'quantity': ('quantity',),
    'selected_option': ('selectedOption', 'selected_option'),
    'selected_option_label': ('selectedOptionName', 'selected_option_name'),
    'selected_option_price_adjustment': (
        'selectedOptionPriceAdjustment', 'selected_option_price_adjustment'
    ),
}

VARIATION_FIELDS = {
    'id': ('id', 'variation_id'),
    'name': ('name', 'variation_name'),
    'price_adjustment': ('priceAdjustment', 'price_adjustment'),
    'adjustment_type': ('adjustmentType', 'adjustment_type'),
    'height_value': ('heightValue', 'height_value'),
    'unit_of_measurement': ('unitOfMeasurement', 'unit_of_measurement'),
    'affects_area_calculation': ('affectsAreaCalculation', 'affects_area_calculation'),
}

ITEM_FIELDS = {
    'id': ('id',),
    'product_id': ('productId', 'product_id'),
    'product_name': ('productName', 'product_name'),
    'unit_type': ('unitType', 'unit_type'),
    'unit_price': ('unitPrice', 'unit_price'),
    'quantity': ('quantity',),
    'line_total': ('lineTotal', 'line_total'),
    'measurement': ('measurement', 'measurement_data'),
    'parent_quote_item_id': ('parentQuoteItemId', 'parent_quote_item_id'),
    'custom_name': ('customName', 'custom_name'),
    'notes': ('notes',),
}

MEASUREMENT_FIELDS = {
    'type': ('type',),
    'value': ('value',),
    'unit': ('unit',),
    'variations': ('variations',),
    'addons': ('addons',),
    'map_color': ('mapColor', 'map_color'),
    'manual_entry': ('manualEntry', 'manual_entry'),
}


def to_decimal(value: Any, default: Decimal = Decimal('0')) -> Decimal:
    """Convert a raw numeric value to a finite Decimal, falling back to ``default``."""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning(f"Invalid numeric value: {value!r}, using {default}")
        return default
    if not result.is_finite():
        logger.warning(f"Non-finite numeric value: {value!r}, using {default}")
        return default
    return result


def read_field(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first truthy value among ``keys``, mirroring upstream ``a || b`` reads."""
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def read_id(raw: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    """Return the first present identifier among ``keys``; ``0`` is a valid id."""
    for key in keys:
        value = raw.get(key)
        if value is not None and value != '':
            return str(value)
    return None


def _option_name(value: Any) -> str:
    # selected option arrives either as {"name": ...} or as the bare name
    if isinstance(value, Mapping):
        return str(value.get('name') or '')
    if value:
        return str(value)
    return ''


def normalize_addon(raw: Mapping[str, Any]) -> Addon:
    """
    Map a raw add-on occurrence onto the canonical Addon record.

    Accepts both the widget shape (``priceValue``, ``selectedOption``) and the
    stored shape (``addon_id``, ``addon_price``, ``selected_option``). Missing
    identity fields become empty strings.
    """
    fields = {name: read_field(raw, keys) for name, keys in ADDON_FIELDS.items()}

    selected_option = _option_name(fields['selected_option'])
    selected_option_adjustment = fields['selected_option_price_adjustment']
    if selected_option_adjustment is None and isinstance(fields['selected_option'], Mapping):
        selected_option_adjustment = read_field(
            fields['selected_option'], ('priceAdjustment', 'price_adjustment')
        )

    return Addon(
        id=read_id(raw, ADDON_FIELDS['id']) or '',
        name=str(fields['name'] or ''),
        price_value=to_decimal(fields['price_value']),
        price_type=fields['price_type'] or 'fixed',
        calculation_type=fields['calculation_type'] or 'total',
        quantity=to_decimal(fields['quantity']),
        selected_option=selected_option,
        selected_option_label=str(fields['selected_option_label'] or selected_option),
        selected_option_price_adjustment=to_decimal(selected_option_adjustment),
        raw=dict(raw),
    )


def normalize_variation(raw: Mapping[str, Any]) -> Variation:
    """Map a raw variation selection onto a Variation record."""
    fields = {name: read_field(raw, keys) for name, keys in VARIATION_FIELDS.items()}
    height = fields['height_value']
    return Variation(
        id=read_id(raw, VARIATION_FIELDS['id']) or '',
        name=str(fields['name'] or ''),
        price_adjustment=to_decimal(fields['price_adjustment']),
        adjustment_type=fields['adjustment_type'] or 'fixed',
        height_value=to_decimal(height) if height else None,
        unit_of_measurement=fields['unit_of_measurement'] or 'ft',
        affects_area_calculation=bool(fields['affects_area_calculation']),
    )


def normalize_measurement(raw: Optional[Mapping[str, Any]]) -> Measurement:
    """Map a raw measurement payload; ``None`` yields an empty measurement."""
    if not raw:
        return Measurement()
    fields = {name: read_field(raw, keys) for name, keys in MEASUREMENT_FIELDS.items()}
    return Measurement(
        type=fields['type'] or 'area',
        value=to_decimal(fields['value']),
        unit=fields['unit'] or '',
        variations=[normalize_variation(v) for v in fields['variations'] or []],
        addons=[normalize_addon(a) for a in fields['addons'] or []],
        map_color=fields['map_color'],
        manual_entry=bool(fields['manual_entry']),
    )


def _nested_product_field(raw: Mapping[str, Any], key: str) -> Any:
    # stored rows join the product as ``products`` or ``product``
    for relation in ('products', 'product'):
        product = raw.get(relation)
        if isinstance(product, Mapping) and product.get(key):
            return product[key]
    return None


def normalize_quote_item(raw: Mapping[str, Any]) -> QuoteItem:
    """Map a raw quote line (widget or stored shape) onto a QuoteItem."""
    fields = {name: read_field(raw, keys) for name, keys in ITEM_FIELDS.items()}

    product_name = fields['product_name'] or _nested_product_field(raw, 'name')
    unit_type = fields['unit_type'] or _nested_product_field(raw, 'unit_type')
    parent_id = read_id(raw, ITEM_FIELDS['parent_quote_item_id'])

    return QuoteItem(
        id=read_id(raw, ITEM_FIELDS['id']) or '',
        product_id=read_id(raw, ITEM_FIELDS['product_id']) or '',
        product_name=str(product_name or ''),
        unit_type=str(unit_type or ''),
        unit_price=to_decimal(fields['unit_price']),
        quantity=to_decimal(fields['quantity']),
        line_total=to_decimal(fields['line_total']),
        measurement=normalize_measurement(fields['measurement']),
        parent_quote_item_id=parent_id,
        custom_name=fields['custom_name'],
        notes=fields['notes'],
    )


def normalize_quote_items(raw_items: Iterable[Mapping[str, Any]]) -> List[QuoteItem]:
    """Normalize a list of raw quote lines, passing QuoteItem instances through."""
    items = []
    for raw in raw_items:
        if isinstance(raw, QuoteItem):
            items.append(raw)
        else:
            items.append(normalize_quote_item(raw))
    logger.debug(f"Normalized {len(items)} quote items")
    return items
