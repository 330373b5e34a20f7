#!/usr/bin/env python3
"""
Price Range Formatter
Renders point totals as exact prices or as low/high ranges according to a
contractor's PriceRangeSettings.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any

from .models import PriceRange, PriceRangeSettings
from .normalization import to_decimal

logger = logging.getLogger(__name__)

DISPLAY_FORMATS = ('percentage', 'dollar_amounts', 'exact')

# Quote statuses that have been sent to the customer
SUBMITTED_STATUSES = ('pending', 'accepted', 'declined', 'expired')

HUNDRED = Decimal('100')


def round_amount(amount: Any, precision: int) -> Decimal:
    """Round half-up to ``precision`` fractional digits."""
    value = to_decimal(amount)
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, value.adjusted() + precision + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def _format_percentage(value: Decimal) -> str:
    # 10.0 -> "10", 12.5 -> "12.5"
    return f"{to_decimal(value).normalize():f}"


def format_exact_price(price: Any, settings: PriceRangeSettings) -> str:
    """Format an amount as ``{symbol}{amount}`` with grouping and fixed precision."""
    precision = settings.decimal_precision
    rounded = round_amount(price, precision)
    return f"{settings.currency_symbol}{rounded:,.{precision}f}"


def calculate_price_range(base_price: Any, lower_percentage: Any, upper_percentage: Any) -> PriceRange:
    """
    Compute the display band around ``base_price``.

    The lower bound is clamped at zero; bounds are left unrounded so the
    caller's precision applies only once, at formatting time.
    """
    base = to_decimal(base_price)
    lower = base * (1 - to_decimal(lower_percentage) / HUNDRED)
    upper = base * (1 + to_decimal(upper_percentage) / HUNDRED)
    return PriceRange(lower=max(lower, Decimal('0')), upper=upper, original=base)


def format_price_range(price_range: PriceRange, settings: PriceRangeSettings) -> str:
    lower = format_exact_price(price_range.lower, settings)
    upper = format_exact_price(price_range.upper, settings)

    if settings.price_range_display_format == 'percentage':
        lower_pct = _format_percentage(settings.price_range_lower_percentage)
        upper_pct = _format_percentage(settings.price_range_upper_percentage)
        return f"{lower} - {upper} (-{lower_pct}% / +{upper_pct}%)"
    return f"{lower} - {upper}"


def _uses_ranges(settings: PriceRangeSettings) -> bool:
    return settings.use_price_ranges and settings.price_range_display_format != 'exact'


def display_price(amount: Any, settings: PriceRangeSettings) -> str:
    """Format ``amount`` as a range when ranges are enabled, otherwise exactly."""
    if _uses_ranges(settings):
        price_range = calculate_price_range(
            amount,
            settings.price_range_lower_percentage,
            settings.price_range_upper_percentage,
        )
        return format_price_range(price_range, settings)
    return format_exact_price(amount, settings)


format_price = display_price


def display_quote_total(amount: Any, settings: PriceRangeSettings, quote_status: str = 'draft') -> str:
    """Quote totals show ranges only once the quote has been submitted."""
    if quote_status in SUBMITTED_STATUSES:
        return display_price(amount, settings)
    logger.debug(f"Quote status {quote_status!r}: showing exact total")
    return format_exact_price(amount, settings)


def display_line_item_price(amount: Any, settings: PriceRangeSettings) -> str:
    # line items are always exact, only totals are banded
    return format_exact_price(amount, settings)
