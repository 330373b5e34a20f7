#!/usr/bin/env python3
"""
Configuration for price display.
Builds PriceRangeSettings from contractor settings rows (JSON), with
environment overrides for the currency and precision.
"""

import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Dict, Any, Optional, Mapping

from .models import PriceRangeSettings
from .normalization import to_decimal
from .price_formatting import DISPLAY_FORMATS

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'CAD': 'C$',
    'AUD': 'A$',
    'CHF': 'CHF',
    'SEK': 'kr',
    'NOK': 'kr',
    'DKK': 'kr',
}

ENV_CURRENCY_SYMBOL = 'QUOTE_CURRENCY_SYMBOL'
ENV_DECIMAL_PRECISION = 'QUOTE_DECIMAL_PRECISION'
ENV_USE_PRICE_RANGES = 'QUOTE_USE_PRICE_RANGES'

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def get_currency_symbol(currency_code: str) -> str:
    """Get currency symbol from currency code."""
    return CURRENCY_SYMBOLS.get(currency_code.upper(), currency_code)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


def settings_from_dict(raw: Mapping[str, Any]) -> PriceRangeSettings:
    """
    Build settings from a contractor settings mapping.

    Unknown keys are ignored. ``currency_code`` is accepted in place of
    ``currency_symbol``. Raises ValueError for an unknown display format or
    an invalid precision.
    """
    defaults = PriceRangeSettings()

    symbol = raw.get('currency_symbol')
    if not symbol and raw.get('currency_code'):
        symbol = get_currency_symbol(str(raw['currency_code']))

    display_format = raw.get('price_range_display_format') or defaults.price_range_display_format
    if display_format not in DISPLAY_FORMATS:
        raise ValueError(
            f"Unknown price_range_display_format {display_format!r}, "
            f"expected one of {', '.join(DISPLAY_FORMATS)}"
        )

    try:
        precision = int(raw.get('decimal_precision', defaults.decimal_precision))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid decimal_precision: {raw.get('decimal_precision')!r}")
    if precision < 0:
        raise ValueError(f"decimal_precision must be >= 0, got {precision}")

    return PriceRangeSettings(
        use_price_ranges=_as_bool(raw.get('use_price_ranges', defaults.use_price_ranges)),
        price_range_lower_percentage=to_decimal(
            raw.get('price_range_lower_percentage'), defaults.price_range_lower_percentage),
        price_range_upper_percentage=to_decimal(
            raw.get('price_range_upper_percentage'), defaults.price_range_upper_percentage),
        price_range_display_format=display_format,
        currency_symbol=symbol or defaults.currency_symbol,
        decimal_precision=precision,
        global_markup_percentage=to_decimal(raw.get('global_markup_percentage'), Decimal('0')),
        global_tax_rate=to_decimal(raw.get('global_tax_rate'), Decimal('0')),
    )


def apply_env_overrides(raw: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Overlay QUOTE_* environment variables onto a raw settings mapping."""
    environ = os.environ if environ is None else environ
    merged = dict(raw)

    if environ.get(ENV_CURRENCY_SYMBOL):
        merged['currency_symbol'] = environ[ENV_CURRENCY_SYMBOL]
    if environ.get(ENV_DECIMAL_PRECISION):
        merged['decimal_precision'] = environ[ENV_DECIMAL_PRECISION]
    if environ.get(ENV_USE_PRICE_RANGES):
        merged['use_price_ranges'] = environ[ENV_USE_PRICE_RANGES]

    return merged


def load_settings(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> PriceRangeSettings:
    """Load settings from an optional JSON file, then apply environment overrides."""
    raw: Dict[str, Any] = {}

    if path:
        settings_path = Path(path)
        try:
            with open(settings_path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Could not read settings from {settings_path}: {e}")
        if not isinstance(raw, dict):
            raise ValueError(f"Settings file {settings_path} must contain a JSON object")
        logger.debug(f"Loaded settings from {settings_path}")

    settings = settings_from_dict(apply_env_overrides(raw, environ))
    logger.debug(f"Price settings: {settings}")
    return settings
