"""
Quote Consolidator

Groups contractor quote line items into display rows and formats prices and
price ranges for the customer quoting widget.
"""

__version__ = "1.0.0"

from .consolidation import QuoteConsolidator, consolidate_quote_items
from .models import (
    ConsolidatedAddon,
    ConsolidatedMainProduct,
    ConsolidatedMapAddon,
    ConsolidatedQuoteData,
    PriceRangeSettings,
    QuoteItem,
)
from .price_formatting import display_price, format_price
from .summary import build_quote_summary

__all__ = [
    "QuoteConsolidator",
    "consolidate_quote_items",
    "ConsolidatedAddon",
    "ConsolidatedMainProduct",
    "ConsolidatedMapAddon",
    "ConsolidatedQuoteData",
    "PriceRangeSettings",
    "QuoteItem",
    "display_price",
    "format_price",
    "build_quote_summary",
]
