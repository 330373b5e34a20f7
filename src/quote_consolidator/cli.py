#!/usr/bin/env python3
"""
Quote Consolidator CLI
Consolidates exported quote items and renders price summaries.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

import click
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .consolidation import consolidate_quote_items, consolidated_to_dict
from .price_formatting import display_price
from .summary import build_quote_summary, summary_rows

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()


def _read_items(items_path: str) -> List[Any]:
    """Read quote items from a JSON file holding a list or an ``items`` object."""
    with open(items_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('items', [])
    if not isinstance(data, list):
        raise ValueError(f"{items_path} must contain a list of quote items")
    return data


def _write_output(result: Any, output: Optional[str]):
    text = json.dumps(result, indent=2, ensure_ascii=False, default=str)
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info(f"Results saved to: {output}")
    else:
        click.echo(text)


def _parse_amount(ctx, param, value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"{value!r} is not a number")
    if not amount.is_finite() or amount < 0:
        raise click.BadParameter(f"{value!r} must be a finite, non-negative amount")
    return amount


def _load_settings_or_abort(settings_path: Optional[str]):
    try:
        return load_settings(settings_path)
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        raise click.Abort()


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """Quote Consolidator - group quote items and format prices."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument('items_path', type=click.Path(exists=True))
@click.option('--strict', is_flag=True, help='Report child items whose parent is missing')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file path')
def consolidate(items_path: str, strict: bool, output: Optional[str]):
    """Consolidate the quote items in ITEMS_PATH."""
    try:
        items = _read_items(items_path)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read quote items: {e}")
        raise click.Abort()

    result = consolidate_quote_items(items, strict=strict)
    _write_output(consolidated_to_dict(result), output)


@cli.command()
@click.argument('items_path', type=click.Path(exists=True))
@click.option('--settings', 'settings_path', type=click.Path(exists=True), help='Price settings JSON file')
@click.option('--status', 'quote_status', default='draft', show_default=True, help='Quote status')
@click.option('--strict', is_flag=True, help='Report child items whose parent is missing')
@click.option('--table', 'as_table', is_flag=True, help='Render a table instead of JSON')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file path')
def summary(items_path: str, settings_path: Optional[str], quote_status: str,
            strict: bool, as_table: bool, output: Optional[str]):
    """Build the priced summary of the quote items in ITEMS_PATH."""
    settings = _load_settings_or_abort(settings_path)
    try:
        items = _read_items(items_path)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read quote items: {e}")
        raise click.Abort()

    result = build_quote_summary(items, settings, quote_status=quote_status, strict=strict)

    if as_table:
        table = Table(title=f"Quote ({quote_status})")
        table.add_column("Item")
        table.add_column("Quantity")
        table.add_column("Price", justify="right")
        for row in summary_rows(result):
            table.add_row(*row)
        table.add_section()
        table.add_row("Subtotal", "", result['subtotalDisplay'])
        if Decimal(result['taxAmount']) > 0:
            table.add_row(f"Tax ({result['taxRate']})", "", result['taxAmountDisplay'])
        table.add_row("[bold]Total[/bold]", "", f"[bold]{result['totalDisplay']}[/bold]")
        console.print(table)
    else:
        _write_output(result, output)


@cli.command()
@click.argument('amount', callback=_parse_amount)
@click.option('--settings', 'settings_path', type=click.Path(exists=True), help='Price settings JSON file')
def price(amount: Decimal, settings_path: Optional[str]):
    """Format AMOUNT using the configured price display settings."""
    settings = _load_settings_or_abort(settings_path)
    click.echo(display_price(amount, settings))


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
