"""Komenda: bpt convert — przeliczenia BTC dla podanych fragmentów tekstu."""

from __future__ import annotations

import argparse

from rich import box
from rich.console import Console
from rich.table import Table

from bpt.commands.annotate import _settings_and_rate
from bpt._config import add_rate_argument
from price_tag.text import substitute_prices

console = Console()


def run(args: argparse.Namespace) -> None:
    _, rate = _settings_and_rate(args)

    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        expand=False,
    )
    table.add_column("WEJŚCIE", no_wrap=False, max_width=50)
    table.add_column("WYNIK",   no_wrap=False, max_width=80, style="bold cyan")
    table.add_column("CENY",    justify="right", no_wrap=True)

    total = 0
    for text in args.texts:
        result, count = substitute_prices(text, rate)
        total += count
        table.add_row(text, result.rstrip(), str(count) if count else "[dim]0[/dim]")

    console.print(table)
    console.print(f"  [dim]{total} cen, 1 BTC = {rate.usd_per_unit:,.2f} USD[/dim]")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "convert",
        help="Przelicza ceny USD w podanych fragmentach tekstu.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Dla każdego fragmentu tekstu wypisuje wersję z dopisanym przeliczeniem.

Przykłady:
  bpt convert '$100' '10k USD' 'Only $1.5m today' --usd-rate 30000
        """,
    )
    p.add_argument(
        "texts",
        nargs="+",
        metavar="TEKST",
        help="Fragmenty tekstu do przeliczenia.",
    )
    add_rate_argument(p)
    p.set_defaults(func=run)
