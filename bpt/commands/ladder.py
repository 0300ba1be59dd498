"""Komenda: bpt ladder — drabina jednostek sats / BTC dla bieżącego kursu."""

from __future__ import annotations

import argparse

from rich import box
from rich.console import Console
from rich.table import Table

from bpt.commands.annotate import _settings_and_rate
from bpt._config import add_rate_argument
from price_model.constants import UNIT_SUFFIX_LADDER
from price_tag.units import format_bitcoin_amount


def ladder_rows(usd_per_satoshi: float) -> list[tuple[str, int, str, float]]:
    """
    Wiersze (zakres cyfr, wykładnik dzielnika, jednostka, przykładowa kwota USD).

    Szczebel i obejmuje liczby satoshi o cyfrach (min_i, min_{i+1}], pierwszy
    od 1 cyfry, ostatni bez górnej granicy. Przykład to 1.5 × 10^(dolna-1)
    satoshi, z dala od granic szczebla.
    """
    rows: list[tuple[str, int, str, float]] = []
    for i, (min_digits, divisor_exp, suffix) in enumerate(UNIT_SUFFIX_LADDER):
        low = min_digits + 1 if i else 1
        high = UNIT_SUFFIX_LADDER[i + 1][0] if i + 1 < len(UNIT_SUFFIX_LADDER) else None
        span = f"{low}–{high}" if high is not None else f"{low}+"
        example_usd = 1.5 * 10 ** (low - 1) * usd_per_satoshi
        rows.append((span, divisor_exp, suffix.strip(), example_usd))
    return rows


def run(args: argparse.Namespace) -> None:
    _, rate = _settings_and_rate(args)
    console = Console()

    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
        expand=False,
    )
    table.add_column("CYFRY SAT",  justify="center", no_wrap=True)
    table.add_column("DZIELNIK",   justify="right", no_wrap=True)
    table.add_column("JEDNOSTKA",  no_wrap=True, style="bold cyan")
    table.add_column("PRZYKŁAD",   justify="right", no_wrap=True)
    table.add_column("WYNIK",      no_wrap=True)

    for span, divisor_exp, unit, example_usd in ladder_rows(rate.usd_per_satoshi):
        table.add_row(
            span,
            f"10^{divisor_exp}",
            unit,
            f"${example_usd:,.2f}",
            format_bitcoin_amount(example_usd, rate),
        )

    console.print(table)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "ladder",
        help="Pokazuje progi jednostek sats / BTC dla kursu.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Wypisuje drabinę jednostek: zakres liczby cyfr kwoty w satoshi,
dzielnik, jednostkę i przykładową kwotę USD z wynikiem.

Przykłady:
  bpt ladder --usd-rate 30000
        """,
    )
    add_rate_argument(p)
    p.set_defaults(func=run)
