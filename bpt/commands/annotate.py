"""Komenda: bpt annotate — dopisuje przeliczenia BTC w lokalnym pliku HTML."""

from __future__ import annotations

import argparse
from pathlib import Path

from bs4 import BeautifulSoup
from rich import box
from rich.console import Console
from rich.table import Table

from bpt._config import Settings, add_rate_argument, load_settings, resolve_rate
from price_model.nodes import NodeSet
from price_model.rates import ExchangeRate
from price_tag.walker import WalkStats, annotate

console = Console()


# ---------------------------------------------------------------------------
# Wspólne dla annotate / annotate-url
# ---------------------------------------------------------------------------

def _settings_and_rate(args: argparse.Namespace) -> tuple[Settings, ExchangeRate]:
    try:
        settings = load_settings()
        rate = resolve_rate(args.usd_rate, settings)
    except ValueError as e:
        console.print(f"[red]Błąd konfiguracji:[/red] {e}")
        raise SystemExit(1)
    return settings, rate


def _annotate_soup(soup: BeautifulSoup, rate: ExchangeRate, settings: Settings) -> WalkStats:
    root = soup.body or soup
    stats = WalkStats()
    annotate(root, rate, NodeSet(), settings.markers, stats)
    return stats


def _write_html(soup: BeautifulSoup, out_path: Path) -> None:
    out_path.write_text(str(soup), encoding="utf-8")
    console.print(f"[green]HTML:[/green] {out_path}")


def _show_table(stats: WalkStats) -> None:
    if not stats.annotated:
        console.print("[yellow]Nie znaleziono cen.[/yellow]")
        return

    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
        expand=False,
    )
    table.add_column("#",     justify="right", no_wrap=True, style="dim")
    table.add_column("PRZED", no_wrap=False, max_width=60)
    table.add_column("PO",    no_wrap=False, max_width=80, style="bold cyan")

    for i, (before, after) in enumerate(stats.annotated, 1):
        table.add_row(str(i), before.strip()[:120], after.strip()[:160])

    console.print()
    console.print(table)
    console.print(
        f"  [dim]{len(stats.annotated)} węzłów ze zmianą, "
        f"{stats.marked} oznaczonych, błędy: {stats.errors}[/dim]\n"
    )


# ---------------------------------------------------------------------------
# Główna logika komendy
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> None:
    html_path = Path(args.html_file)
    if not html_path.exists():
        console.print(f"[red]Plik nie istnieje:[/red] {html_path}")
        raise SystemExit(1)

    settings, rate = _settings_and_rate(args)

    console.print(
        f"Adnotacja [bold]{html_path}[/bold] "
        f"(1 BTC = [cyan]{rate.usd_per_unit:,.2f}[/cyan] USD) …"
    )

    soup = BeautifulSoup(html_path.read_text(encoding="utf-8"), "html.parser")
    stats = _annotate_soup(soup, rate, settings)

    console.print(f"Dopisano przeliczenia w [bold]{len(stats.annotated)}[/bold] węzłach tekstu.")

    out_path = Path(args.out) if args.out else html_path.with_suffix(".btc.html")
    _write_html(soup, out_path)

    if args.show:
        _show_table(stats)


# ---------------------------------------------------------------------------
# Rejestracja parsera
# ---------------------------------------------------------------------------

def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "annotate",
        help="Dopisuje przeliczenia BTC do cen USD w pliku HTML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Parsuje plik HTML, dopisuje po każdej cenie USD jej równowartość
w satoshi / BTC i zapisuje wynik (domyślnie <nazwa>.btc.html).

Przykłady:
  bpt annotate sklep.html --usd-rate 30000
  bpt annotate sklep.html --usd-rate 30000 --out wynik.html --show
  BPT_USD_RATE=30000 bpt annotate sklep.html
        """,
    )
    p.add_argument(
        "html_file",
        metavar="PLIK.html",
        help="Ścieżka do pliku HTML.",
    )
    add_rate_argument(p)
    p.add_argument(
        "--out",
        metavar="PLIK",
        default=None,
        help="Plik wynikowy (domyślnie: <nazwa>.btc.html obok wejścia).",
    )
    p.add_argument(
        "--show",
        action="store_true",
        help="Wyświetl tabelę zmienionych tekstów w terminalu.",
    )
    p.set_defaults(func=run)
