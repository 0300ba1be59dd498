"""Komenda: bpt annotate-url — pobiera stronę HTML i dopisuje przeliczenia BTC."""

from __future__ import annotations

import argparse
import re
import unicodedata
from pathlib import Path
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from rich.console import Console

from bpt.commands.annotate import _annotate_soup, _settings_and_rate, _show_table, _write_html
from bpt._config import add_rate_argument

console = Console()

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
}
_TIMEOUT_S = 30


def _slug_from_url(url: str) -> str:
    """Domyślna nazwa pliku wynikowego z URL (host + path jako slug ASCII)."""
    parsed = urlparse(url)
    host = parsed.netloc.replace(".", "-").replace(":", "-")
    path = parsed.path.strip("/").replace("/", "-")
    raw = f"{host}-{path}" if path else host
    raw = unicodedata.normalize("NFKD", raw).encode("ascii", "ignore").decode("ascii")
    raw = re.sub(r"[^\w-]", "-", raw).strip("-")
    raw = re.sub(r"-{2,}", "-", raw)
    return raw[:80] or "page"


def fetch_html(url: str) -> str:
    resp = requests.get(url, timeout=_TIMEOUT_S, headers=_HEADERS)
    resp.raise_for_status()
    resp.encoding = resp.apparent_encoding or "utf-8"
    return resp.text


def run(args: argparse.Namespace) -> None:
    url: str = args.url
    settings, rate = _settings_and_rate(args)

    console.print(f"Pobieranie [bold]{url}[/bold] …")

    try:
        html = fetch_html(url)
    except requests.RequestException as e:
        console.print(f"[red]Błąd pobierania:[/red] {e}")
        raise SystemExit(1)

    soup = BeautifulSoup(html, "html.parser")
    stats = _annotate_soup(soup, rate, settings)

    console.print(f"Dopisano przeliczenia w [bold]{len(stats.annotated)}[/bold] węzłach tekstu.")

    out_path = Path(args.out) if args.out else Path(f"{_slug_from_url(url)}.btc.html")
    _write_html(soup, out_path)

    if args.show:
        _show_table(stats)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "annotate-url",
        help="Pobiera stronę HTML i dopisuje przeliczenia BTC do cen USD.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Pobiera stronę pod podanym URL, dopisuje po każdej cenie USD jej
równowartość w satoshi / BTC i zapisuje wynik jako plik HTML.

Przykłady:
  bpt annotate-url https://example.com/sklep --usd-rate 30000 --show
  bpt annotate-url https://example.com/sklep --out sklep.html
        """,
    )
    p.add_argument(
        "url",
        metavar="URL",
        help="Adres URL strony HTML do pobrania.",
    )
    add_rate_argument(p)
    p.add_argument(
        "--out",
        metavar="PLIK",
        default=None,
        help="Plik wynikowy (domyślnie: slug z URL + .btc.html).",
    )
    p.add_argument(
        "--show",
        action="store_true",
        help="Wyświetl tabelę zmienionych tekstów w terminalu.",
    )
    p.set_defaults(func=run)
