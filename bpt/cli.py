"""
bpt — narzędzie CLI do cen BTC w dokumentach HTML.

Użycie:
  bpt <komenda> [opcje]

Komendy:
  annotate      Dopisuje przeliczenia BTC do cen USD w pliku HTML.
  annotate-url  Pobiera stronę HTML i dopisuje przeliczenia BTC.
  convert       Przelicza ceny USD w podanych fragmentach tekstu.
  ladder        Pokazuje progi jednostek sats / BTC dla kursu.
"""

from __future__ import annotations

import argparse
import logging
import sys

# Windows: terminal może używać cp1252 — wymuszamy UTF-8, żeby polskie znaki
# w tekstach pomocy argparse były wypisywane poprawnie.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from rich.console import Console
from rich.logging import RichHandler

from bpt.commands import annotate as cmd_annotate
from bpt.commands import annotate_url as cmd_annotate_url
from bpt.commands import convert as cmd_convert
from bpt.commands import ladder as cmd_ladder


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bpt",
        description="Bitcoin Price Tag — ceny USD z przeliczeniem na BTC.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="bpt 0.1.0"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Logi diagnostyczne (DEBUG) na stderr.",
    )

    subparsers = parser.add_subparsers(
        title="komendy",
        metavar="<komenda>",
        dest="command",
    )
    subparsers.required = True

    cmd_annotate.add_parser(subparsers)
    cmd_annotate_url.add_parser(subparsers)
    cmd_convert.add_parser(subparsers)
    cmd_ladder.add_parser(subparsers)

    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
