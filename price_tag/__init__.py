"""
price_tag — wykrywanie kwot USD w drzewie HTML i dopisywanie przeliczeń na BTC.

Publiczne API:
  annotate(root, rate, visited)                 pełne przejście poddrzewa
  walk_nodes(node, rate, visited, ...)          -> WalkStats
  annotate_text(text, rate)                     -> (str, bool)
  substitute_prices(text, rate)                 -> (str, int)
  extract_price(raw)                            -> PriceMatch | None
  format_bitcoin_amount(usd_amount, rate)       -> str
  build_preceding_pattern() / build_concluding_pattern()
"""

from .patterns import build_preceding_pattern, build_concluding_pattern
from .extractor import extract_price, magnitude_multiplier, numeric_literal
from .units import format_bitcoin_amount, select_unit, to_satoshis
from .text import annotate_text, annotate_text_node, substitute_prices
from .walker import WalkStats, annotate, classify_node, walk_nodes

__all__ = [
    "build_preceding_pattern",
    "build_concluding_pattern",
    "extract_price",
    "magnitude_multiplier",
    "numeric_literal",
    "format_bitcoin_amount",
    "select_unit",
    "to_satoshis",
    "annotate_text",
    "annotate_text_node",
    "substitute_prices",
    "WalkStats",
    "annotate",
    "classify_node",
    "walk_nodes",
]
