"""
price_model — struktury danych silnika cen BTC.

Użycie:
  from price_model import ExchangeRate, PriceMatch, NodeSet, ...

Moduły:
  constants — MAGNITUDE_WORDS, MAGNITUDE_LETTERS, UNIT_SUFFIX_LADDER,
              MarkerClasses, SKIP_TAGS
  rates     — ExchangeRate
  matches   — PriceMatch
  nodes     — NodeSet, NodeKind, VisitedSet, PendingSet
  errors    — ErrorCode, describe_node
"""

from .constants import (
    SATOSHIS_PER_BTC,
    MAGNITUDE_WORDS,
    MAGNITUDE_LETTERS,
    UNIT_SUFFIX_LADDER,
    MarkerClasses,
    DEFAULT_MARKERS,
    SKIP_TAGS,
)
from .rates import ExchangeRate
from .matches import PriceMatch
from .nodes import NodeKind, NodeSet, VisitedSet, PendingSet
from .errors import ErrorCode, describe_node

__all__ = [
    # constants
    "SATOSHIS_PER_BTC",
    "MAGNITUDE_WORDS",
    "MAGNITUDE_LETTERS",
    "UNIT_SUFFIX_LADDER",
    "MarkerClasses",
    "DEFAULT_MARKERS",
    "SKIP_TAGS",
    # rates
    "ExchangeRate",
    # matches
    "PriceMatch",
    # nodes
    "NodeKind",
    "NodeSet",
    "VisitedSet",
    "PendingSet",
    # errors
    "ErrorCode",
    "describe_node",
]
