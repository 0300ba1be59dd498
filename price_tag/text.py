"""
price_tag/text.py — adnotacja pojedynczego tekstu.

Po każdej znalezionej cenie dopisuje przeliczenie w nawiasie:
  "Only $10 today" → "Only $10  (33.3k sats) today"

Najpierw forma preceding, potem concluding na wyniku pierwszego przebiegu.
"""

from __future__ import annotations

import logging
import math
import re

from bs4 import NavigableString

from price_model.errors import ErrorCode
from price_model.rates import ExchangeRate

from .extractor import extract_price
from .patterns import build_concluding_pattern, build_preceding_pattern
from .units import format_bitcoin_amount

logger = logging.getLogger(__name__)


def make_snippet(raw: str, usd_amount: float, rate: ExchangeRate) -> str:
    return f"{raw} ({format_bitcoin_amount(usd_amount, rate)}) "


def _replace_all(pattern: re.Pattern[str], text: str, rate: ExchangeRate) -> tuple[str, int]:
    count = 0

    def _sub(m: re.Match[str]) -> str:
        nonlocal count
        raw = m.group(0)
        price = extract_price(raw)
        # kwota, której liczba satoshi nie mieści się w float, zostaje bez adnotacji
        if price is None or not math.isfinite(price.usd_amount / rate.usd_per_satoshi):
            logger.debug("%s: pomijam %r", ErrorCode.MALFORMED_MATCH, raw)
            return raw
        count += 1
        return make_snippet(raw, price.usd_amount, rate)

    return pattern.sub(_sub, text), count


def substitute_prices(text: str, rate: ExchangeRate) -> tuple[str, int]:
    """Zwraca (nowy tekst, liczba dopisanych przeliczeń)."""
    if not text:
        return text or "", 0
    text, preceding = _replace_all(build_preceding_pattern(), text, rate)
    text, concluding = _replace_all(build_concluding_pattern(), text, rate)
    return text, preceding + concluding


def annotate_text(text: str | None, rate: ExchangeRate) -> tuple[str, bool]:
    """Zwraca (tekst, czy_zmieniony). Pusty / None tekst to no-op."""
    new_text, count = substitute_prices(text or "", rate)
    return new_text, count > 0


def annotate_text_node(node: NavigableString, rate: ExchangeRate) -> NavigableString:
    """
    Adnotuje węzeł tekstowy i zwraca węzeł obecny w drzewie po operacji.

    NavigableString jest niezmienny, więc zmiana oznacza podmianę węzła
    (replace_with). Bez znalezionej ceny drzewo zostaje nietknięte i zwracany
    jest ten sam węzeł.
    """
    new_text, modified = annotate_text(str(node), rate)
    if not modified:
        return node
    replacement = NavigableString(new_text)
    if node.parent is not None:
        node.replace_with(replacement)
    return replacement
