"""
price_tag/extractor.py — odczyt kwoty i mnożnika z dopasowanego fragmentu.

Wykrywanie mnożnika jest celowo luźne: sprawdza samo wystąpienie litery
("k" gdziekolwiek we fragmencie oznacza tysiące). Gramatyka dopuszcza
w dopasowaniu tylko cyfry, separatory, sufiks mnożnika i symbol waluty,
więc w praktyce litery pochodzą z sufiksu.
"""

from __future__ import annotations

import logging
import math
import re

from price_model.constants import MAGNITUDE_LETTERS, MAGNITUDE_WORDS
from price_model.errors import ErrorCode
from price_model.matches import PriceMatch

logger = logging.getLogger(__name__)

# Wszystko poza cyframi i kropką.
_NON_NUMERIC_RE = re.compile(r"[^\d.]")

# Najdłuższy poprawny literał na początku: "1.5." → "1.5", ".5" → ".5".
_LEADING_FLOAT_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")


def magnitude_multiplier(raw: str) -> int:
    """Mnożnik z pierwszego znalezionego słowa, potem skrótu; domyślnie 1."""
    lowered = raw.lower()
    for word, value in MAGNITUDE_WORDS:
        if word in lowered:
            return value
    for letter, value in MAGNITUDE_LETTERS:
        if letter in lowered:
            return value
    return 1


def numeric_literal(raw: str) -> float | None:
    """Literał liczbowy po usunięciu separatorów i symboli; None gdy brak."""
    cleaned = _NON_NUMERIC_RE.sub("", raw)
    m = _LEADING_FLOAT_RE.match(cleaned)
    if not m:
        return None
    value = float(m.group(0))
    return value if math.isfinite(value) else None


def extract_price(raw: str) -> PriceMatch | None:
    """
    Buduje PriceMatch z dopasowanego fragmentu.

    Nie rzuca wyjątków: fragment bez skończonej liczby daje None
    (dopasowanie zostaje wtedy bez adnotacji).
    """
    amount = numeric_literal(raw or "")
    if amount is None:
        logger.debug("%s: brak liczby w dopasowaniu %r", ErrorCode.MALFORMED_MATCH, raw)
        return None
    return PriceMatch(
        raw_text=raw,
        numeric_amount=amount,
        magnitude_multiplier=magnitude_multiplier(raw),
    )
