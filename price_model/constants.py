"""
price_model/constants.py — stałe tablice silnika cen: mnożniki, drabina jednostek,
klasy znaczników rozbitych cen i tagi pomijane przy skanowaniu.
"""

from __future__ import annotations

from dataclasses import dataclass

SATOSHIS_PER_BTC = 100_000_000

# ---------------------------------------------------------------------------
# Tablica mnożników
# ---------------------------------------------------------------------------

ONE_THOUSAND = 1_000
ONE_MILLION = 1_000_000
ONE_BILLION = 1_000_000_000
ONE_TRILLION = 1_000_000_000_000

# Kolejność ma znaczenie: pełne słowa przed skrótami, żeby pierwsza litera
# słowa ("t" w "thousand") nie została odczytana jako skrót.
MAGNITUDE_WORDS: tuple[tuple[str, int], ...] = (
    ("thousand", ONE_THOUSAND),
    ("million",  ONE_MILLION),
    ("billion",  ONE_BILLION),
    ("trillion", ONE_TRILLION),
)
MAGNITUDE_LETTERS: tuple[tuple[str, int], ...] = (
    ("k", ONE_THOUSAND),
    ("m", ONE_MILLION),
    ("b", ONE_BILLION),
    ("t", ONE_TRILLION),
)

# ---------------------------------------------------------------------------
# Drabina jednostek
# ---------------------------------------------------------------------------

# (min_digit_count, divisor_exponent, suffix_label), rosnąco po min_digit_count.
UNIT_SUFFIX_LADDER: tuple[tuple[int, int, str], ...] = (
    (0,   0,  " sats"),
    (4,   3,  "k sats"),
    (6,   6,  "M sats"),
    (8,   8,  " BTC"),
    (12,  11, "k BTC"),
    (14,  14, "M BTC"),
)

# ---------------------------------------------------------------------------
# Rozbite ceny (symbol / część całkowita / część ułamkowa w osobnych elementach)
# ---------------------------------------------------------------------------

DEFAULT_SYMBOL_CLASSES:   tuple[str, ...] = ("sx-price-currency", "a-price-symbol")
DEFAULT_WHOLE_CLASSES:    tuple[str, ...] = ("sx-price-whole", "a-price-whole", "a-price-decimal")
DEFAULT_FRACTION_CLASSES: tuple[str, ...] = ("sx-price-fractional", "a-price-fraction")


@dataclass(frozen=True, slots=True)
class MarkerClasses:
    """
    Nazwy klas CSS oznaczających fragmenty rozbitej ceny.

    - symbol:   element z samym symbolem waluty (czyszczony)
    - whole:    element z częścią całkowitą (tu składana jest pełna cena)
    - fraction: element z częścią ułamkową (czyszczony po złożeniu)
    """
    symbol:   tuple[str, ...] = DEFAULT_SYMBOL_CLASSES
    whole:    tuple[str, ...] = DEFAULT_WHOLE_CLASSES
    fraction: tuple[str, ...] = DEFAULT_FRACTION_CLASSES


DEFAULT_MARKERS = MarkerClasses()

# ---------------------------------------------------------------------------
# Tagi bez tekstu cen
# ---------------------------------------------------------------------------

SKIP_TAGS: frozenset[str] = frozenset({
    "script", "style", "noscript", "svg", "canvas", "video", "audio",
    "img", "iframe", "meta", "link", "head", "template", "input", "textarea",
})
