"""
price_tag/patterns.py — gramatyki dopasowania kwot USD w tekście.

Dwie formy:
  preceding   symbol przed kwotą:  $100, $1,000.50, USD 5k, $1.5 million
  concluding  symbol po kwocie:    100 USD, 10k USD, 2.5 trillion USD, 5$

Obie dzielą pod-gramatykę cyfr / ułamka / mnożnika, żeby kwota była
parsowana tak samo niezależnie od położenia symbolu. Sam symbol albo same
cyfry nigdy nie pasują.
"""

from __future__ import annotations

import functools
import re

# ---------------------------------------------------------------------------
# Fragmenty gramatyki
# ---------------------------------------------------------------------------

CURRENCY_PATTERN = r"(\$|USD)"

# Cyfry z opcjonalnymi separatorami tysięcy (1,000,000).
THOUSANDS_PATTERN = r"(\d|,)*"

DECIMAL_PATTERN = r"(\.\d+)?"

# Sufiks mnożnika: k, m, mm, b, t albo słowo (thousand, million, billion,
# trillion, bn, mn), ograniczony znakiem niebędącym literą/cyfrą lub końcem.
# Znak ograniczający wchodzi do dopasowania.
MAGNITUDE_PATTERN = r"\s?((thousand|t|b|m{1,2}|k)(r?illion|n)?(\W|$))?"

_FLAGS = re.IGNORECASE


# ---------------------------------------------------------------------------
# Publiczne API
# ---------------------------------------------------------------------------

@functools.lru_cache(maxsize=1)
def build_preceding_pattern() -> re.Pattern[str]:
    """Symbol waluty, opcjonalna spacja, kwota i opcjonalny mnożnik."""
    return re.compile(
        CURRENCY_PATTERN + r"\x20?\d" + THOUSANDS_PATTERN + DECIMAL_PATTERN + MAGNITUDE_PATTERN,
        _FLAGS,
    )


@functools.lru_cache(maxsize=1)
def build_concluding_pattern() -> re.Pattern[str]:
    """Kwota, opcjonalny mnożnik, opcjonalna spacja i symbol waluty."""
    return re.compile(
        r"\d" + THOUSANDS_PATTERN + DECIMAL_PATTERN + MAGNITUDE_PATTERN + r"\x20?" + CURRENCY_PATTERN,
        _FLAGS,
    )

