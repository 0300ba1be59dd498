"""
price_tag/units.py — kwota USD → czytelny zapis w satoshi / BTC.

Jednostka wynika z liczby cyfr kwoty w satoshi:

  cyfry   jednostka   przykład (1 sat = 0.0003 USD)
  1-4     sats        $0.01   → 33 sats
  5-6     k sats      $10     → 33.3k sats
  7-8     M sats      $500    → 1.67M sats
  9-12    BTC         $50000  → 1.67 BTC
  13-14   k BTC
  15+     M BTC

Im więcej cyfr ponad dzielnik, tym mniej miejsc po przecinku (maks. 3).
"""

from __future__ import annotations

import math

from price_model.constants import UNIT_SUFFIX_LADDER
from price_model.rates import ExchangeRate


def to_satoshis(usd_amount: float, rate: ExchangeRate) -> int:
    return math.floor(usd_amount / rate.usd_per_satoshi)


def select_unit(digit_count: int) -> tuple[int, int, str]:
    """
    Szczebel drabiny dla danej liczby cyfr: poprzednik pierwszego szczebla
    z min_digit_count >= digit_count; ostatni szczebel gdy żaden nie pasuje.
    """
    for index, (min_digits, _, _) in enumerate(UNIT_SUFFIX_LADDER):
        if min_digits >= digit_count:
            return UNIT_SUFFIX_LADDER[max(index - 1, 0)]
    return UNIT_SUFFIX_LADDER[-1]


def round_half_up(value: float, digits: int) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def group_digits(value: float, precision: int) -> str:
    """Separator tysięcy "," i bez zer końcowych części ułamkowej: 1234.50 → "1,234.5"."""
    text = f"{value:,.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_bitcoin_amount(usd_amount: float, rate: ExchangeRate) -> str:
    """Zwraca np. "500 sats", "2.5k sats", "1.5M sats", "1.67 BTC", "3.2k BTC"."""
    satoshis = to_satoshis(usd_amount, rate)
    digit_count = len(str(abs(satoshis)))
    _, divisor_exp, suffix = select_unit(digit_count)
    precision = max(0, 3 - (digit_count - divisor_exp))
    value = round_half_up(satoshis / 10 ** divisor_exp, precision)
    return group_digits(value, precision) + suffix
