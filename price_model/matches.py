"""price_model/matches.py — wynik ekstrakcji jednej dopasowanej ceny."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PriceMatch:
    """
    Jedno dopasowanie gramatyki cen, żyje tylko w trakcie podmiany tekstu.

    - raw_text:             dosłowny dopasowany fragment, np. "$1.5m "
    - numeric_amount:       literał liczbowy bez separatorów, np. 1.5
    - magnitude_multiplier: mnożnik z sufiksu (1 gdy brak), np. 1_000_000
    """
    raw_text:             str
    numeric_amount:       float
    magnitude_multiplier: int = 1

    @property
    def usd_amount(self) -> float:
        return self.numeric_amount * self.magnitude_multiplier
