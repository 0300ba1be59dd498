"""
Konfiguracja bpt — zmienne środowiskowe, opcjonalnie z pliku .env.

  BPT_DEBOUNCE_MS        okno debounce schedulera (ms, domyślnie 250)
  BPT_USD_RATE           domyślna cena 1 BTC w USD dla komend CLI
  BPT_SYMBOL_CLASSES     klasy elementu z symbolem waluty (po przecinku)
  BPT_WHOLE_CLASSES      klasy elementu z częścią całkowitą ceny
  BPT_FRACTION_CLASSES   klasy elementu z częścią ułamkową ceny
"""

from __future__ import annotations

import argparse
import math
import os
import pathlib
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

from observer.scheduler import DEFAULT_DEBOUNCE_MS
from price_model.constants import DEFAULT_MARKERS, MarkerClasses
from price_model.rates import ExchangeRate

ENV_FILE = pathlib.Path(__file__).resolve().parent.parent / ".env"

_ENV_DEBOUNCE = "BPT_DEBOUNCE_MS"
_ENV_USD_RATE = "BPT_USD_RATE"
_ENV_SYMBOL   = "BPT_SYMBOL_CLASSES"
_ENV_WHOLE    = "BPT_WHOLE_CLASSES"
_ENV_FRACTION = "BPT_FRACTION_CLASSES"


@dataclass(frozen=True, slots=True)
class Settings:
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    usd_rate:    float | None = None
    markers:     MarkerClasses = DEFAULT_MARKERS


def _class_list(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if raw is None or not raw.strip():
        return default
    return tuple(c.strip() for c in raw.split(",") if c.strip())


def _positive_rate(raw: str, source: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{source}: oczekiwano liczby, otrzymano {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{source}: kurs musi być skończoną liczbą > 0, otrzymano {raw!r}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Czyta ustawienia z `env` (domyślnie os.environ uzupełnione plikiem .env).

    Raises:
        ValueError: niepoprawna wartość którejś zmiennej.
    """
    if env is None:
        load_dotenv(ENV_FILE, override=False)
        env = os.environ

    raw_debounce = env.get(_ENV_DEBOUNCE)
    debounce_ms = DEFAULT_DEBOUNCE_MS
    if raw_debounce:
        try:
            debounce_ms = int(raw_debounce)
        except ValueError:
            raise ValueError(f"{_ENV_DEBOUNCE}: oczekiwano liczby całkowitej, otrzymano {raw_debounce!r}") from None
        if debounce_ms < 0:
            raise ValueError(f"{_ENV_DEBOUNCE}: wartość musi być >= 0, otrzymano {debounce_ms}")

    raw_rate = env.get(_ENV_USD_RATE)
    usd_rate = _positive_rate(raw_rate, _ENV_USD_RATE) if raw_rate else None

    markers = MarkerClasses(
        symbol=_class_list(env.get(_ENV_SYMBOL), DEFAULT_MARKERS.symbol),
        whole=_class_list(env.get(_ENV_WHOLE), DEFAULT_MARKERS.whole),
        fraction=_class_list(env.get(_ENV_FRACTION), DEFAULT_MARKERS.fraction),
    )
    return Settings(debounce_ms=debounce_ms, usd_rate=usd_rate, markers=markers)


# ---------------------------------------------------------------------------
# Kurs dla komend CLI
# ---------------------------------------------------------------------------

def add_rate_argument(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--usd-rate",
        metavar="USD",
        default=None,
        help=f"Cena 1 BTC w USD (domyślnie: zmienna {_ENV_USD_RATE}).",
    )


def resolve_rate(cli_value: str | None, settings: Settings) -> ExchangeRate:
    """
    Kurs z --usd-rate, a gdy brak, z BPT_USD_RATE.

    Raises:
        ValueError: brak kursu albo niepoprawna wartość.
    """
    if cli_value is not None:
        return ExchangeRate.from_usd_rate(_positive_rate(cli_value, "--usd-rate"), provenance="cli")
    if settings.usd_rate is not None:
        return ExchangeRate.from_usd_rate(settings.usd_rate, provenance="env")
    raise ValueError(f"Brak kursu BTC. Podaj --usd-rate albo ustaw {_ENV_USD_RATE}.")
