"""
price_model/rates.py — kurs wymiany BTC/USD dostarczany z zewnątrz.

Silnik tylko czyta ExchangeRate; pozyskanie kursu (sieć, retry, cache)
należy do wywołującego.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .constants import SATOSHIS_PER_BTC


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """
    Niezmienny rekord kursu.

    - usd_per_satoshi: cena 1 satoshi w USD (> 0)
    - usd_per_unit:    cena 1 BTC w USD (> 0)
    - observed_at:     moment odczytu kursu
    - provenance:      źródło kursu, np. "coindesk" albo "cli"
    """
    usd_per_satoshi: float
    usd_per_unit:    float
    observed_at:     datetime = field(default_factory=_utc_now)
    provenance:      str = "unknown"

    def __post_init__(self) -> None:
        for name in ("usd_per_satoshi", "usd_per_unit"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} musi być skończoną liczbą > 0, otrzymano {value!r}")

    @classmethod
    def from_usd_rate(
        cls,
        usd_rate: float,
        provenance: str = "unknown",
        observed_at: datetime | None = None,
    ) -> ExchangeRate:
        """Buduje rekord z ceny 1 BTC w USD (satoshi = 1e-8 BTC)."""
        return cls(
            usd_per_satoshi=usd_rate / SATOSHIS_PER_BTC,
            usd_per_unit=usd_rate,
            observed_at=observed_at or _utc_now(),
            provenance=provenance,
        )
