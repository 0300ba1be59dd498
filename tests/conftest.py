"""
Wspólne fixtures: kurs testowy, parser HTML i sterowana ręcznie pętla timerów.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from bs4 import BeautifulSoup

from price_model.rates import ExchangeRate


class FakeHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """
    Minimalna pętla z call_later(); czas płynie tylko przez advance().

    honor_cancel=False symuluje timer, który odpala mimo anulowania
    (np. callback był już w kolejce pętli w chwili cancel()).
    """

    def __init__(self, honor_cancel: bool = True) -> None:
        self.now = 0.0
        self.honor_cancel = honor_cancel
        self.handles: list[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    def _runnable(self, handle: FakeHandle) -> bool:
        return not handle.cancelled or not self.honor_cancel

    @property
    def scheduled(self) -> int:
        return sum(1 for h in self.handles if self._runnable(h))

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.handles if self._runnable(h) and h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            self.now = max(self.now, handle.when)
            handle.callback(*handle.args)
        self.now = target


@pytest.fixture
def rate() -> ExchangeRate:
    """1 BTC = 30 000 USD, czyli 1 sat = 0.0003 USD."""
    return ExchangeRate.from_usd_rate(30_000, provenance="test")


@pytest.fixture
def unit_rate() -> ExchangeRate:
    """1 sat = 1 USD; liczba satoshi równa kwocie, wygodne do testów progów."""
    return ExchangeRate(usd_per_satoshi=1.0, usd_per_unit=100_000_000.0, provenance="test")


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def make_soup() -> Callable[[str], BeautifulSoup]:
    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")
    return _make
