"""
observer/scheduler.py — ponowne skanowanie nowo wstawionych węzłów z debounce.

Stany:
  IDLE       brak subskrypcji
  OBSERVING  subskrypcja aktywna, brak timera
  PENDING    subskrypcja aktywna, timer debounce odlicza

Wstawienia z serii powiadomień trafiają do zbioru pending; każda nowa seria
restartuje timer. Po odpaleniu timera zbiór jest kopiowany i czyszczony
(przed przetwarzaniem), a walker przechodzi po każdym węźle z osobna,
ze współdzielonym visited. Własne edycje silnika zgłoszone z powrotem
przez hosta kończą się w walkerze na sprawdzeniu visited.

Pętla zdarzeń to dowolny obiekt z call_later(delay, cb, *args) zwracającym
uchwyt z cancel(); asyncio.AbstractEventLoop spełnia ten kontrakt.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from bs4 import Tag
from bs4.element import PageElement, PreformattedString

from price_model.constants import SKIP_TAGS
from price_model.errors import ErrorCode, describe_node
from price_model.nodes import NodeSet, PendingSet, VisitedSet
from price_model.rates import ExchangeRate

from .mutations import MutationCallback, MutationRecord

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 250


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerLoop(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...


class Disconnectable(Protocol):
    def disconnect(self) -> None:
        ...


class MutationSource(Protocol):
    def observe(self, root: PageElement, callback: MutationCallback) -> Disconnectable:
        ...


type AnnotateFn = Callable[[PageElement, ExchangeRate, VisitedSet], None]


class SchedulerState(StrEnum):
    IDLE      = "idle"
    OBSERVING = "observing"
    PENDING   = "pending"


def accepts_inserted(node: PageElement) -> bool:
    """Komentarze, doctype i elementy typu script/style nie trafiają do pending."""
    if isinstance(node, PreformattedString):
        return False
    if isinstance(node, Tag) and node.name in SKIP_TAGS:
        return False
    return True


class MutationScheduler:
    """
    Obserwator poddrzewa `root` uruchamiający `annotate_fn` na nowych węzłach.

    Cały stan (kurs, subskrypcja, timer, pending) żyje w instancji; zmienia się
    wyłącznie przez start(), stop() i callbacki powiadomień / timera.
    """

    def __init__(
        self,
        root: PageElement,
        annotate_fn: AnnotateFn,
        debounce_ms: float,
        visited: VisitedSet,
        source: MutationSource,
        loop: TimerLoop | None = None,
    ) -> None:
        if debounce_ms < 0:
            raise ValueError(f"debounce_ms musi być >= 0, otrzymano {debounce_ms!r}")
        self._root = root
        self._annotate_fn = annotate_fn
        self._debounce_s = debounce_ms / 1000
        self._visited = visited
        self._source = source
        self._loop = loop

        self._state = SchedulerState.IDLE
        self._rate: ExchangeRate | None = None
        self._subscription: Disconnectable | None = None
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._pending: PendingSet = NodeSet()
        self._batches_done = 0

        logger.info("Scheduler utworzony (debounce=%s ms)", debounce_ms)

    # -----------------------------------------------------------------------
    # Odczyt stanu
    # -----------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def rate(self) -> ExchangeRate | None:
        return self._rate

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def batches_done(self) -> int:
        """Liczba przebiegów, które faktycznie przetworzyły węzły."""
        return self._batches_done

    # -----------------------------------------------------------------------
    # Cykl życia
    # -----------------------------------------------------------------------

    def start(self, rate: ExchangeRate | None) -> None:
        """
        Zapamiętuje kurs i podłącza obserwację; ponowny start tylko podmienia kurs.

        rate=None oznacza kurs jeszcze nieznany: obserwacja działa, ale zebrane
        węzły są porzucane aż do startu z kursem.
        """
        self._rate = rate
        if self._subscription is not None:
            logger.debug("Scheduler już obserwuje; zaktualizowano kurs (%s)", rate.provenance if rate else None)
            return
        try:
            self._subscription = self._source.observe(self._root, self._on_mutations)
        except Exception:
            logger.exception("%s: nie udało się podłączyć obserwacji", ErrorCode.OBSERVER_FAILED)
            return
        self._state = SchedulerState.OBSERVING
        logger.info("Scheduler obserwuje %s", describe_node(self._root))

    def stop(self) -> None:
        """Anuluje timer i odłącza obserwację; bezpieczne w każdym stanie."""
        self._cancel_timer()
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            try:
                subscription.disconnect()
            except Exception:
                logger.exception("%s: błąd odłączania obserwacji", ErrorCode.OBSERVER_FAILED)
        self._pending.clear()
        if self._state is not SchedulerState.IDLE:
            logger.info("Scheduler zatrzymany")
        self._state = SchedulerState.IDLE

    # -----------------------------------------------------------------------
    # Powiadomienia i timer
    # -----------------------------------------------------------------------

    def _on_mutations(self, records: list[MutationRecord]) -> None:
        if self._state is SchedulerState.IDLE:
            return
        try:
            collected = 0
            for record in records:
                for node in record.added_nodes:
                    if accepts_inserted(node):
                        self._pending.add(node)
                        collected += 1
            if not collected:
                return
            self._arm_timer()
        except Exception:
            logger.exception("%s: błąd obsługi powiadomienia", ErrorCode.OBSERVER_FAILED)

    def _arm_timer(self) -> None:
        try:
            loop = self._loop or asyncio.get_running_loop()
        except RuntimeError:
            logger.exception("%s: brak pętli zdarzeń dla timera debounce", ErrorCode.OBSERVER_FAILED)
            self._cancel_timer()
            self._pending.clear()
            self._state = SchedulerState.OBSERVING
            return
        self._cancel_timer()
        self._timer = loop.call_later(self._debounce_s, self._on_timer, self._generation)
        self._state = SchedulerState.PENDING

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        if generation != self._generation or self._state is not SchedulerState.PENDING:
            return  # timer anulowany albo scheduler zatrzymany
        self._timer = None
        self._state = SchedulerState.OBSERVING

        if self._rate is None or not self._pending:
            if self._rate is None:
                logger.info("%s: brak kursu, pomijam %d węzłów", ErrorCode.MISSING_RATE, len(self._pending))
            self._pending.clear()
            return

        batch = self._pending.snapshot()
        self._pending.clear()
        self.process_batch(batch, self._rate)

    def process_batch(self, nodes: list[PageElement], rate: ExchangeRate) -> int:
        """Przechodzi walkerem po każdym węźle; zwraca liczbę węzłów z błędem."""
        started = time.perf_counter()
        failures = 0
        for node in nodes:
            try:
                self._annotate_fn(node, rate, self._visited)
            except Exception:
                failures += 1
                logger.exception("%s: błąd adnotacji węzła %s", ErrorCode.ANNOTATION_FAILED, describe_node(node))
        self._batches_done += 1
        logger.debug(
            "Przetworzono %d węzłów w %.1f ms (błędy: %d, visited: %d)",
            len(nodes), (time.perf_counter() - started) * 1000, failures, len(self._visited),
        )
        return failures


def create_scheduler(
    root: PageElement,
    annotate: AnnotateFn,
    debounce_ms: float,
    visited: VisitedSet,
    *,
    source: MutationSource,
    loop: TimerLoop | None = None,
) -> MutationScheduler:
    """Tworzy scheduler w stanie IDLE; obserwacja rusza dopiero po start(rate)."""
    return MutationScheduler(root, annotate, debounce_ms, visited, source, loop)
