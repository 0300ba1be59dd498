"""
observer/mutations.py — powiadomienia o wstawieniach węzłów do drzewa bs4.

bs4 nie ma odpowiednika MutationObserver, więc zmiany w obserwowanym
drzewie wykonuje się przez MutationHub: każda operacja robi edycję bs4
i dostarcza MutationRecord subskrybentom, których korzeń jest celem zmiany
albo jego przodkiem. Edycje wykonane poza hubem można zgłosić przez report().

    hub = MutationHub()
    sub = hub.observe(soup.body, callback)
    with hub.batch():                       # jedno dostarczenie dla wielu zmian
        hub.append(container, new_card)
        hub.append(container, other_card)
    sub.disconnect()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from bs4 import NavigableString, Tag
from bs4.element import PageElement

from price_model.errors import ErrorCode, describe_node

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MutationRecord:
    """
    Jedna zmiana listy dzieci.

    - target:        rodzic, którego dzieci się zmieniły
    - added_nodes:   węzły wstawione
    - removed_nodes: węzły usunięte
    """
    target:        PageElement
    added_nodes:   tuple[PageElement, ...] = ()
    removed_nodes: tuple[PageElement, ...] = ()


type MutationCallback = Callable[[list[MutationRecord]], None]


class Subscription:
    """Uchwyt obserwacji jednego poddrzewa; disconnect() jest idempotentne."""

    def __init__(self, hub: MutationHub, root: PageElement, callback: MutationCallback) -> None:
        self._hub = hub
        self.root = root
        self.callback = callback
        self.active = True

    def disconnect(self) -> None:
        if self.active:
            self.active = False
            self._hub._unsubscribe(self)


def is_within(node: PageElement, root: PageElement) -> bool:
    """True gdy `node` to `root` albo jego potomek (porównanie tożsamości)."""
    if node is root:
        return True
    return any(parent is root for parent in node.parents)


def _as_node(node: PageElement | str) -> PageElement:
    if isinstance(node, str) and not isinstance(node, NavigableString):
        return NavigableString(node)
    return node


class MutationHub:
    """Źródło zmian drzewa: edycje bs4 + dostarczanie rekordów obserwatorom."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._batch_depth = 0
        self._queued: list[MutationRecord] = []

    # -----------------------------------------------------------------------
    # Subskrypcje
    # -----------------------------------------------------------------------

    def observe(self, root: PageElement, callback: MutationCallback) -> Subscription:
        sub = Subscription(self, root, callback)
        self._subscriptions.append(sub)
        logger.debug("Obserwacja poddrzewa %s", describe_node(root))
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        self._subscriptions = [s for s in self._subscriptions if s is not sub]

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    # -----------------------------------------------------------------------
    # Edycje drzewa
    # -----------------------------------------------------------------------

    def append(self, parent: Tag, node: PageElement | str) -> PageElement:
        node = _as_node(node)
        parent.append(node)
        self.report(parent, (node,))
        return node

    def extend(self, parent: Tag, nodes: Iterable[PageElement | str]) -> list[PageElement]:
        added = [_as_node(n) for n in nodes]
        for node in added:
            parent.append(node)
        self.report(parent, added)
        return added

    def insert_before(self, reference: PageElement, node: PageElement | str) -> PageElement:
        node = _as_node(node)
        parent = reference.parent
        if parent is None:
            raise ValueError("Węzeł odniesienia nie ma rodzica")
        reference.insert_before(node)
        self.report(parent, (node,))
        return node

    def insert_after(self, reference: PageElement, node: PageElement | str) -> PageElement:
        node = _as_node(node)
        parent = reference.parent
        if parent is None:
            raise ValueError("Węzeł odniesienia nie ma rodzica")
        reference.insert_after(node)
        self.report(parent, (node,))
        return node

    def replace_with(self, old: PageElement, new: PageElement | str) -> PageElement:
        new = _as_node(new)
        parent = old.parent
        if parent is None:
            raise ValueError("Zastępowany węzeł nie ma rodzica")
        old.replace_with(new)
        self.report(parent, (new,), (old,))
        return new

    def remove(self, node: PageElement) -> PageElement:
        parent = node.parent
        node.extract()
        if parent is not None:
            self.report(parent, (), (node,))
        return node

    # -----------------------------------------------------------------------
    # Dostarczanie rekordów
    # -----------------------------------------------------------------------

    def report(
        self,
        target: PageElement,
        added_nodes: Iterable[PageElement] = (),
        removed_nodes: Iterable[PageElement] = (),
    ) -> None:
        """Zgłasza zmianę wykonaną (także poza hubem) pod węzłem `target`."""
        record = MutationRecord(target, tuple(added_nodes), tuple(removed_nodes))
        if self._batch_depth:
            self._queued.append(record)
        else:
            self._deliver([record])

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Zbiera rekordy z bloku i dostarcza je razem po jego zakończeniu."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._queued:
                records, self._queued = self._queued, []
                self._deliver(records)

    def _deliver(self, records: list[MutationRecord]) -> None:
        for sub in list(self._subscriptions):
            if not sub.active:
                continue
            relevant = [r for r in records if is_within(r.target, sub.root)]
            if not relevant:
                continue
            try:
                sub.callback(relevant)
            except Exception:
                logger.exception(
                    "%s: obserwator %s zgłosił wyjątek", ErrorCode.OBSERVER_FAILED, describe_node(sub.root)
                )
