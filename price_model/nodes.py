"""
price_model/nodes.py — tożsamościowe zbiory węzłów drzewa i kategorie węzłów.

Węzły tekstowe bs4 (NavigableString) dziedziczą po str i porównują się treścią,
a Tag liczy hash z serializacji. Zwykły set() scaliłby dwa różne węzły "$5",
dlatego NodeSet trzyma węzły według id() i przechowuje referencje, żeby id
nie zostało ponownie użyte przez inny obiekt.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import StrEnum

from bs4.element import PageElement


class NodeKind(StrEnum):
    """Kategoria węzła ustalana raz, przed rozgałęzieniem w walkerze."""
    PLAIN_TEXT        = "plain_text"
    CURRENCY_MARKER   = "currency_marker"
    WHOLE_AMOUNT      = "whole_amount"
    FRACTIONAL_AMOUNT = "fractional_amount"
    CONTAINER         = "container"
    IGNORED           = "ignored"


class NodeSet:
    """Zbiór węzłów po tożsamości, z zachowaniem kolejności dodania."""

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Iterable[PageElement] = ()) -> None:
        self._nodes: dict[int, PageElement] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: PageElement) -> bool:
        """Dodaje węzeł; zwraca False gdy już był w zbiorze."""
        key = id(node)
        if key in self._nodes:
            return False
        self._nodes[key] = node
        return True

    def clear(self) -> None:
        self._nodes.clear()

    def snapshot(self) -> list[PageElement]:
        return list(self._nodes.values())

    def __contains__(self, node: object) -> bool:
        return self._nodes.get(id(node)) is node

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[PageElement]:
        return iter(list(self._nodes.values()))

    def __bool__(self) -> bool:
        return bool(self._nodes)

    def __repr__(self) -> str:
        return f"NodeSet({len(self._nodes)} węzłów)"


# Węzły w pełni przetworzone przez walker; współdzielone przez referencję.
type VisitedSet = NodeSet

# Węzły wstawione od ostatniego odpalenia timera debounce.
type PendingSet = NodeSet
