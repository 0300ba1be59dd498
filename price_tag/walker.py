"""
price_tag/walker.py — rekurencyjne przejście drzewa bs4 i adnotacja cen.

Reguły przejścia (DFS, pre-order; oznaczanie post-order):
- węzeł już w visited: natychmiastowy powrót;
- symbol waluty rozbitej ceny: czyszczenie tekstu, bez oznaczania;
- część całkowita + następny element z częścią ułamkową: złożenie
  "$<całość>.<ułamek>", adnotacja, wyczyszczenie ułamka, oba elementy
  oznaczone, bez zejścia w dzieci;
- samotna część ułamkowa / całkowita: powrót bez oznaczania
  (relacja z rodzeństwem jest sprawdzana ponownie w kolejnym przebiegu);
- zwykły tekst: adnotacja i oznaczenie węzła wynikowego;
- komentarze, doctype, script/style itp.: oznaczenie bez przetwarzania;
- kontener: dzieci po kolei, z następnikiem pobranym przed wejściem
  w bieżące dziecko (adnotacja podmienia węzły tekstowe), na końcu
  oznaczenie kontenera.

Błąd w jednym węźle jest logowany, a przejście idzie dalej.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bs4 import NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from price_model.constants import DEFAULT_MARKERS, SKIP_TAGS, MarkerClasses
from price_model.errors import ErrorCode, describe_node
from price_model.nodes import NodeKind, VisitedSet
from price_model.rates import ExchangeRate

from .text import annotate_text_node

logger = logging.getLogger(__name__)

CURRENCY_MARKER = "$"
DEFAULT_FRACTION = "00"


@dataclass(slots=True)
class WalkStats:
    """
    Liczniki jednego przejścia.

    - annotated: pary (tekst przed, tekst po) dla zmienionych węzłów
    - marked:    liczba węzłów dodanych do visited
    - skipped:   liczba węzłów pominiętych, bo były już w visited
    - errors:    liczba węzłów, na których przetwarzanie się wyłożyło
    """
    annotated: list[tuple[str, str]] = field(default_factory=list)
    marked:    int = 0
    skipped:   int = 0
    errors:    int = 0


# ---------------------------------------------------------------------------
# Klasyfikacja węzłów
# ---------------------------------------------------------------------------

def tag_classes(tag: Tag) -> set[str]:
    classes = tag.get("class") or ()
    if isinstance(classes, str):
        classes = classes.split()
    return set(classes)


def classify_node(node: PageElement, markers: MarkerClasses = DEFAULT_MARKERS) -> NodeKind:
    """Kategoria węzła; kolejność sprawdzeń: pomijane, symbol, całość, ułamek."""
    if isinstance(node, Tag):
        if node.name in SKIP_TAGS:
            return NodeKind.IGNORED
        classes = tag_classes(node)
        if classes.intersection(markers.symbol):
            return NodeKind.CURRENCY_MARKER
        if classes.intersection(markers.whole):
            return NodeKind.WHOLE_AMOUNT
        if classes.intersection(markers.fraction):
            return NodeKind.FRACTIONAL_AMOUNT
        return NodeKind.CONTAINER
    if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
        parent = node.parent
        if parent is not None and parent.name in SKIP_TAGS:
            return NodeKind.IGNORED
        return NodeKind.PLAIN_TEXT
    return NodeKind.IGNORED


def _leading_text(tag: Tag) -> NavigableString | None:
    """Pierwsze dziecko elementu, o ile jest zwykłym tekstem."""
    first = tag.contents[0] if tag.contents else None
    if isinstance(first, NavigableString) and not isinstance(first, PreformattedString):
        return first
    return None


def _next_element_sibling(tag: Tag) -> Tag | None:
    for sibling in tag.next_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def _clear_leading_text(tag: Tag) -> None:
    text = _leading_text(tag)
    if text is not None and str(text):
        text.replace_with(NavigableString(""))


# ---------------------------------------------------------------------------
# Przejście drzewa
# ---------------------------------------------------------------------------

def walk_nodes(
    node: PageElement,
    rate: ExchangeRate,
    visited: VisitedSet,
    markers: MarkerClasses = DEFAULT_MARKERS,
    stats: WalkStats | None = None,
) -> WalkStats:
    """
    Przechodzi poddrzewo od `node` i adnotuje ceny.

    Wyjątek z pojedynczego dziecka jest logowany i nie przerywa przejścia
    rodzeństwa. Wyjątek dla samego `node` propaguje do wywołującego
    (annotate() i scheduler łapią go per węzeł).
    """
    stats = stats if stats is not None else WalkStats()

    def mark(el: PageElement) -> None:
        if visited.add(el):
            stats.marked += 1
            logger.debug("Węzeł dodany do visited: %s", describe_node(el))

    def annotate_leaf(text_node: NavigableString) -> NavigableString:
        before = str(text_node)
        result = annotate_text_node(text_node, rate)
        if result is not text_node:
            stats.annotated.append((before, str(result)))
        return result

    def rebuild_fragmented_price(whole: Tag) -> None:
        fraction_el = _next_element_sibling(whole)
        if fraction_el is None or classify_node(fraction_el, markers) is not NodeKind.FRACTIONAL_AMOUNT:
            return
        whole_text = _leading_text(whole)
        if whole_text is None:
            return
        fraction_text = _leading_text(fraction_el)
        fraction = str(fraction_text) if fraction_text is not None and str(fraction_text) else DEFAULT_FRACTION

        combined = NavigableString(f"{CURRENCY_MARKER}{whole_text}.{fraction}")
        whole_text.replace_with(combined)
        mark(annotate_leaf(combined))
        _clear_leading_text(fraction_el)
        mark(whole)
        mark(fraction_el)

    def visit(el: PageElement) -> None:
        if el in visited:
            stats.skipped += 1
            logger.debug("Węzeł pominięty (już przetworzony): %s", describe_node(el))
            return

        kind = classify_node(el, markers)

        if kind is NodeKind.CURRENCY_MARKER:
            _clear_leading_text(el)
            return
        if kind is NodeKind.WHOLE_AMOUNT:
            rebuild_fragmented_price(el)
            return
        if kind is NodeKind.FRACTIONAL_AMOUNT:
            return  # obsłużony razem z częścią całkowitą
        if kind is NodeKind.IGNORED:
            mark(el)
            return
        if kind is NodeKind.PLAIN_TEXT:
            mark(annotate_leaf(el))
            return

        child = el.contents[0] if el.contents else None
        while child is not None:
            following = child.next_sibling
            try:
                visit(child)
            except Exception:
                stats.errors += 1
                logger.exception(
                    "%s: błąd adnotacji węzła %s", ErrorCode.ANNOTATION_FAILED, describe_node(child)
                )
            child = following

        mark(el)

    visit(node)
    return stats


def annotate(
    root: PageElement,
    rate: ExchangeRate,
    visited: VisitedSet,
    markers: MarkerClasses = DEFAULT_MARKERS,
    stats: WalkStats | None = None,
) -> None:
    """
    Jedno pełne, synchroniczne przejście poddrzewa `root`.

    Nigdy nie rzuca: błędy są logowane. Ten sam `visited` należy potem
    przekazać schedulerowi, żeby nie przetwarzał ponownie tych samych węzłów.
    """
    try:
        walk_nodes(root, rate, visited, markers, stats)
    except Exception:
        if stats is not None:
            stats.errors += 1
        logger.exception("%s: błąd adnotacji korzenia %s", ErrorCode.ANNOTATION_FAILED, describe_node(root))
