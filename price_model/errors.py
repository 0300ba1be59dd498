"""
price_model/errors.py — kody błędów silnika.

Żaden z nich nie przerywa pracy: trafiają do logów razem z kontekstem węzła,
a skanowanie idzie dalej.
"""

from __future__ import annotations

from enum import StrEnum

from bs4 import Tag


class ErrorCode(StrEnum):
    """Stałe kody klas błędów (dołączane do komunikatów logów)."""

    # dopasowanie gramatyki, z którego nie da się odczytać liczby
    MALFORMED_MATCH    = "E_MALFORMED_MATCH"

    # nieoczekiwany wyjątek przy przetwarzaniu jednego węzła
    ANNOTATION_FAILED  = "E_ANNOTATION_FAILED"

    # timer odpalił zanim dostarczono kurs
    MISSING_RATE       = "E_MISSING_RATE"

    # subskrypcja / odłączenie obserwatora zmian
    OBSERVER_FAILED    = "E_OBSERVER_FAILED"


def describe_node(node: object) -> str:
    """Krótki opis węzła do logów: nazwa tagu / typ, klasy i początek tekstu."""
    if isinstance(node, Tag):
        classes = node.get("class") or ()
        if isinstance(classes, str):
            classes = classes.split()
        suffix = "".join(f".{c}" for c in classes)
        return f"<{node.name}{suffix}>@{id(node):#x}"
    text = str(node)
    preview = text[:40] + ("…" if len(text) > 40 else "")
    return f"{type(node).__name__}({preview!r})@{id(node):#x}"
