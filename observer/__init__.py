"""
observer — utrzymywanie adnotacji przy zmianach drzewa.

Publiczne API:
  MutationHub, MutationRecord, Subscription     źródło powiadomień o wstawieniach
  create_scheduler(root, annotate, debounce_ms, visited, source=..., loop=...)
                                                -> MutationScheduler
  MutationScheduler.start(rate) / .stop()
  SchedulerState                                IDLE / OBSERVING / PENDING
"""

from .mutations import MutationHub, MutationRecord, Subscription, is_within
from .scheduler import (
    DEFAULT_DEBOUNCE_MS,
    MutationScheduler,
    SchedulerState,
    accepts_inserted,
    create_scheduler,
)

__all__ = [
    "MutationHub",
    "MutationRecord",
    "Subscription",
    "is_within",
    "DEFAULT_DEBOUNCE_MS",
    "MutationScheduler",
    "SchedulerState",
    "accepts_inserted",
    "create_scheduler",
]
