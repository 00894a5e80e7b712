"""Ledger events and a synchronous, in-order dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalUpdated:
    action: int
    confidence: int
    predicted_price: int
    timestamp: int


@dataclass(frozen=True)
class ImageIdUpdated:
    image_id: bytes


LedgerEvent = Union[SignalUpdated, ImageIdUpdated]


class EventBus:
    """Handlers are called in registration order for each event.

    Events are not retained.  A failing handler is logged and skipped;
    the remaining handlers still receive the event.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable[[LedgerEvent], None]] = []

    def subscribe(self, handler: Callable[[LedgerEvent], None]) -> None:
        self._handlers.append(handler)

    def publish(self, event: LedgerEvent) -> None:
        for h in list(self._handlers):
            try:
                h(event)
            except Exception:
                log.exception("Event handler %r failed on %s", h, type(event).__name__)
