# paintquote/services/events.py
"""
In-process event bus for request progress and calculation notifications.

Publishers and subscribers share a bus instance explicitly: the API client
takes one at construction and the Flask app keeps one in app.extensions.
"""
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from flask import current_app

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'paintquote.events'

_request_ids = itertools.count(1)


def next_request_id():
    return next(_request_ids)


@dataclass(frozen=True)
class Event:
    pass


@dataclass(frozen=True)
class RequestStarted(Event):
    request_id: int
    method: str
    path: str


@dataclass(frozen=True)
class RequestFinished(Event):
    request_id: int
    method: str
    path: str
    status: Optional[int] = None
    ok: bool = True


@dataclass(frozen=True)
class CalculationCompleted(Event):
    model: str
    tier: Optional[str]
    total: Optional[float]
    ok: bool
    quote_id: Optional[int] = None
    tenant_id: Optional[int] = None


class EventBus:
    def __init__(self):
        self._handlers = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type, handler):
        """Register `handler` for `event_type` and its subclasses; returns an unsubscribe callable."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type, handler):
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def publish(self, event):
        with self._lock:
            handlers = [
                handler
                for event_type, registered in self._handlers.items()
                if isinstance(event, event_type)
                for handler in registered
            ]

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.exception(f"Event handler {handler!r} failed for {type(event).__name__}: {e}")
        return len(handlers)


class LoadingTracker:
    """Counts in-flight requests seen on a bus."""

    def __init__(self, bus):
        self.in_flight = 0
        self._lock = threading.Lock()
        self._unsubscribers = [
            bus.subscribe(RequestStarted, self._started),
            bus.subscribe(RequestFinished, self._finished),
        ]

    @property
    def is_loading(self):
        return self.in_flight > 0

    def _started(self, event):
        with self._lock:
            self.in_flight += 1

    def _finished(self, event):
        with self._lock:
            self.in_flight = max(self.in_flight - 1, 0)

    def close(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []


def get_event_bus():
    """The current Flask app's bus."""
    return current_app.extensions[EXTENSION_KEY]


def log_calculation(event):
    if event.ok:
        logger.info(
            f"Calculated quote {event.quote_id or '(unsaved)'} with {event.model} "
            f"(tier={event.tier}): total {event.total}"
        )
    else:
        logger.info(f"Calculation for quote {event.quote_id or '(unsaved)'} refused by validation")
