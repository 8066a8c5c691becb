"""
Lightweight EventBus owned by the service container.

Key invariants (enforced by call sites + tests):
  - Event topics come from enums in app.enums.events (EventType).
  - Subscribers always receive a plain dict payload; dataclasses and
    pydantic models are normalised before dispatch.
  - ``worker_count == 0`` dispatches inline on the publisher's thread, which
    is what tests and the scheduler CLI use.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from dataclasses import asdict, is_dataclass
from enum import Enum
from queue import Empty, Full, Queue
from typing import Any, Callable, Dict, Hashable, Iterable

from pydantic import BaseModel

from app.enums.events import EventType

logger = logging.getLogger(__name__)

# Drop warning configuration
_DROP_WARNING_THRESHOLD = 10  # Log summary every N drops
_DROP_WARNING_INTERVAL_SECONDS = 60  # Minimum seconds between drop summaries


class EventBus:
    """Handles event-driven communication across services."""

    def __init__(self, queue_size: int = 1024, worker_count: int = 2) -> None:
        self.subscribers: Dict[Hashable, list[Callable[[Any], None]]] = defaultdict(list)
        self.lock = threading.Lock()
        self._queue_size = int(queue_size)
        self._queue: Queue = Queue(maxsize=self._queue_size)
        self._worker_pool_size = max(0, int(worker_count))
        self._workers: list[threading.Thread] = []
        self._running = False
        self._dropped_events = 0
        self._drops_by_event: Dict[str, int] = defaultdict(int)
        self._drops_since_last_warning = 0
        self._last_drop_warning_time = 0.0
        if self._worker_pool_size:
            self._start_workers()

    @property
    def is_inline(self) -> bool:
        return self._worker_pool_size == 0

    def _start_workers(self) -> None:
        """Spin up a small worker pool to avoid unbounded thread creation."""
        with self.lock:
            if self._running:
                return
            self._running = True
            for idx in range(self._worker_pool_size):
                worker = threading.Thread(target=self._worker_loop, daemon=True, name=f"EventBusWorker-{idx}")
                worker.start()
                self._workers.append(worker)
        logger.info(
            "EventBus workers started (pool=%s queue=%s)",
            self._worker_pool_size,
            self._queue_size,
        )

    def shutdown(self, timeout: float = 2.0) -> None:
        """Stop worker threads after draining what is already queued."""
        with self.lock:
            if not self._running:
                return
            self._running = False
            workers = list(self._workers)
            self._workers.clear()
        for worker in workers:
            worker.join(timeout=timeout)
        logger.info("EventBus stopped")

    def subscribe(self, event_name: EventType | str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """
        Subscribes a callback function to an event.

        Args:
            event_name: The enum topic (preferred) or raw string.
            callback: Function to call when the event occurs.

        Returns:
            A callable that removes the subscription.
        """
        name = event_name.value if isinstance(event_name, Enum) else event_name
        with self.lock:
            self.subscribers[name].append(callback)

        def unsubscribe() -> None:
            with self.lock:
                callbacks = self.subscribers.get(name, [])
                try:
                    callbacks.remove(callback)
                except ValueError:
                    return

        return unsubscribe

    def _worker_loop(self) -> None:
        """Worker thread loop to process events from the queue."""
        while self._running or not self._queue.empty():
            try:
                event_name, callback, payload = self._queue.get(timeout=0.2)
            except Empty:
                continue
            try:
                self._dispatch(event_name, callback, payload)
            finally:
                self._queue.task_done()

    @staticmethod
    def _dispatch(event_name: str, callback: Callable[[Any], None], payload: Any) -> None:
        try:
            callback(payload)
        except Exception as exc:
            logger.error("Error in callback for event %s: %s", event_name, exc, exc_info=True)

    def publish(self, event_name: EventType | str, data: Any | None = None) -> None:
        """
        Publishes an event, calling all subscribed callback functions.

        Args:
            event_name: The enum topic (preferred) or raw string.
            data: Payload object (Pydantic model, dataclass, or dict/primitive).
        """
        name = event_name.value if isinstance(event_name, Enum) else event_name

        # Normalize payload for subscribers: they always receive a dict or primitive.
        if isinstance(data, BaseModel):
            payload: Any = data.model_dump()
        elif is_dataclass(data) and not isinstance(data, type):
            to_dict = getattr(data, "to_dict", None)
            payload = to_dict() if callable(to_dict) else asdict(data)
        else:
            payload = data

        with self.lock:
            callbacks: Iterable[Callable[[Any], None]] = list(self.subscribers.get(name, []))

        if self.is_inline or not self._running:
            for callback in callbacks:
                self._dispatch(name, callback, payload)
            return

        for callback in callbacks:
            try:
                self._queue.put_nowait((name, callback, payload))
            except Full:
                self._record_drop(name)
                break

    def _record_drop(self, event_name: str) -> None:
        """Record a dropped event and log periodic warnings."""
        self._dropped_events += 1
        self._drops_by_event[event_name] += 1
        self._drops_since_last_warning += 1

        now = time.monotonic()
        should_warn = (
            self._drops_since_last_warning >= _DROP_WARNING_THRESHOLD
            and (now - self._last_drop_warning_time) >= _DROP_WARNING_INTERVAL_SECONDS
        )

        if should_warn:
            top_drops = sorted(self._drops_by_event.items(), key=lambda x: x[1], reverse=True)[:5]
            top_drops_str = ", ".join(f"{k}:{v}" for k, v in top_drops)

            logger.warning(
                "EventBus dropping events! queue_size=%d, total_dropped=%d, "
                "recent_drops=%d, top_dropped_events=[%s]. "
                "Consider increasing FARM_EVENTBUS_QUEUE_SIZE or reducing event volume.",
                self._queue_size,
                self._dropped_events,
                self._drops_since_last_warning,
                top_drops_str,
            )
            self._drops_since_last_warning = 0
            self._last_drop_warning_time = now

    def listener(self, event_name: EventType | str) -> Callable[[Callable[[Any], None]], Callable[[Any], None]]:
        """Decorator for subscribing a function to an event at definition time."""

        def decorator(func: Callable[[Any], None]) -> Callable[[Any], None]:
            self.subscribe(event_name, func)
            return func

        return decorator

    def get_metrics(self) -> Dict[str, Any]:
        """Return lightweight metrics for health endpoints/logging."""
        top_dropped = dict(sorted(self._drops_by_event.items(), key=lambda x: x[1], reverse=True)[:5])
        with self.lock:
            subscriber_count = sum(len(values) for values in self.subscribers.values())

        return {
            "mode": "inline" if self.is_inline else "queued",
            "queue_depth": self._queue.qsize(),
            "queue_size": self._queue_size,
            "workers": self._worker_pool_size,
            "dropped_events": self._dropped_events,
            "drops_by_event_top5": top_dropped,
            "subscribers": subscriber_count,
            "is_dropping": self._drops_since_last_warning > 0,
        }
