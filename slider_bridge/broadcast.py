from __future__ import annotations
import logging
import queue
import threading
from typing import Iterator, List, Optional, Sequence

from .config import SUBSCRIBER_BUFFER
from .models import SliderMoveEvent

logger = logging.getLogger(__name__)


class SliderMoveSink:
    """
    Bounded per-subscriber event queue.

    Delivery never blocks the publisher: when the queue is full the oldest
    pending event is dropped to make room for the newest one.
    """

    def __init__(self, maxsize: int = SUBSCRIBER_BUFFER) -> None:
        self._queue: "queue.Queue[SliderMoveEvent]" = queue.Queue(maxsize=max(1, maxsize))
        self.dropped = 0

    def deliver(self, event: SliderMoveEvent) -> None:
        while True:
            try:
                self._queue.put_nowait(event)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    continue
                self.dropped += 1
                if self.dropped == 1:
                    logger.warning("Slider move subscriber is not keeping up, dropping oldest events")
                else:
                    logger.debug(f"Dropped oldest slider move event ({self.dropped} so far)")

    def get(self, timeout: Optional[float] = None) -> SliderMoveEvent:
        """Block until an event is available. Raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def drain(self, limit: Optional[int] = None) -> List[SliderMoveEvent]:
        """Return pending events without blocking."""
        events: List[SliderMoveEvent] = []
        while limit is None or len(events) < limit:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def pending(self) -> int:
        return self._queue.qsize()

    def __iter__(self) -> Iterator[SliderMoveEvent]:
        while True:
            yield self.get()


class EventBroadcaster:
    """Fans every published event out to every subscriber, in order."""

    def __init__(self, default_maxsize: int = SUBSCRIBER_BUFFER) -> None:
        self._default_maxsize = default_maxsize
        self._sinks: List[SliderMoveSink] = []
        self._lock = threading.Lock()

    def subscribe(self, maxsize: Optional[int] = None) -> SliderMoveSink:
        sink = SliderMoveSink(maxsize if maxsize is not None else self._default_maxsize)
        with self._lock:
            self._sinks.append(sink)
        return sink

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._sinks)

    def publish(self, events: Sequence[SliderMoveEvent]) -> None:
        if not events:
            return
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            for event in events:
                sink.deliver(event)
