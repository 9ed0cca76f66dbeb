from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, List

from .errors import InvalidInput, QueueEmpty
from .models import DispenseEntry, QueueEntry, RestockEntry

logger = logging.getLogger(__name__)

DISPENSE = "dispense"
RESTOCK = "restock"
QUEUE_NAMES = (DISPENSE, RESTOCK)

EnqueueListener = Callable[[str, int], None]  # (queue_name, pending) -> None


class CommandQueues:
    """
    The two FIFO command queues the controller polls.

    `dispense` holds whole orders for the dispensing actuator, `restock`
    holds stock changes for the display/logging actuator. Entries leave a
    queue exactly once, through dequeue_next or flush. There is no length cap:
    if the controller stops polling the queues just grow.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._queues: Dict[str, Deque[QueueEntry]] = {name: deque() for name in QUEUE_NAMES}
        self._listeners: List[EnqueueListener] = []

    def add_listener(self, fn: EnqueueListener) -> None:
        self._listeners.append(fn)

    def _q(self, name: str) -> Deque[QueueEntry]:
        q = self._queues.get(name)
        if q is None:
            raise InvalidInput(f"Unknown queue: {name}")
        return q

    def _append(self, name: str, entry: QueueEntry) -> None:
        with self._lock:
            q = self._q(name)
            q.append(entry)
            pending = len(q)
        logger.info("[QUEUE] %s +1 pending=%d ts=%d", name, pending, entry.timestamp)
        self._notify(name, pending)

    def _notify(self, name: str, pending: int) -> None:
        for fn in self._listeners:
            try:
                fn(name, pending)
            except Exception:
                # the entry is already queued; a broken listener must not undo that
                logger.exception("[QUEUE] enqueue listener failed queue=%s", name)

    def enqueue_dispense(self, entry: DispenseEntry) -> None:
        self._append(DISPENSE, entry)

    def enqueue_restock(self, entry: RestockEntry) -> None:
        self._append(RESTOCK, entry)

    def dequeue_next(self, name: str) -> QueueEntry:
        with self._lock:
            q = self._q(name)
            if not q:
                raise QueueEmpty(name)
            entry = q.popleft()
            pending = len(q)
        logger.info("[QUEUE] %s -1 pending=%d ts=%d", name, pending, entry.timestamp)
        return entry

    def peek_next(self, name: str) -> QueueEntry:
        with self._lock:
            q = self._q(name)
            if not q:
                raise QueueEmpty(name)
            return q[0]

    def flush(self, name: str) -> int:
        """Drop every pending entry. Returns how many were dropped."""
        with self._lock:
            q = self._q(name)
            dropped = len(q)
            q.clear()
        logger.info("[QUEUE] %s flushed dropped=%d", name, dropped)
        return dropped

    def pending(self, name: str) -> int:
        with self._lock:
            return len(self._q(name))

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {name: len(q) for name, q in self._queues.items()}
