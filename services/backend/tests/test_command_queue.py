"""Tests for the FIFO command queues."""

import threading

import pytest

from medvend.command_queue import DISPENSE, RESTOCK, CommandQueues
from medvend.errors import InvalidInput, QueueEmpty
from medvend.models import DispenseEntry, DispenseLine, MedicineRecord, RestockEntry


def order(ts, *ids):
    return DispenseEntry(order=tuple(DispenseLine(id=i, quantity=1) for i in ids), timestamp=ts)


def restock(ts, item_id="A"):
    return RestockEntry(store=MedicineRecord(id=item_id, stock=5), timestamp=ts)


class TestDequeue:
    """Tests for dequeue_next."""

    def test_fifo_order(self):
        """Entries come out in the order they went in."""
        q = CommandQueues()
        for ts in (1, 2, 3):
            q.enqueue_dispense(order(ts, "A"))

        assert [q.dequeue_next(DISPENSE).timestamp for _ in range(3)] == [1, 2, 3]

    def test_never_returns_same_entry_twice(self):
        """A dequeued entry is gone for good."""
        q = CommandQueues()
        q.enqueue_dispense(order(1, "A"))
        q.enqueue_dispense(order(2, "B"))

        first = q.dequeue_next(DISPENSE)
        second = q.dequeue_next(DISPENSE)

        assert first is not second
        assert q.pending(DISPENSE) == 0

    def test_empty_raises_queue_empty(self):
        """An empty queue signals QueueEmpty, not an error state."""
        q = CommandQueues()
        with pytest.raises(QueueEmpty) as exc_info:
            q.dequeue_next(RESTOCK)
        assert exc_info.value.queue == RESTOCK

    def test_queues_are_independent(self):
        """Restock entries never show up on the dispense queue."""
        q = CommandQueues()
        q.enqueue_restock(restock(1))

        with pytest.raises(QueueEmpty):
            q.dequeue_next(DISPENSE)
        assert q.dequeue_next(RESTOCK).timestamp == 1

    def test_unknown_queue_name(self):
        """Unknown queue names are rejected."""
        with pytest.raises(InvalidInput):
            CommandQueues().dequeue_next("bogus")


class TestPeek:
    """Tests for peek_next."""

    def test_peek_is_repeatable_and_non_destructive(self):
        """Peeking N times returns the head N times and keeps the length."""
        q = CommandQueues()
        q.enqueue_dispense(order(1, "A"))
        q.enqueue_dispense(order(2, "B"))

        peeked = [q.peek_next(DISPENSE) for _ in range(4)]

        assert all(p is peeked[0] for p in peeked)
        assert q.pending(DISPENSE) == 2
        assert q.dequeue_next(DISPENSE) is peeked[0]
        assert q.pending(DISPENSE) == 1

    def test_peek_empty(self):
        """Peeking an empty queue signals QueueEmpty."""
        with pytest.raises(QueueEmpty):
            CommandQueues().peek_next(DISPENSE)


class TestFlush:
    """Tests for flush."""

    @pytest.mark.parametrize("n", [0, 1, 5])
    def test_flush_empties_queue(self, n):
        """Flush clears any number of entries, including none."""
        q = CommandQueues()
        for ts in range(n):
            q.enqueue_dispense(order(ts, "A"))

        assert q.flush(DISPENSE) == n
        assert q.pending(DISPENSE) == 0

    def test_flush_is_idempotent(self):
        """Flushing twice is harmless."""
        q = CommandQueues()
        q.enqueue_dispense(order(1, "A"))
        q.flush(DISPENSE)
        assert q.flush(DISPENSE) == 0

    def test_flush_leaves_other_queue(self):
        """Flushing dispense keeps restock entries."""
        q = CommandQueues()
        q.enqueue_dispense(order(1, "A"))
        q.enqueue_restock(restock(2))

        q.flush(DISPENSE)

        assert q.snapshot() == {DISPENSE: 0, RESTOCK: 1}


class TestListeners:
    """Tests for enqueue listeners."""

    def test_listener_gets_queue_and_pending(self):
        """Listeners hear about every enqueue with the new length."""
        q = CommandQueues()
        calls = []
        q.add_listener(lambda name, pending: calls.append((name, pending)))

        q.enqueue_dispense(order(1, "A"))
        q.enqueue_dispense(order(2, "A"))
        q.enqueue_restock(restock(3))

        assert calls == [(DISPENSE, 1), (DISPENSE, 2), (RESTOCK, 1)]

    def test_failing_listener_keeps_entry(self):
        """A listener blowing up does not lose the entry."""
        q = CommandQueues()

        def boom(name, pending):
            raise RuntimeError("broker gone")

        q.add_listener(boom)
        q.enqueue_dispense(order(1, "A"))

        assert q.pending(DISPENSE) == 1


class TestConcurrentAccess:
    """Tests for producers and consumers racing on one queue."""

    def test_no_entry_lost_or_duplicated(self):
        """Every entry enqueued by many threads is dequeued exactly once."""
        q = CommandQueues()
        producers, per_producer = 8, 100
        total = producers * per_producer
        taken = []
        taken_lock = threading.Lock()
        done = threading.Event()

        def produce(p):
            for i in range(per_producer):
                q.enqueue_dispense(order(p * per_producer + i, "A"))

        def consume():
            while True:
                try:
                    entry = q.dequeue_next(DISPENSE)
                except QueueEmpty:
                    if done.is_set() and q.pending(DISPENSE) == 0:
                        return
                    continue
                with taken_lock:
                    taken.append(entry.timestamp)

        consumers = [threading.Thread(target=consume) for _ in range(4)]
        for t in consumers:
            t.start()
        workers = [threading.Thread(target=produce, args=(p,)) for p in range(producers)]
        for t in workers:
            t.start()
        for t in workers:
            t.join()
        done.set()
        for t in consumers:
            t.join()

        assert len(taken) == total
        assert sorted(taken) == list(range(total))
        assert q.pending(DISPENSE) == 0

    def test_per_producer_order_preserved(self):
        """Entries from one producer come out in the order it enqueued them."""
        q = CommandQueues()

        def produce(p):
            for i in range(200):
                q.enqueue_dispense(order(i, f"P{p}"))

        workers = [threading.Thread(target=produce, args=(p,)) for p in range(4)]
        for t in workers:
            t.start()
        for t in workers:
            t.join()

        seen = {}
        while q.pending(DISPENSE):
            entry = q.dequeue_next(DISPENSE)
            seen.setdefault(entry.order[0].id, []).append(entry.timestamp)

        assert all(ts == list(range(200)) for ts in seen.values())
