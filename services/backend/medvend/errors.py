from __future__ import annotations


class MedvendError(Exception):
    """Base for every failure the inventory core reports to its callers."""


class NotFound(MedvendError):
    def __init__(self, item_id: str):
        super().__init__(f"not_found:{item_id}")
        self.item_id = item_id


class InsufficientStock(MedvendError):
    def __init__(self, item_id: str, requested: int, available: int):
        super().__init__(f"insufficient_stock:{item_id} requested={requested} available={available}")
        self.item_id = item_id
        self.requested = requested
        self.available = available


class InvalidInput(MedvendError):
    pass


class InvalidNewItem(MedvendError):
    def __init__(self, item_id: str, missing: list[str]):
        super().__init__(f"invalid_new_item:{item_id} missing={','.join(missing)}")
        self.item_id = item_id
        self.missing = missing


class QueueEmpty(MedvendError):
    """Not a real failure: the poller asked a queue that has nothing pending."""

    def __init__(self, queue: str):
        super().__init__(f"queue_empty:{queue}")
        self.queue = queue


class PersistenceError(MedvendError):
    """
    The catalog could not be written to disk.

    Raised *after* the in-memory change was applied; the change is not rolled
    back, so callers should treat it as "accepted but not yet durable".
    """
