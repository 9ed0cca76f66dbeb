from __future__ import annotations

import logging
import math
import threading
from typing import Any, Dict, List, Mapping, Sequence

from ..command_queue import CommandQueues
from ..errors import InsufficientStock, InvalidInput, InvalidNewItem, NotFound, PersistenceError
from ..models import DispenseEntry, DispenseLine, MedicineRecord, RestockEntry, UpsertResult
from ..utils import log_mutation, now_ms
from .dispense_check import ItemMissing, StockShort, check_dispense

logger = logging.getLogger(__name__)

ALL_MEDICINES = "All Medicines"
NEW_ITEM_FIELDS = ("name", "category", "price", "image")


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


class InventoryStore:
    """
    In-memory medicine catalog, mirrored to disk through `gateway`.

    One re-entrant lock covers the catalog, the queue enqueue and the disk
    write of every mutation, so a commit is seen either whole or not at all
    and queue order matches commit order.

    `gateway` needs `load() -> list[MedicineRecord]` and `save(records)`.
    """

    def __init__(self, gateway, queues: CommandQueues) -> None:
        self._gateway = gateway
        self._queues = queues
        self._lock = threading.RLock()
        self._catalog: Dict[str, MedicineRecord] = {}

    @property
    def queues(self) -> CommandQueues:
        return self._queues

    def load(self) -> int:
        records = self._gateway.load()
        catalog: Dict[str, MedicineRecord] = {}
        for r in records:
            if r.id in catalog:
                logger.warning("[STORE] duplicate id in catalog, keeping first: %s", r.id)
                continue
            catalog[r.id] = r
        with self._lock:
            self._catalog = catalog
        return len(catalog)

    # ---------- reads ----------

    def list_medicines(self) -> List[MedicineRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._catalog.values()]

    def categories(self) -> List[str]:
        with self._lock:
            seen = dict.fromkeys(r.category for r in self._catalog.values())
        seen.pop(ALL_MEDICINES, None)
        return [ALL_MEDICINES, *seen]

    def get(self, item_id: str) -> MedicineRecord:
        with self._lock:
            r = self._catalog.get(item_id)
            if r is None:
                raise NotFound(item_id)
            return r.model_copy(deep=True)

    def get_stock(self, item_id: str) -> int:
        return self.get(item_id).stock

    def __len__(self) -> int:
        with self._lock:
            return len(self._catalog)

    # ---------- mutations ----------

    @log_mutation("dispense")
    def commit_dispense(self, lines: Sequence[DispenseLine]) -> DispenseEntry:
        lines = tuple(lines)
        if not lines:
            raise InvalidInput("Order is empty.")

        with self._lock:
            levels = {line.id: self._catalog[line.id].stock for line in lines if line.id in self._catalog}
            result = check_dispense(levels, lines)

            if isinstance(result, ItemMissing):
                logger.info("[STORE] dispense rejected, unknown id=%s", result.item_id)
                raise NotFound(result.item_id)
            if isinstance(result, StockShort):
                logger.info(
                    "[STORE] dispense rejected, id=%s requested=%d available=%d",
                    result.item_id, result.requested, result.available,
                )
                raise InsufficientStock(result.item_id, result.requested, result.available)

            for line in lines:
                self._catalog[line.id].stock -= line.quantity

            entry = DispenseEntry(order=lines, timestamp=now_ms())
            self._queues.enqueue_dispense(entry)
            self._persist()

        return entry

    @log_mutation("upsert")
    def upsert(self, item_id: str, fields: Mapping[str, Any], quantity: Any) -> UpsertResult:
        """
        Add, restock or delete a medicine.

        - existing id, quantity 0   -> record removed ("deleted")
        - existing id, otherwise    -> stock += quantity ("restocked"); the
          restock queue gets a copy of the record whose stock is the delta
        - unknown id                -> new record with stock = quantity
          ("added"); needs name, category, numeric price and image
        """
        if not item_id:
            raise InvalidInput("ID is required.")
        if not _is_number(quantity):
            raise InvalidInput("Quantity must be a finite number.")
        qty = int(quantity)

        with self._lock:
            med = self._catalog.get(item_id)

            if med is not None and quantity == 0:
                del self._catalog[item_id]
                self._persist()
                return UpsertResult(status="deleted", medicine=med)

            if med is not None:
                new_stock = med.stock + qty
                if new_stock < 0:
                    raise InvalidInput(f"Stock for {item_id} cannot go below zero (have {med.stock}, change {qty}).")
                med.stock = new_stock
                delta = med.model_copy(update={"stock": qty}, deep=True)
                self._queues.enqueue_restock(RestockEntry(store=delta, timestamp=now_ms()))
                self._persist()
                return UpsertResult(status="restocked", medicine=med.model_copy(deep=True))

            missing = [k for k in NEW_ITEM_FIELDS if not _has_field(fields, k)]
            if missing:
                raise InvalidNewItem(item_id, missing)
            if qty < 0:
                raise InvalidInput(f"Initial stock for {item_id} cannot be negative ({qty}).")

            med = MedicineRecord(
                id=item_id,
                name=fields["name"],
                category=fields["category"],
                price=fields["price"],
                stock=qty,
                image=fields["image"],
            )
            self._catalog[item_id] = med
            self._queues.enqueue_restock(RestockEntry(store=med.model_copy(deep=True), timestamp=now_ms()))
            self._persist()
            return UpsertResult(status="added", medicine=med.model_copy(deep=True))

    def _persist(self) -> None:
        try:
            self._gateway.save(list(self._catalog.values()))
        except PersistenceError:
            # memory and queues keep the change; disk is behind until the next good save
            logger.error("[STORE] change applied in memory but catalog save failed")
            raise


def _has_field(fields: Mapping[str, Any], key: str) -> bool:
    v = fields.get(key)
    if key == "price":
        return _is_number(v)
    return isinstance(v, str) and bool(v)
