from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Union

from ..models import DispenseLine


@dataclass(frozen=True)
class CheckOk:
    pass


@dataclass(frozen=True)
class ItemMissing:
    item_id: str


@dataclass(frozen=True)
class StockShort:
    item_id: str
    requested: int
    available: int


DispenseCheck = Union[CheckOk, ItemMissing, StockShort]


def check_dispense(stock_levels: Mapping[str, int], lines: Iterable[DispenseLine]) -> DispenseCheck:
    """
    Decide whether an order can be dispensed from `stock_levels` as-is.

    Two passes, and the order matters: every id is checked for existence
    before any quantity is compared, so a missing item is always reported
    ahead of a short one. Within a pass the first offending line (input
    order) wins.

    A medicine listed on several lines is checked against the running total
    requested for it, not line by line.
    """
    lines = list(lines)

    for line in lines:
        if line.id not in stock_levels:
            return ItemMissing(line.id)

    requested: dict[str, int] = {}
    for line in lines:
        requested[line.id] = requested.get(line.id, 0) + line.quantity
        available = stock_levels[line.id]
        if requested[line.id] > available:
            return StockShort(line.id, requested[line.id], available)

    return CheckOk()
