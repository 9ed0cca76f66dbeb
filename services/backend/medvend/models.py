from __future__ import annotations

from typing import Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class MedicineRecord(BaseModel):
    # the catalog file may carry keys we don't know about; keep them on rewrite
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    category: str = ""
    price: Union[int, float] = 0
    stock: int = Field(default=0, ge=0)
    image: str = ""


class DispenseLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    quantity: int = Field(gt=0)


class DispenseEntry(BaseModel):
    """One committed Order waiting for the dispensing actuator."""
    model_config = ConfigDict(frozen=True)

    order: Tuple[DispenseLine, ...]
    timestamp: int  # epoch ms


class RestockEntry(BaseModel):
    """
    One stock change waiting for the display/logging actuator.

    For a restock `store.stock` is the delta that was added, not the new total,
    so it is negative when stock was taken out. The copy is not re-validated
    against the record's `stock >= 0` rule. For a newly added medicine it
    is the full record.
    """
    model_config = ConfigDict(frozen=True)

    store: MedicineRecord
    timestamp: int  # epoch ms


QueueEntry = Union[DispenseEntry, RestockEntry]

UpsertStatus = Literal["deleted", "restocked", "added"]


class UpsertResult(BaseModel):
    status: UpsertStatus
    medicine: MedicineRecord
