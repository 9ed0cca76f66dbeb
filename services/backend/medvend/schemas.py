from __future__ import annotations

from pydantic import BaseModel, Field, StrictFloat, StrictInt
from typing import Any, List, Literal, Optional, Union

from .models import DispenseLine, MedicineRecord


# ---------------- DISPENSE ----------------

class DispenseLineIn(BaseModel):
    id: str = Field(min_length=1)
    quantity: StrictInt = Field(gt=0)

    def to_line(self) -> DispenseLine:
        return DispenseLine(id=self.id, quantity=self.quantity)


class DispenseResponse(BaseModel):
    status: Literal["success"] = "success"
    dispensed: List[DispenseLineIn]


# ---------------- STOCK ----------------

class StockOut(BaseModel):
    id: str
    stock: int


class StockUpdateRequest(BaseModel):
    """
    Add-or-restock body. Only `id` and `quantity` are always needed; the rest
    matter when `id` is new, and they are only type-checked then: a bad name,
    category, price or image on a new item is reported as missing data rather
    than a schema error, and is ignored on a restock.
    """
    id: Optional[str] = None
    name: Any = None
    category: Any = None
    price: Any = None
    quantity: Optional[Union[StrictInt, StrictFloat]] = None
    image: Any = None

    def fields(self) -> dict:
        return self.model_dump(exclude={"id", "quantity"}, exclude_none=True)


class UpsertResponse(BaseModel):
    status: Literal["deleted", "restocked", "added"]
    medicine: MedicineRecord


# ---------------- ESP ----------------

class FlushResponse(BaseModel):
    status: Literal["flushed"] = "flushed"


# ---------------- HEALTH ----------------

class HealthOut(BaseModel):
    ok: bool = True
    medicines: int
    dispense_pending: int
    restock_pending: int
    mqtt: Literal["disabled", "connected", "disconnected"]
