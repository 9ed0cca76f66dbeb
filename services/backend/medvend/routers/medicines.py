from typing import List

from fastapi import APIRouter, Depends, HTTPException

from .deps import get_store
from .. import schemas
from ..errors import InsufficientStock, InvalidInput, InvalidNewItem, NotFound, PersistenceError
from ..models import MedicineRecord
from ..usecases.inventory import InventoryStore

router = APIRouter(tags=["medicines"])

NEW_ITEM_MISSING_MSG = "Missing data for new item (name, category, price, image required)."


def _not_saved(e: PersistenceError) -> HTTPException:
    return HTTPException(status_code=500, detail=f"Change applied but not saved: {e}")


@router.get("/medicines", response_model=List[MedicineRecord])
def list_medicines(store: InventoryStore = Depends(get_store)):
    return store.list_medicines()


@router.get("/categories", response_model=List[str])
def categories(store: InventoryStore = Depends(get_store)):
    return store.categories()


@router.post("/dispense", response_model=schemas.DispenseResponse)
def dispense(items: List[schemas.DispenseLineIn], store: InventoryStore = Depends(get_store)):
    try:
        store.commit_dispense([i.to_line() for i in items])
    except NotFound as e:
        raise HTTPException(status_code=404, detail=f"Item {e.item_id} not found")
    except InsufficientStock as e:
        raise HTTPException(status_code=400, detail=f"Not enough stock for {e.item_id}")
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise _not_saved(e)

    return schemas.DispenseResponse(dispensed=items)


@router.get("/stock/{item_id}", response_model=schemas.StockOut)
def stock(item_id: str, store: InventoryStore = Depends(get_store)):
    try:
        return schemas.StockOut(id=item_id, stock=store.get_stock(item_id))
    except NotFound:
        raise HTTPException(status_code=404, detail="Not found")


@router.post("/stock/update", response_model=schemas.UpsertResponse)
def update_stock(req: schemas.StockUpdateRequest, store: InventoryStore = Depends(get_store)):
    if not req.id or req.quantity is None:
        raise HTTPException(status_code=400, detail="ID and quantity are required.")

    try:
        out = store.upsert(req.id, req.fields(), req.quantity)
    except InvalidNewItem:
        raise HTTPException(status_code=400, detail=NEW_ITEM_MISSING_MSG)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise _not_saved(e)

    return schemas.UpsertResponse(status=out.status, medicine=out.medicine)
