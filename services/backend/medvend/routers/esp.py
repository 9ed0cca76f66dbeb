from fastapi import APIRouter, Depends, Response

from .deps import get_queues
from .. import schemas
from ..command_queue import DISPENSE, RESTOCK, CommandQueues
from ..errors import QueueEmpty

# Polled by the dispenser controller. An empty queue is 204, never an error.
router = APIRouter(prefix="/esp", tags=["esp"])


@router.get("/next")
def esp_next(queues: CommandQueues = Depends(get_queues)):
    try:
        entry = queues.dequeue_next(DISPENSE)
    except QueueEmpty:
        return Response(status_code=204)
    return entry.model_dump(mode="json")


@router.get("/store")
def esp_store(queues: CommandQueues = Depends(get_queues)):
    try:
        entry = queues.dequeue_next(RESTOCK)
    except QueueEmpty:
        return Response(status_code=204)
    return entry.model_dump(mode="json")


@router.get("/peek")
def esp_peek(queues: CommandQueues = Depends(get_queues)):
    try:
        entry = queues.peek_next(DISPENSE)
    except QueueEmpty:
        return Response(status_code=204)
    return entry.model_dump(mode="json")


@router.post("/flush", response_model=schemas.FlushResponse)
def esp_flush(queues: CommandQueues = Depends(get_queues)):
    queues.flush(DISPENSE)
    return schemas.FlushResponse()
