from fastapi import APIRouter, Depends

from .deps import get_mqtt, get_store
from .. import schemas
from ..command_queue import DISPENSE, RESTOCK
from ..mqtt import MqttBus
from ..usecases.inventory import InventoryStore

router = APIRouter(tags=["health"])


@router.get("/health", response_model=schemas.HealthOut)
def health(store: InventoryStore = Depends(get_store), mqtt: MqttBus = Depends(get_mqtt)):
    pending = store.queues.snapshot()
    if not mqtt.enabled:
        mqtt_state = "disabled"
    else:
        mqtt_state = "connected" if mqtt.connected else "disconnected"
    return schemas.HealthOut(
        medicines=len(store),
        dispense_pending=pending[DISPENSE],
        restock_pending=pending[RESTOCK],
        mqtt=mqtt_state,
    )
