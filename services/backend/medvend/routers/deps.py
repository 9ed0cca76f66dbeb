from fastapi import Request

from ..command_queue import CommandQueues
from ..mqtt import MqttBus
from ..usecases.inventory import InventoryStore


def get_store(req: Request) -> InventoryStore:
    return req.app.state.store


def get_queues(req: Request) -> CommandQueues:
    return req.app.state.store.queues


def get_mqtt(req: Request) -> MqttBus:
    return req.app.state.mqtt
