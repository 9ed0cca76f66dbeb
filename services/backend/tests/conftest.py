import json

import pytest
from fastapi.testclient import TestClient

from medvend.command_queue import CommandQueues
from medvend.config import Settings
from medvend.errors import PersistenceError
from medvend.main import create_app
from medvend.models import MedicineRecord
from medvend.usecases.inventory import InventoryStore

SEED = [
    {"id": "A", "name": "Paracetamol", "category": "Pain Relief", "price": 4.5, "stock": 3, "image": "https://img/a.png"},
    {"id": "B", "name": "Cetirizine", "category": "Allergy", "price": 6, "stock": 1, "image": "https://img/b.png"},
    {"id": "C", "name": "Ibuprofen", "category": "Pain Relief", "price": 5.25, "stock": 10, "image": "https://img/c.png"},
]


class FakeGateway:
    """In-memory stand-in for the JSON catalog file."""

    def __init__(self, records=None, fail=False):
        self.records = records if records is not None else []
        self.fail = fail
        self.saves = []

    def load(self):
        return [MedicineRecord(**r) for r in self.records]

    def save(self, records):
        if self.fail:
            raise PersistenceError("disk full")
        self.saves.append([r.model_dump() for r in records])


@pytest.fixture
def gateway():
    return FakeGateway(SEED)


@pytest.fixture
def queues():
    return CommandQueues()


@pytest.fixture
def store(gateway, queues):
    s = InventoryStore(gateway, queues)
    s.load()
    return s


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "data" / "medicines.json"
    path.parent.mkdir()
    path.write_text(json.dumps(SEED))
    return path


@pytest.fixture
def client(catalog_file):
    app = create_app(Settings(catalog_path=str(catalog_file)))
    with TestClient(app) as c:
        yield c
