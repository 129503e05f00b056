import os

# Avant l'import de l'app: pas de Redis réel, pas de Supabase réel
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient

from reservation.app import app as fastapi_app
from reservation.catalog import Catalog, Room, Seminar, reset_catalog
from reservation.estimate.store import store as estimate_store
from reservation.orders import repository as orders_repository

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Supabase jamais contacté: catalogue embarqué, commandes en mémoire
@pytest.fixture(autouse=True)
def _isolate_state(monkeypatch):
    monkeypatch.setattr("reservation.infra.supabase_client.is_configured", lambda: False)
    reset_catalog()
    estimate_store.clear()
    orders_repository.clear_memory_orders()
    yield
    reset_catalog()
    estimate_store.clear()
    orders_repository.clear_memory_orders()

@pytest.fixture
def room() -> Room:
    return Room(
        id="r1", name="Test Room", room_type="Twin", bed_type="Twin", area="30m2", capacity=2,
        weekday_price=100000, weekend_price=150000,
    )

@pytest.fixture
def seminar() -> Seminar:
    return Seminar(id="s1", name="Test Hall", location="1F", area="100m2", capacity=40, price=100000)

@pytest.fixture
def catalog(room, seminar) -> Catalog:
    return Catalog([room, seminar])

# Lundi 2024-01-01
@pytest.fixture
def monday() -> date:
    return date(2024, 1, 1)
