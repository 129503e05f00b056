from unittest.mock import MagicMock

from reservation.catalog import Room, Seminar, get_catalog, product_from_record, reset_catalog
from reservation.catalog import repository as catalog_repository


def test_bundled_catalog_when_supabase_not_configured():
    catalog = get_catalog()
    assert len(catalog.rooms) == 4
    assert len(catalog.seminars) == 7
    twin = catalog.find("superior-twin")
    assert (twin.weekday_price, twin.weekend_price) == (77000, 99000)
    assert catalog.find("Grand Ballroom").price == 1386000


def test_catalog_is_loaded_once(monkeypatch):
    calls = {"n": 0}
    original = catalog_repository.load_catalog

    def counting():
        calls["n"] += 1
        return original()

    monkeypatch.setattr(catalog_repository, "load_catalog", counting)
    reset_catalog()
    assert catalog_repository.get_catalog() is catalog_repository.get_catalog()
    assert calls["n"] == 1


def test_supabase_records_take_precedence(monkeypatch):
    client = MagicMock()
    client.table.return_value.select.return_value.execute.return_value = MagicMock(data=[
        {"name": "Remote Room", "weekdayPrice": 50000, "weekendPrice": 70000},
        {"name": "Remote Hall", "price": 200000, "maxPeople": 30},
    ])
    monkeypatch.setattr("reservation.infra.supabase_client.is_configured", lambda: True)
    monkeypatch.setattr("reservation.infra.supabase_client.get_supabase", lambda: client)

    catalog = catalog_repository.load_catalog()
    assert [r.name for r in catalog.rooms] == ["Remote Room"]
    assert [s.name for s in catalog.seminars] == ["Remote Hall"]
    client.table.assert_called_with("products")


def test_supabase_error_falls_back_to_bundled(monkeypatch):
    def boom():
        raise RuntimeError("down")

    monkeypatch.setattr("reservation.infra.supabase_client.is_configured", lambda: True)
    monkeypatch.setattr("reservation.infra.supabase_client.get_supabase", boom)
    assert len(catalog_repository.load_catalog()) == 11


def test_product_from_record_infers_type_and_skips_nameless():
    room = product_from_record({"name": "R", "weekdayPrice": 1000})
    seminar = product_from_record({"name": "S", "price": "2000.0", "capacity": 10})
    assert isinstance(room, Room) and room.weekend_price == 1000 and room.id == "R"
    assert isinstance(seminar, Seminar) and seminar.price == 2000 and seminar.capacity == 10
    assert product_from_record({"price": 10}) is None
    assert product_from_record({"name": "X", "type": "spa"}) is None
