from __future__ import annotations

from pathlib import Path

import pytest

from dealership_manager.app_services import AppServices
from dealership_manager.db.connection import get_connection
from dealership_manager.db.migrations import apply_migrations


@pytest.fixture(autouse=True)
def app_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("DEALERSHIP_MANAGER_HOME", str(home))
    return home


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "dealership.db"


@pytest.fixture
def connection(db_path: Path):
    conn = get_connection(db_path)
    apply_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def services(connection, tmp_path: Path) -> AppServices:
    return AppServices.build(connection, config_path=tmp_path / "config.json")


@pytest.fixture
def vehicle(services: AppServices):
    return services.inventory.create_item(
        {
            "brand": "Toyota",
            "model": "Corolla",
            "year": 2021,
            "color": "White",
            "purchase_price": 28000,
            "market_value": 31000,
            "selling_price": 32000,
            "vin": "JTD123456789",
            "license_plate": "CAB-1234",
            "engine_no": "1NZ-998877",
        }
    )


@pytest.fixture
def customer_data() -> dict[str, str]:
    return {
        "name": "Jane Perera",
        "contact": "+94-77-123-4567",
        "address": "12 Lake Road, Colombo",
        "nic": "199012345678",
    }


@pytest.fixture
def scenario_pricing() -> dict[str, int]:
    return {"vehicle_price": 32000, "taxes": 1600, "fees": 400, "discount": 500}


@pytest.fixture
def reservation(services: AppServices, vehicle, customer_data, scenario_pricing):
    return services.transactions.create_reservation(
        vehicle.id, customer_data, scenario_pricing
    )
