from __future__ import annotations

from datetime import date

import pytest

from dealership_manager.domain.models import (
    BodyType,
    FuelType,
    InventoryStatus,
    VehicleCondition,
)
from dealership_manager.services.errors import NotFoundError, ValidationError


def test_create_item_defaults(services) -> None:
    item = services.inventory.create_item(
        {"brand": "Mazda", "model": "Axela", "year": "2017", "color": "Soul Red"}
    )
    assert item.id is not None
    assert item.status == InventoryStatus.AVAILABLE
    assert item.condition == VehicleCondition.GOOD
    assert item.fuel_type == FuelType.GASOLINE
    assert item.body_type == BodyType.SEDAN
    assert item.currency == "LKR"


def test_create_item_with_features(services) -> None:
    item = services.inventory.create_item(
        {
            "brand": "Mitsubishi",
            "model": "Montero",
            "year": 2019,
            "color": "Black",
            "body_type": "suv",
            "fuel_type": "diesel",
            "features": "Sunroof, 4WD, ",
        }
    )
    stored = services.inventory.get_item(item.id)
    assert stored.features == ["Sunroof", "4WD"]
    assert stored.body_type == BodyType.SUV
    assert stored.fuel_type == FuelType.DIESEL


@pytest.mark.parametrize(
    "overrides",
    [
        {"brand": ""},
        {"color": " "},
        {"year": 1800},
        {"year": date.today().year + 2},
        {"purchase_price": -1},
    ],
)
def test_invalid_items(services, overrides) -> None:
    data = {"brand": "Kia", "model": "Picanto", "year": 2018, "color": "Green"}
    data.update(overrides)
    with pytest.raises(ValidationError):
        services.inventory.create_item(data)


def test_list_price_prefers_selling_price(vehicle) -> None:
    assert vehicle.list_price == 32000


def test_search_and_filters(services, vehicle) -> None:
    assert [i.id for i in services.inventory.list_items(search="corolla")] == [vehicle.id]
    assert [i.id for i in services.inventory.list_items(search="cab-1234")] == [vehicle.id]
    assert services.inventory.list_items(status=InventoryStatus.SOLD) == []
    assert services.inventory.list_items(condition=VehicleCondition.GOOD)


def test_update_and_status(services, vehicle) -> None:
    updated = services.inventory.update_item(
        vehicle.id,
        {"brand": "Toyota", "model": "Corolla Axio", "year": 2021, "color": "Silver"},
    )
    assert updated.model == "Corolla Axio"
    services.inventory.set_status(vehicle.id, InventoryStatus.MAINTENANCE)
    assert services.inventory.get_status_counts()[InventoryStatus.MAINTENANCE] == 1


def test_delete_item_in_use_is_rejected(services, vehicle, reservation) -> None:
    with pytest.raises(ValidationError):
        services.inventory.delete_item(vehicle.id)


def test_delete_item(services, vehicle) -> None:
    assert services.inventory.delete_item(vehicle.id)
    with pytest.raises(NotFoundError):
        services.inventory.get_item(vehicle.id)
