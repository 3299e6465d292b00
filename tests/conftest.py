from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from order_gate.domain.cache import TTLCache
from order_gate.ports.backend_port import BackendPort
from order_gate.ports.geolocation_port import (
    GeolocationPort,
    Position,
    PositionError,
    PositionErrorCode,
    PositionOptions,
)
from order_gate.validators import ValidationServices

CUSTOMER_ID = "cust-12345"

CUSTOMER_OK = {"success": True, "data": {"id": CUSTOMER_ID, "name": "Aigerim", "phone": "+77010000000"}}
CUSTOMER_MISSING = {"success": False, "error": "Customer not found"}
STATUS_OK = {"success": True, "data": {"canOrder": True}}
STATUS_DISABLED = {"success": True, "data": {"canOrder": False}}
RESTAURANT_OPEN = {"success": True, "data": {"isOpen": True, "message": "We are open"}}
RESTAURANT_CLOSED = {
    "success": True,
    "data": {
        "isOpen": False,
        "message": "Closed until 10:00",
        "nextOpening": {"day": "Tuesday", "time": "10:00", "hoursUntil": 9, "minutesUntil": 30},
    },
}
ACTIVE_ORDER = {"id": "ord-1", "status": "preparing", "createdAt": "2026-10-16T20:15:00Z", "orderNumber": "A-17"}
RESTAURANT_CLOSED_WITH_ORDERS = {
    "success": True,
    "data": {**RESTAURANT_CLOSED["data"], "activeOrders": [ACTIVE_ORDER]},
}
ZONE_OK = {
    "success": True,
    "withinDeliveryZone": True,
    "data": {
        "reason": "WITHIN_ZONE",
        "message": "Delivery available",
        "city": {"id": "city-1", "name": "Almaty"},
        "zone": {"id": "zone-1", "name": "Center", "description": "Downtown"},
    },
}
ZONE_OUTSIDE = {
    "success": True,
    "withinDeliveryZone": False,
    "data": {
        "reason": "OUTSIDE_ZONE",
        "message": "We do not deliver to this address yet",
        "city": {"id": "city-1", "name": "Almaty"},
        "zone": None,
    },
}
CITY_OUTSIDE = {
    "success": True,
    "withinDeliveryZone": False,
    "data": {"reason": "CITY_NOT_FOUND", "message": "", "city": None, "zone": None},
}

DEFAULT_POSITION = Position(latitude=43.23885, longitude=76.88975, accuracy=12.0)


class ManualClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend(BackendPort):  # pragma: no cover
    """Scripted backend; ``gates`` hold a call until the event is set."""

    def __init__(
        self,
        customer: dict = CUSTOMER_OK,
        customer_status: dict = STATUS_OK,
        restaurant: dict = RESTAURANT_OPEN,
        zone: dict = ZONE_OK,
    ) -> None:
        self.responses: dict[str, dict] = {
            "get_customer": customer,
            "get_customer_status": customer_status,
            "get_restaurant_status": restaurant,
            "validate_delivery_zone": zone,
        }
        self.errors: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []
        self.timeouts: dict[str, float] = {}
        self.zone_requests: list[tuple[float, float]] = []

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def _respond(self, name: str, timeout: float) -> dict[str, Any]:
        self.calls.append(name)
        self.timeouts[name] = timeout
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.errors:
            raise self.errors[name]
        return self.responses[name]

    async def get_customer(self, customer_id: str, *, timeout: float) -> dict[str, Any]:
        return await self._respond("get_customer", timeout)

    async def get_customer_status(self, customer_id: str, *, timeout: float) -> dict[str, Any]:
        return await self._respond("get_customer_status", timeout)

    async def get_restaurant_status(self, *, timeout: float) -> dict[str, Any]:
        return await self._respond("get_restaurant_status", timeout)

    async def validate_delivery_zone(
        self, latitude: float, longitude: float, *, timeout: float
    ) -> dict[str, Any]:
        self.zone_requests.append((latitude, longitude))
        return await self._respond("validate_delivery_zone", timeout)


class FakeGeolocation(GeolocationPort):  # pragma: no cover
    def __init__(
        self,
        position: Position = DEFAULT_POSITION,
        error: Optional[PositionErrorCode] = None,
        supported: bool = True,
    ) -> None:
        self.position = position
        self.error = error
        self.supported = supported
        self.requests: list[PositionOptions] = []

    def is_supported(self) -> bool:
        return self.supported

    async def get_current_position(self, options: PositionOptions) -> Position:
        self.requests.append(options)
        if self.error is not None:
            raise PositionError(self.error)
        return self.position


async def wait_for_calls(backend: FakeBackend, name: str, count: int = 1) -> None:
    for _ in range(200):
        if backend.count(name) >= count:
            return
        await asyncio.sleep(0.005)
    raise AssertionError(f"{name} was not called {count} time(s)")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> TTLCache:
    return TTLCache(default_ttl_seconds=300, clock=clock)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def geolocation() -> FakeGeolocation:
    return FakeGeolocation()


@pytest.fixture
def services(backend: FakeBackend, geolocation: FakeGeolocation, cache: TTLCache) -> ValidationServices:
    return ValidationServices(backend=backend, geolocation=geolocation, cache=cache)
