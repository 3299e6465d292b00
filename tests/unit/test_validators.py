"""Unit tests for the six validators and their dispatch."""

import pytest
from pydantic import ValidationError

from order_gate.core.exceptions import ExternalServiceError
from order_gate.domain.cache import (
    customer_exists_key,
    customer_status_key,
    geofencing_key,
    restaurant_status_key,
)
from order_gate.domain.models import (
    ActiveOrder,
    CustomerData,
    GeofencingData,
    LocationCoordinates,
    RestaurantStatusData,
    ValidatorContext,
    ValidatorOptions,
    ValidatorResult,
)
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.ports.geolocation_port import PositionErrorCode
from order_gate.validators import (
    run_validator,
    validate_customer_exists,
    validate_customer_status,
    validate_geofencing,
    validate_geolocation_gather,
    validate_geolocation_support,
    validate_restaurant_status,
)
from tests.conftest import (
    ACTIVE_ORDER,
    CITY_OUTSIDE,
    CUSTOMER_ID,
    CUSTOMER_MISSING,
    RESTAURANT_CLOSED,
    RESTAURANT_CLOSED_WITH_ORDERS,
    STATUS_DISABLED,
    ZONE_OUTSIDE,
)

OPTIONS = ValidatorOptions(timeout_seconds=2.0)


def _context(**data) -> ValidatorContext:
    return ValidatorContext(customer_id=CUSTOMER_ID, data=data)


def _backend_timeout() -> ExternalServiceError:
    return ExternalServiceError(
        service_name="backend",
        error_type="timeout",
        details={"detail": "GET /customers/cust-12345 timed out after 2.0s"},
    )


class TestValidatorResultInvariant:
    def test_passing_result_needs_success_state(self):
        with pytest.raises(ValidationError):
            ValidatorResult(passed=True, state=ValidationState.ERROR)

    def test_failing_result_needs_blocking_state(self):
        with pytest.raises(ValidationError):
            ValidatorResult(passed=False, state=ValidationState.ALLOWED)
        with pytest.raises(ValidationError):
            ValidatorResult(passed=False, state=ValidationState.LOADING)

    def test_closed_with_orders_passes(self):
        result = ValidatorResult(passed=True, state=ValidationState.RESTAURANT_CLOSED_ACTIVE_ORDERS)
        assert result.passed


class TestCustomerExists:
    @pytest.mark.asyncio
    async def test_found_customer_is_cached(self, services, backend, cache):
        result = await validate_customer_exists(_context(), OPTIONS, services)

        assert result.passed
        assert result.state == ValidationState.ALLOWED
        assert isinstance(result.data, CustomerData)
        assert result.data.customer["name"] == "Aigerim"
        assert cache.has(customer_exists_key(CUSTOMER_ID))
        assert backend.timeouts["get_customer"] == 2.0

        again = await validate_customer_exists(_context(), OPTIONS, services)
        assert again.passed
        assert backend.count("get_customer") == 1

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_means_not_found(self, services, backend, cache):
        backend.responses["get_customer"] = CUSTOMER_MISSING

        result = await validate_customer_exists(_context(), OPTIONS, services)

        assert not result.passed
        assert result.state == ValidationState.CUSTOMER_NOT_FOUND
        assert result.error == "Customer not found"
        assert not cache.has(customer_exists_key(CUSTOMER_ID))

    @pytest.mark.asyncio
    async def test_empty_data_means_not_found(self, services, backend):
        backend.responses["get_customer"] = {"success": True, "data": None}

        result = await validate_customer_exists(_context(), OPTIONS, services)

        assert result.state == ValidationState.CUSTOMER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_backend_failure_becomes_error_state(self, services, backend):
        backend.errors["get_customer"] = _backend_timeout()

        result = await validate_customer_exists(_context(), OPTIONS, services)

        assert not result.passed
        assert result.state == ValidationState.ERROR
        assert result.error == "GET /customers/cust-12345 timed out after 2.0s"

    @pytest.mark.asyncio
    async def test_skip_cache_neither_reads_nor_writes(self, services, backend, cache):
        options = ValidatorOptions(skip_cache=True)
        await validate_customer_exists(_context(), options, services)
        await validate_customer_exists(_context(), options, services)

        assert backend.count("get_customer") == 2
        assert cache.keys() == []

    @pytest.mark.asyncio
    async def test_refresh_cache_bypasses_read_and_writes(self, services, backend, cache):
        cache.set(customer_exists_key(CUSTOMER_ID), CustomerData(customer={"id": "stale"}))

        result = await validate_customer_exists(_context(), ValidatorOptions(refresh_cache=True), services)

        assert backend.count("get_customer") == 1
        assert result.data.customer["id"] == CUSTOMER_ID
        assert cache.get(customer_exists_key(CUSTOMER_ID)).customer["id"] == CUSTOMER_ID

    @pytest.mark.asyncio
    async def test_expired_entry_triggers_fresh_call(self, services, backend, clock):
        await validate_customer_exists(_context(), OPTIONS, services)
        clock.advance(301)
        await validate_customer_exists(_context(), OPTIONS, services)

        assert backend.count("get_customer") == 2


class TestCustomerStatus:
    @pytest.mark.asyncio
    async def test_can_order_passes_and_caches(self, services, cache):
        result = await validate_customer_status(_context(), OPTIONS, services)

        assert result.passed
        assert result.data == {"canOrder": True}
        assert cache.has(customer_status_key(CUSTOMER_ID))

    @pytest.mark.asyncio
    async def test_cannot_order_is_disabled(self, services, backend, cache):
        backend.responses["get_customer_status"] = STATUS_DISABLED

        result = await validate_customer_status(_context(), OPTIONS, services)

        assert not result.passed
        assert result.state == ValidationState.CUSTOMER_DISABLED
        assert result.error == "Customer account is disabled"
        assert not cache.has(customer_status_key(CUSTOMER_ID))

    @pytest.mark.asyncio
    async def test_missing_flag_is_disabled(self, services, backend):
        backend.responses["get_customer_status"] = {"success": True, "data": {}}

        result = await validate_customer_status(_context(), OPTIONS, services)

        assert result.state == ValidationState.CUSTOMER_DISABLED

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_is_error(self, services, backend):
        backend.responses["get_customer_status"] = {"success": False, "error": {"message": "db down"}}

        result = await validate_customer_status(_context(), OPTIONS, services)

        assert result.state == ValidationState.ERROR
        assert result.error == "db down"


class TestRestaurantStatus:
    @pytest.mark.asyncio
    async def test_open_restaurant_passes(self, services, cache):
        result = await validate_restaurant_status(_context(), OPTIONS, services)

        assert result.passed
        assert result.state == ValidationState.ALLOWED
        assert isinstance(result.data, RestaurantStatusData)
        assert result.data.is_open
        assert cache.has(restaurant_status_key())

    @pytest.mark.asyncio
    async def test_closed_without_orders_blocks_with_backend_message(self, services, backend, cache):
        backend.responses["get_restaurant_status"] = RESTAURANT_CLOSED

        result = await validate_restaurant_status(_context(), OPTIONS, services)

        assert not result.passed
        assert result.state == ValidationState.RESTAURANT_CLOSED
        assert result.error == "Closed until 10:00"
        assert result.data.next_opening.hours_until == 9
        assert not cache.has(restaurant_status_key())

    @pytest.mark.asyncio
    async def test_closed_with_backend_orders_passes(self, services, backend, cache):
        backend.responses["get_restaurant_status"] = RESTAURANT_CLOSED_WITH_ORDERS

        result = await validate_restaurant_status(_context(), OPTIONS, services)

        assert result.passed
        assert result.state == ValidationState.RESTAURANT_CLOSED_ACTIVE_ORDERS
        assert result.data.active_orders[0].order_number == "A-17"
        assert cache.has(restaurant_status_key())

    @pytest.mark.asyncio
    async def test_caller_orders_take_precedence(self, services, backend):
        backend.responses["get_restaurant_status"] = RESTAURANT_CLOSED_WITH_ORDERS
        context = ValidatorContext(customer_id=CUSTOMER_ID, active_orders=[])

        result = await validate_restaurant_status(context, OPTIONS, services)

        assert result.state == ValidationState.RESTAURANT_CLOSED

    @pytest.mark.asyncio
    async def test_cached_status_decides_per_customer(self, services, backend):
        backend.responses["get_restaurant_status"] = RESTAURANT_CLOSED
        with_orders = ValidatorContext(
            customer_id=CUSTOMER_ID, active_orders=[ActiveOrder.model_validate(ACTIVE_ORDER)]
        )
        first = await validate_restaurant_status(with_orders, OPTIONS, services)
        second = await validate_restaurant_status(
            ValidatorContext(customer_id="other-customer"), OPTIONS, services
        )

        assert first.state == ValidationState.RESTAURANT_CLOSED_ACTIVE_ORDERS
        assert second.state == ValidationState.RESTAURANT_CLOSED
        assert backend.count("get_restaurant_status") == 1

    @pytest.mark.asyncio
    async def test_missing_data_is_error(self, services, backend):
        backend.responses["get_restaurant_status"] = {"success": True}

        result = await validate_restaurant_status(_context(), OPTIONS, services)

        assert result.state == ValidationState.ERROR
        assert result.error == "Failed to fetch restaurant status"

    @pytest.mark.asyncio
    async def test_malformed_payload_is_error(self, services, backend):
        backend.responses["get_restaurant_status"] = {"success": True, "data": {"message": "no flag"}}

        result = await validate_restaurant_status(_context(), OPTIONS, services)

        assert result.state == ValidationState.ERROR


class TestGeolocationSupport:
    @pytest.mark.asyncio
    async def test_supported_device_passes_without_payload(self, services):
        result = await validate_geolocation_support(_context(), OPTIONS, services)

        assert result.passed
        assert result.data is None

    @pytest.mark.asyncio
    async def test_unsupported_device_blocks(self, services, geolocation):
        geolocation.supported = False

        result = await validate_geolocation_support(_context(), OPTIONS, services)

        assert result.state == ValidationState.NO_GEOLOCATION_SUPPORT


class TestGeolocationGather:
    @pytest.mark.asyncio
    async def test_position_becomes_coordinates(self, services, geolocation):
        options = ValidatorOptions(timeout_seconds=10.0, high_accuracy=False)

        result = await validate_geolocation_gather(_context(), options, services)

        assert result.passed
        assert result.data == LocationCoordinates(latitude=43.23885, longitude=76.88975, accuracy=12.0)
        request = geolocation.requests[0]
        assert request.timeout_seconds == 10.0
        assert request.enable_high_accuracy is False
        assert request.maximum_age_seconds == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "code, message",
        [
            (PositionErrorCode.PERMISSION_DENIED, "Location permission denied"),
            (PositionErrorCode.POSITION_UNAVAILABLE, "Location information unavailable"),
            (PositionErrorCode.TIMEOUT, "Location request timed out"),
        ],
    )
    async def test_position_errors_map_to_no_permission(self, services, geolocation, code, message):
        geolocation.error = code

        result = await validate_geolocation_gather(_context(), OPTIONS, services)

        assert not result.passed
        assert result.state == ValidationState.NO_LOCATION_PERMISSION
        assert result.error == message


class TestGeofencing:
    COORDS = LocationCoordinates(latitude=43.23885, longitude=76.88975)

    @pytest.mark.asyncio
    async def test_missing_coordinates_is_error(self, services, backend):
        result = await validate_geofencing(_context(), OPTIONS, services)

        assert result.state == ValidationState.ERROR
        assert "GPS coordinates not available" in result.error
        assert backend.count("validate_delivery_zone") == 0

    @pytest.mark.asyncio
    async def test_inside_zone_passes_and_caches_by_rounded_key(self, services, backend, cache):
        result = await validate_geofencing(_context(geoLocationGather=self.COORDS), OPTIONS, services)

        assert result.passed
        assert isinstance(result.data, GeofencingData)
        assert result.data.zone.name == "Center"
        assert backend.zone_requests == [(43.23885, 76.88975)]
        assert cache.has(geofencing_key(43.2389, 76.8898))

        nearby = LocationCoordinates(latitude=43.23887, longitude=76.88976)
        await validate_geofencing(_context(geoLocationGather=nearby), OPTIONS, services)
        assert backend.count("validate_delivery_zone") == 1

    @pytest.mark.asyncio
    async def test_accepts_plain_mapping_coordinates(self, services):
        context = _context(geoLocationGather={"latitude": 43.2, "longitude": 76.9})

        result = await validate_geofencing(context, OPTIONS, services)

        assert result.passed

    @pytest.mark.asyncio
    async def test_outside_zone_attaches_payload(self, services, backend, cache):
        backend.responses["validate_delivery_zone"] = ZONE_OUTSIDE

        result = await validate_geofencing(_context(geoLocationGather=self.COORDS), OPTIONS, services)

        assert not result.passed
        assert result.state == ValidationState.OUTSIDE_ZONE
        assert result.error == "We do not deliver to this address yet"
        assert result.data.city.name == "Almaty"
        assert cache.keys() == []

    @pytest.mark.asyncio
    async def test_city_not_found_uses_default_message(self, services, backend):
        backend.responses["validate_delivery_zone"] = CITY_OUTSIDE

        result = await validate_geofencing(_context(geoLocationGather=self.COORDS), OPTIONS, services)

        assert result.state == ValidationState.OUTSIDE_CITY
        assert result.error == "Outside city boundaries"

    @pytest.mark.asyncio
    async def test_unknown_reason_defaults_to_outside_zone(self, services, backend):
        backend.responses["validate_delivery_zone"] = {"success": True, "withinDeliveryZone": False}

        result = await validate_geofencing(_context(geoLocationGather=self.COORDS), OPTIONS, services)

        assert result.state == ValidationState.OUTSIDE_ZONE
        assert result.error == "Outside delivery zone"

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_is_error(self, services, backend):
        backend.responses["validate_delivery_zone"] = {"success": False}

        result = await validate_geofencing(_context(geoLocationGather=self.COORDS), OPTIONS, services)

        assert result.state == ValidationState.ERROR
        assert result.error == "Failed to validate delivery zone"


class TestDispatch:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", list(ValidatorName))
    async def test_every_name_dispatches(self, services, name):
        context = _context(geoLocationGather=LocationCoordinates(latitude=1.0, longitude=2.0))

        result = await run_validator(name, context, OPTIONS, services)

        assert result.passed

    @pytest.mark.asyncio
    async def test_dispatch_accepts_wire_name(self, services, backend):
        await run_validator("customerExists", _context(), OPTIONS, services)

        assert backend.calls == ["get_customer"]
