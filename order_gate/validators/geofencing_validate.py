"""geofencingValidate: the gathered position lies inside a delivery zone."""

import logging
from typing import Any

from order_gate.core.config import OUTSIDE_CITY_REASONS
from order_gate.core.logging_utils import sanitize_coordinates, sanitize_customer_id
from order_gate.domain.cache import geofencing_key
from order_gate.domain.models import (
    GeofencingData,
    LocationCoordinates,
    ValidatorContext,
    ValidatorOptions,
    ValidatorResult,
)
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.validators.base import (
    ValidationServices,
    allowed,
    blocked,
    envelope_error,
    failed_with_error,
    log_cache_hit,
)

logger = logging.getLogger(__name__)

NAME = ValidatorName.GEOFENCING_VALIDATE


def _coordinates_from(context: ValidatorContext) -> LocationCoordinates | None:
    raw: Any = context.data.get(ValidatorName.GEOLOCATION_GATHER.value)
    if raw is None:
        return None
    if isinstance(raw, LocationCoordinates):
        return raw
    return LocationCoordinates.model_validate(raw)


async def validate_geofencing(
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    try:
        coordinates = _coordinates_from(context)
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    if coordinates is None:
        return blocked(
            ValidationState.ERROR,
            "GPS coordinates not available. Run geoLocationGather first.",
        )

    key = geofencing_key(coordinates.latitude, coordinates.longitude)
    if options.reads_cache:
        cached = services.cache.get(key)
        if cached is not None:
            log_cache_hit(NAME, context.customer_id)
            return allowed(cached)

    try:
        envelope = await services.backend.validate_delivery_zone(
            coordinates.latitude,
            coordinates.longitude,
            timeout=options.timeout_seconds,
        )
        if not envelope.get("success"):
            return blocked(
                ValidationState.ERROR,
                envelope_error(envelope, "Failed to validate delivery zone"),
            )
        zone = GeofencingData.model_validate(envelope.get("data") or {})
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    if envelope.get("withinDeliveryZone"):
        if options.writes_cache:
            services.cache.set(key, zone)
        return allowed(zone)

    outside_city = (zone.reason or "") in OUTSIDE_CITY_REASONS
    logger.info(
        f"Position {sanitize_coordinates(coordinates.latitude, coordinates.longitude)} "
        f"outside delivery area (reason={zone.reason})",
        extra={
            "validator": NAME.value,
            "customer_id": sanitize_customer_id(context.customer_id),
        },
    )
    if outside_city:
        return blocked(
            ValidationState.OUTSIDE_CITY,
            zone.message or "Outside city boundaries",
            data=zone,
        )
    return blocked(
        ValidationState.OUTSIDE_ZONE,
        zone.message or "Outside delivery zone",
        data=zone,
    )
