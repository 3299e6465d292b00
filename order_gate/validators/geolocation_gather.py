"""geoLocationGather: obtain the device's current position."""

import logging

from order_gate.core.config import GEOLOCATION_MAXIMUM_AGE_SECONDS
from order_gate.core.logging_utils import sanitize_coordinates, sanitize_customer_id
from order_gate.domain.models import (
    LocationCoordinates,
    ValidatorContext,
    ValidatorOptions,
    ValidatorResult,
)
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.ports.geolocation_port import PositionError, PositionErrorCode, PositionOptions
from order_gate.validators.base import ValidationServices, allowed, blocked, failed_with_error

logger = logging.getLogger(__name__)

NAME = ValidatorName.GEOLOCATION_GATHER

POSITION_ERROR_MESSAGES = {
    PositionErrorCode.PERMISSION_DENIED: "Location permission denied",
    PositionErrorCode.POSITION_UNAVAILABLE: "Location information unavailable",
    PositionErrorCode.TIMEOUT: "Location request timed out",
}


async def validate_geolocation_gather(
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    request = PositionOptions(
        enable_high_accuracy=options.high_accuracy,
        timeout_seconds=options.timeout_seconds,
        maximum_age_seconds=GEOLOCATION_MAXIMUM_AGE_SECONDS,
    )

    try:
        position = await services.geolocation.get_current_position(request)
        coordinates = LocationCoordinates(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy=position.accuracy,
        )
    except PositionError as e:
        logger.info(
            f"Position unavailable: {e.code.value}",
            extra={
                "validator": NAME.value,
                "customer_id": sanitize_customer_id(context.customer_id),
            },
        )
        return blocked(
            ValidationState.NO_LOCATION_PERMISSION, POSITION_ERROR_MESSAGES[e.code]
        )
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    logger.debug(
        f"Position acquired at {sanitize_coordinates(coordinates.latitude, coordinates.longitude)}",
        extra={"validator": NAME.value},
    )
    return allowed(coordinates)
