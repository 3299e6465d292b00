"""Validator functions and their dispatch.

Every validator has the signature
``async (context, options, services) -> ValidatorResult`` and never raises:
collaborator failures come back as the ``error`` state.
"""

from order_gate.domain.models import ValidatorContext, ValidatorOptions, ValidatorResult
from order_gate.domain.states import ValidatorName
from order_gate.validators.base import ValidationServices
from order_gate.validators.customer_exists import validate_customer_exists
from order_gate.validators.customer_status import validate_customer_status
from order_gate.validators.geofencing_validate import validate_geofencing
from order_gate.validators.geolocation_gather import validate_geolocation_gather
from order_gate.validators.geolocation_support import validate_geolocation_support
from order_gate.validators.restaurant_status import validate_restaurant_status

CACHEABLE_VALIDATORS = frozenset(
    {
        ValidatorName.CUSTOMER_EXISTS,
        ValidatorName.CUSTOMER_STATUS,
        ValidatorName.RESTAURANT_STATUS,
        ValidatorName.GEOFENCING_VALIDATE,
    }
)


async def run_validator(
    name: ValidatorName,
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    match ValidatorName(name):
        case ValidatorName.CUSTOMER_EXISTS:
            return await validate_customer_exists(context, options, services)
        case ValidatorName.CUSTOMER_STATUS:
            return await validate_customer_status(context, options, services)
        case ValidatorName.RESTAURANT_STATUS:
            return await validate_restaurant_status(context, options, services)
        case ValidatorName.GEOLOCATION_SUPPORT:
            return await validate_geolocation_support(context, options, services)
        case ValidatorName.GEOLOCATION_GATHER:
            return await validate_geolocation_gather(context, options, services)
        case ValidatorName.GEOFENCING_VALIDATE:
            return await validate_geofencing(context, options, services)


__all__ = [
    "CACHEABLE_VALIDATORS",
    "ValidationServices",
    "run_validator",
    "validate_customer_exists",
    "validate_customer_status",
    "validate_geofencing",
    "validate_geolocation_gather",
    "validate_geolocation_support",
    "validate_restaurant_status",
]
