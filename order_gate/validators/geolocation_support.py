"""geoLocationSupport: the device exposes a location capability."""

from order_gate.domain.models import ValidatorContext, ValidatorOptions, ValidatorResult
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.validators.base import ValidationServices, allowed, blocked, failed_with_error

NAME = ValidatorName.GEOLOCATION_SUPPORT


async def validate_geolocation_support(
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    try:
        supported = services.geolocation.is_supported()
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    if not supported:
        return blocked(
            ValidationState.NO_GEOLOCATION_SUPPORT,
            "Browser does not support geolocation",
        )
    return allowed()
