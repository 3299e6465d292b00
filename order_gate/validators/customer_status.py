"""customerStatus: the customer's account may place orders."""

from order_gate.domain.cache import customer_status_key
from order_gate.domain.models import ValidatorContext, ValidatorOptions, ValidatorResult
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.validators.base import (
    ValidationServices,
    allowed,
    blocked,
    envelope_error,
    failed_with_error,
    log_cache_hit,
)


NAME = ValidatorName.CUSTOMER_STATUS


async def validate_customer_status(
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    key = customer_status_key(context.customer_id)

    if options.reads_cache:
        cached = services.cache.get(key)
        if cached is not None:
            log_cache_hit(NAME, context.customer_id)
            return allowed(cached)

    try:
        envelope = await services.backend.get_customer_status(
            context.customer_id, timeout=options.timeout_seconds
        )
        if not envelope.get("success"):
            return blocked(
                ValidationState.ERROR,
                envelope_error(envelope, "Failed to check customer status"),
            )
        status = envelope.get("data") or {}
        if not isinstance(status, dict):
            raise ValueError("Customer status payload is not an object")
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    if status.get("canOrder") is not True:
        return blocked(ValidationState.CUSTOMER_DISABLED, "Customer account is disabled")

    if options.writes_cache:
        services.cache.set(key, status)
    return allowed(status)
