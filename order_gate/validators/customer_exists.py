"""customerExists: the customer referenced by the link exists in the backend."""

from order_gate.domain.cache import customer_exists_key
from order_gate.domain.models import CustomerData, ValidatorContext, ValidatorOptions, ValidatorResult
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.validators.base import (
    ValidationServices,
    allowed,
    blocked,
    envelope_error,
    failed_with_error,
    log_cache_hit,
)


NAME = ValidatorName.CUSTOMER_EXISTS


async def validate_customer_exists(
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    key = customer_exists_key(context.customer_id)

    if options.reads_cache:
        cached = services.cache.get(key)
        if cached is not None:
            log_cache_hit(NAME, context.customer_id)
            return allowed(cached)

    try:
        envelope = await services.backend.get_customer(
            context.customer_id, timeout=options.timeout_seconds
        )
        if not envelope.get("success") or not envelope.get("data"):
            return blocked(
                ValidationState.CUSTOMER_NOT_FOUND,
                envelope_error(envelope, "Customer not found"),
            )
        payload = CustomerData(customer=envelope["data"])
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    if options.writes_cache:
        services.cache.set(key, payload)
    return allowed(payload)
