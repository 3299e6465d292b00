"""restaurantStatus: the restaurant is taking orders.

A closed restaurant still lets a customer through when they have orders in
flight, so they can follow them. The backend status is shared by all
customers and cached; the active-order decision is made per call.
"""

from typing import Optional

from order_gate.domain.cache import restaurant_status_key
from order_gate.domain.models import (
    ActiveOrder,
    RestaurantStatusData,
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


NAME = ValidatorName.RESTAURANT_STATUS


def _decide(
    status: RestaurantStatusData, caller_orders: Optional[list[ActiveOrder]]
) -> ValidatorResult:
    if status.is_open:
        return allowed(status)

    active_orders = caller_orders if caller_orders is not None else status.active_orders
    if active_orders:
        return ValidatorResult(
            passed=True,
            state=ValidationState.RESTAURANT_CLOSED_ACTIVE_ORDERS,
            data=status.model_copy(update={"active_orders": list(active_orders)}),
        )

    return blocked(
        ValidationState.RESTAURANT_CLOSED,
        status.message or "Restaurant is currently closed",
        data=status,
    )


async def validate_restaurant_status(
    context: ValidatorContext,
    options: ValidatorOptions,
    services: ValidationServices,
) -> ValidatorResult:
    key = restaurant_status_key()

    if options.reads_cache:
        cached = services.cache.get(key)
        if cached is not None:
            log_cache_hit(NAME, context.customer_id)
            return _decide(cached, context.active_orders)

    try:
        envelope = await services.backend.get_restaurant_status(
            timeout=options.timeout_seconds
        )
        if not envelope.get("success") or not envelope.get("data"):
            return blocked(
                ValidationState.ERROR,
                envelope_error(envelope, "Failed to fetch restaurant status"),
            )
        status = RestaurantStatusData.model_validate(envelope["data"])
    except Exception as e:
        return failed_with_error(NAME, context.customer_id, e)

    result = _decide(status, context.active_orders)
    if result.passed and options.writes_cache:
        services.cache.set(key, status)
    return result
