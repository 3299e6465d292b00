"""Map a failed validation outcome to the error page the customer is sent to."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from order_gate.domain.models import PipelineState, dump_payload
from order_gate.domain.states import PipelinePhase, ValidationState

_CUSTOMER_ERROR_PAGES: dict[ValidationState, str] = {
    ValidationState.CUSTOMER_DISABLED: "customer-disabled",
    ValidationState.RESTAURANT_CLOSED: "restaurant-closed",
    ValidationState.RESTAURANT_CLOSED_ACTIVE_ORDERS: "restaurant-closed-with-orders",
    ValidationState.NO_GEOLOCATION_SUPPORT: "no-geolocation-support",
    ValidationState.NO_LOCATION_PERMISSION: "no-location-permission",
    ValidationState.OUTSIDE_CITY: "outside-city",
    ValidationState.OUTSIDE_ZONE: "outside-zone",
    ValidationState.ERROR: "generic",
}

CUSTOMER_NOT_FOUND_ROUTE = "/error/customer-not-found"


class RouteDescriptor(BaseModel):
    """Where to navigate and what to hand the destination page."""

    path: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)


def error_route_for(
    state: Optional[ValidationState], customer_id: str
) -> Optional[str]:
    """Error page path for a validation state, or None when nothing blocks.

    ``customer_not_found`` has no customer-scoped page: the id in the link
    is the thing that is wrong.
    """
    if state is None:
        return None
    state = ValidationState(state)
    if state == ValidationState.CUSTOMER_NOT_FOUND:
        return CUSTOMER_NOT_FOUND_ROUTE
    page = _CUSTOMER_ERROR_PAGES.get(state)
    if page is None:
        return None
    return f"/{customer_id}/error/{page}"


def build_navigation_payload(
    state: PipelineState, extras: Optional[dict[str, Any]] = None
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "validationState": state.validation_state.value if state.validation_state else None,
        "error": state.error,
        "failedStep": state.failed_step,
        "completedSteps": list(state.completed_steps),
    }
    payload.update(dump_payload(state.data))
    if extras:
        payload.update(extras)
    return payload


def resolve_redirect(
    state: PipelineState,
    customer_id: str,
    extras: Optional[dict[str, Any]] = None,
) -> RouteDescriptor:
    """Route descriptor for a pipeline state; only a failed run redirects."""
    if state.phase != PipelinePhase.FAILED:
        return RouteDescriptor()
    path = error_route_for(state.validation_state, customer_id)
    if path is None:
        return RouteDescriptor()
    return RouteDescriptor(path=path, payload=build_navigation_payload(state, extras))


# =============================================================================
# Error page navigation helpers
# =============================================================================


def retry_route(customer_id: Optional[str]) -> str:
    """Where an error page's "try again" button goes."""
    return f"/{customer_id}" if customer_id else "/"


def order_status_route(customer_id: str, order_id: str) -> str:
    return f"/{customer_id}/order-status/{order_id}"


def order_history_route(customer_id: str) -> str:
    return f"/{customer_id}/orders"
