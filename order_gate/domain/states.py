"""
Validation outcome registry.

Single source of truth for the closed set of validation states, whether
each one blocks the order flow, and the user-facing message shown for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationState(str, Enum):
    """Outcome of a validator or of a whole pipeline run."""

    IDLE = "idle"
    LOADING = "loading"
    ALLOWED = "allowed"
    CUSTOMER_NOT_FOUND = "customer_not_found"
    CUSTOMER_DISABLED = "customer_disabled"
    RESTAURANT_CLOSED = "restaurant_closed"
    RESTAURANT_CLOSED_ACTIVE_ORDERS = "restaurant_closed_active_orders"
    NO_GEOLOCATION_SUPPORT = "no_geolocation_support"
    NO_LOCATION_PERMISSION = "no_location_permission"
    OUTSIDE_CITY = "outside_city"
    OUTSIDE_ZONE = "outside_zone"
    ERROR = "error"


class PipelinePhase(str, Enum):
    """Externally observable phase of a pipeline run."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUCCESS = "success"
    FAILED = "failed"


class ValidatorName(str, Enum):
    """Closed set of validators, declared in canonical execution order."""

    CUSTOMER_EXISTS = "customerExists"
    CUSTOMER_STATUS = "customerStatus"
    RESTAURANT_STATUS = "restaurantStatus"
    GEOLOCATION_SUPPORT = "geoLocationSupport"
    GEOLOCATION_GATHER = "geoLocationGather"
    GEOFENCING_VALIDATE = "geofencingValidate"


@dataclass(frozen=True)
class StateSpec:
    """Specification for a single validation state."""

    state: ValidationState
    message: str  # User-facing explanation
    blocking: bool  # Stops the order flow
    success_like: bool  # Lets the pipeline advance


_STATE_SPECS: dict[ValidationState, StateSpec] = {
    spec.state: spec
    for spec in (
        StateSpec(ValidationState.IDLE, "", False, False),
        StateSpec(ValidationState.LOADING, "Validating...", False, False),
        StateSpec(ValidationState.ALLOWED, "", False, True),
        StateSpec(
            ValidationState.CUSTOMER_NOT_FOUND,
            "Customer not found. Please check your link.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.CUSTOMER_DISABLED,
            "Your account has been disabled. Please contact support.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.RESTAURANT_CLOSED,
            "We are currently closed. Please check back later.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.RESTAURANT_CLOSED_ACTIVE_ORDERS,
            "We are closed for new orders, but your active order is being processed.",
            False,
            True,
        ),
        StateSpec(
            ValidationState.NO_GEOLOCATION_SUPPORT,
            "Your browser does not support location services.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.NO_LOCATION_PERMISSION,
            "Please enable location permission to continue.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.OUTSIDE_CITY,
            "We do not currently deliver to your city.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.OUTSIDE_ZONE,
            "Your location is outside our delivery zone.",
            True,
            False,
        ),
        StateSpec(
            ValidationState.ERROR,
            "An unexpected error occurred. Please try again.",
            True,
            False,
        ),
    )
}


def get_state_spec(state: ValidationState) -> StateSpec:
    return _STATE_SPECS[ValidationState(state)]


def error_message_for(state: ValidationState) -> str:
    """User-facing message for a state."""
    return get_state_spec(state).message


def is_success_state(state: ValidationState) -> bool:
    return get_state_spec(state).success_like


def should_block_progress(state: ValidationState) -> bool:
    return get_state_spec(state).blocking


BLOCKING_STATES = frozenset(s for s, spec in _STATE_SPECS.items() if spec.blocking)
SUCCESS_STATES = frozenset(s for s, spec in _STATE_SPECS.items() if spec.success_like)
