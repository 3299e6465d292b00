"""Shared plumbing for validator functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from order_gate.core.exceptions import BaseError
from order_gate.core.logging_utils import sanitize_customer_id
from order_gate.domain.cache import TTLCache
from order_gate.domain.models import ValidatorResult
from order_gate.domain.states import ValidationState, ValidatorName
from order_gate.ports.backend_port import BackendPort
from order_gate.ports.geolocation_port import GeolocationPort

logger = logging.getLogger(__name__)


@dataclass
class ValidationServices:
    """Collaborators injected into every validator call."""

    backend: BackendPort
    geolocation: GeolocationPort
    cache: TTLCache


def allowed(data: Any = None) -> ValidatorResult:
    return ValidatorResult(passed=True, state=ValidationState.ALLOWED, data=data)


def blocked(state: ValidationState, error: str, data: Any = None) -> ValidatorResult:
    return ValidatorResult(passed=False, state=state, data=data, error=error)


def describe_failure(exc: Exception) -> str:
    """Human-readable text for an exception raised by a collaborator."""
    if isinstance(exc, BaseError):
        return exc.details.get("detail") or exc.message
    return str(exc) or type(exc).__name__


def failed_with_error(
    name: ValidatorName, customer_id: str, exc: Exception
) -> ValidatorResult:
    """Convert an unexpected exception into the generic ``error`` state."""
    message = describe_failure(exc)
    logger.warning(
        f"Validator {name.value} failed: {message}",
        extra={
            "validator": name.value,
            "customer_id": sanitize_customer_id(customer_id),
            "validation_state": ValidationState.ERROR.value,
        },
        exc_info=not isinstance(exc, BaseError),
    )
    return blocked(ValidationState.ERROR, message)


def envelope_error(envelope: dict[str, Any], default: str) -> str:
    """Message from a ``{success: false, error: ...}`` envelope."""
    error: Optional[Any] = envelope.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if isinstance(error, str) and error.strip():
        return error
    return default


def log_cache_hit(name: ValidatorName, customer_id: str) -> None:
    logger.debug(
        f"Cache hit for {name.value}",
        extra={
            "validator": name.value,
            "customer_id": sanitize_customer_id(customer_id),
            "cache_hit": True,
        },
    )
