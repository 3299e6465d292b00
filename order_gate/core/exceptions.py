"""Custom exception hierarchy for order-gate.

All exceptions inherit from BaseError and provide structured error information
compatible with RFC 7807 Problem Details for HTTP APIs.

Domain outcomes (customer not found, outside zone, ...) are not exceptions:
validators report them as ValidatorResult states. The classes below cover
collaborator failures and caller mistakes.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Error categories for classification and monitoring."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    EXTERNAL_SERVICE = "external_service"
    VALIDATION = "validation"
    BUSINESS_LOGIC = "business_logic"


class BaseError(Exception):
    """Base exception for all order-gate errors.

    Attributes:
        message: Human-readable error message
        error_code: Application-specific error code
        category: Error category for classification
        http_status: HTTP status code to return
        details: Additional context (dict)
        retryable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        http_status: int,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.http_status = http_status
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Details format."""
        return {
            "type": f"/errors/{self.error_code}",
            "title": self.message,
            "status": self.http_status,
            "code": self.error_code,
            "detail": self.details.get("detail"),
            "category": self.category.value,
            "retryable": self.retryable,
        }


class ClientError(BaseError):
    """Base for client errors (4xx). Not retryable."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CLIENT_ERROR,
            http_status=kwargs.pop("http_status", 400),
            retryable=False,
            **kwargs,
        )


class PipelineConfigError(ClientError):
    """Pipeline configuration cannot be run (unknown validator, bad option)."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code="PIPELINE_CONFIG_INVALID",
            http_status=422,
            **kwargs,
        )


class ServerError(BaseError):
    """Base for server errors (5xx)."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.SERVER_ERROR,
            http_status=kwargs.pop("http_status", 500),
            retryable=kwargs.pop("retryable", False),
            **kwargs,
        )


class ExternalServiceError(ServerError):
    """External service failure (502 Bad Gateway / 504 Gateway Timeout).

    Raised when the backend API fails, times out or answers garbage.
    Validators turn it into the generic ``error`` state.

    Args:
        service_name: Name of the external service
        error_type: Type of error ("timeout", "unavailable", "error")
        details: Additional error context
    """

    def __init__(self, service_name: str, error_type: str, **kwargs):
        if error_type == "timeout":
            http_status = 504
        elif error_type == "unavailable":
            http_status = 503
        else:
            http_status = 502

        additional_details = kwargs.pop("details", {})
        additional_details.update(
            {
                "service": service_name,
                "error_type": error_type,
            }
        )

        super().__init__(
            message=f"{service_name} service {error_type}",
            error_code=f"{service_name.upper()}_{error_type.upper()}",
            http_status=http_status,
            retryable=True,
            details=additional_details,
            **kwargs,
        )


class PipelineClosedError(ServerError):
    """A run was requested on a pipeline whose owner already tore it down."""

    def __init__(self, customer_id: str):
        super().__init__(
            message="Validation pipeline is closed",
            error_code="PIPELINE_CLOSED",
            http_status=409,
            details={"customer_id": customer_id},
        )
