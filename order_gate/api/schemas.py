"""Pydantic request/response schemas for API endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from order_gate.domain.models import ActiveOrder, LocationCoordinates, PipelineState, StepConfig, WireModel
from order_gate.ports.geolocation_port import PositionErrorCode
from order_gate.routing.redirects import RouteDescriptor


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://www.rfc-editor.org/rfc/rfc7807
    """

    type: str = Field(..., description="URI reference identifying the problem type")
    title: str = Field(..., description="Short, human-readable summary of the problem")
    status: int = Field(..., description="HTTP status code for this problem")
    detail: Optional[str] = Field(
        None, description="Human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None,
        description="URI reference identifying this specific occurrence (e.g., request path)",
    )

    # Extension members (allowed by RFC 7807)
    code: str = Field(..., description="Application-specific error code")
    category: str = Field(
        ..., description="Error category (client_error, server_error, etc.)"
    )
    retryable: bool = Field(
        default=False, description="Whether the request can be retried"
    )
    trace_id: Optional[str] = Field(
        None, description="Distributed tracing ID for correlation across services"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "type": "/errors/VALIDATION_ERROR",
                "title": "Request validation failed",
                "status": 422,
                "detail": "steps.0.name: Input should be 'customerExists', ...",
                "instance": "/v1/customers/cust-123/validations",
                "code": "VALIDATION_ERROR",
                "category": "client_error",
                "retryable": False,
                "trace_id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
            }
        }
    }


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class GeolocationReport(WireModel):
    """What the client device reported about its location capability."""

    supported: bool = Field(default=True, description="Device exposes geolocation")
    position: Optional[LocationCoordinates] = Field(
        default=None, description="Current position, when the device produced one"
    )
    error: Optional[PositionErrorCode] = Field(
        default=None, description="Why no position could be produced"
    )


class ValidationRequest(WireModel):
    """Run the validation gate for a customer.

    Omitting ``steps`` runs every validator in canonical order.
    """

    steps: Optional[list[StepConfig]] = None
    skip_cache: bool = False
    force_refresh: bool = False
    active_orders: Optional[list[ActiveOrder]] = None
    geolocation: GeolocationReport = Field(default_factory=GeolocationReport)

    model_config = {
        "json_schema_extra": {
            "example": {
                "steps": [
                    {"name": "customerExists"},
                    {"name": "customerStatus"},
                    {"name": "restaurantStatus"},
                    {"name": "geoLocationSupport"},
                    {"name": "geoLocationGather"},
                    {"name": "geofencingValidate"},
                ],
                "skipCache": False,
                "forceRefresh": False,
                "geolocation": {
                    "supported": True,
                    "position": {"latitude": 43.2389, "longitude": 76.8897},
                },
            }
        },
    }


class ValidationResponse(WireModel):
    state: PipelineState
    redirect: RouteDescriptor
