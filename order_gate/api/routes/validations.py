"""Validation gate endpoint.

The client device reports its own geolocation outcome in the request body;
the server runs the configured validators against the backend and answers
with the final pipeline state plus where the customer should be sent.
Blocked customers are a normal outcome, so the response is always 200.
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from order_gate.api.schemas import ProblemDetail, ValidationRequest, ValidationResponse
from order_gate.clients.geolocation import ReportedPositionProvider
from order_gate.core.dependencies import get_backend_client, get_validation_cache
from order_gate.core.exceptions import PipelineConfigError
from order_gate.core.logging_utils import sanitize_customer_id
from order_gate.core.settings import backend_settings, validation_settings
from order_gate.domain.cache import TTLCache
from order_gate.domain.models import PipelineConfig, dump_payload
from order_gate.domain.states import ValidatorName
from order_gate.pipeline.orchestrator import ValidationPipeline
from order_gate.ports.backend_port import BackendPort
from order_gate.routing.redirects import resolve_redirect
from order_gate.validators import ValidationServices

router = APIRouter()
logger = logging.getLogger(__name__)


def build_pipeline_config(body: ValidationRequest) -> PipelineConfig:
    try:
        return PipelineConfig(
            steps=body.steps if body.steps is not None else list(ValidatorName),
            skip_cache=body.skip_cache,
            force_refresh=body.force_refresh,
            api_timeout_seconds=backend_settings.BACKEND_TIMEOUT_SECONDS,
            geolocation_timeout_seconds=validation_settings.GEOLOCATION_TIMEOUT_SECONDS,
            high_accuracy=validation_settings.GEOLOCATION_HIGH_ACCURACY,
            active_orders=body.active_orders,
        )
    except PydanticValidationError as e:
        errors = e.errors()
        detail = errors[0].get("msg") if errors else str(e)
        raise PipelineConfigError(
            "Invalid validation pipeline configuration", details={"detail": detail}
        ) from e


@router.post(
    "/v1/customers/{customer_id}/validations",
    response_model=ValidationResponse,
    tags=["validations"],
    responses={422: {"description": "Validation Error", "model": ProblemDetail}},
)
async def run_validations(
    customer_id: str,
    body: ValidationRequest,
    request: Request,
    backend: BackendPort = Depends(get_backend_client),
    cache: TTLCache = Depends(get_validation_cache),
):
    start_time = time.time()
    trace_id = getattr(request.state, "trace_id", None)

    logger.info(
        "[NEW VALIDATION] customer=%s",
        sanitize_customer_id(customer_id),
        extra={"trace_id": trace_id},
    )

    config = build_pipeline_config(body)
    report = body.geolocation
    geolocation = ReportedPositionProvider(
        position=report.position.model_dump() if report.position else None,
        error=report.error,
        supported=report.supported,
    )
    services = ValidationServices(backend=backend, geolocation=geolocation, cache=cache)

    pipeline = ValidationPipeline(customer_id, config, services)
    try:
        state = await pipeline.run()
    finally:
        pipeline.close()

    redirect = resolve_redirect(state, customer_id)

    logger.info(
        "[RESPONSE] customer=%s phase=%s state=%s time=%.2fs",
        sanitize_customer_id(customer_id),
        state.phase.value,
        state.validation_state.value if state.validation_state else None,
        time.time() - start_time,
        extra={
            "trace_id": trace_id,
            "phase": state.phase.value,
            "validation_state": (
                state.validation_state.value if state.validation_state else None
            ),
        },
    )

    return ValidationResponse(
        state=state.model_copy(update={"data": dump_payload(state.data)}),
        redirect=redirect,
    )
