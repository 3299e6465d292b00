"""Domain models for the validation pipeline.

Wire-facing models use camelCase aliases (the backend and the navigation
layer speak camelCase) while Python code uses snake_case attributes.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from order_gate.core.config import API_CALL_TIMEOUT_SECONDS, GEOLOCATION_TIMEOUT_SECONDS
from order_gate.domain.states import (
    PipelinePhase,
    ValidationState,
    ValidatorName,
    is_success_state,
    should_block_progress,
)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Validator payloads
# =============================================================================


class CustomerData(WireModel):
    """Payload of customerExists: the customer record as the backend sent it."""

    customer: dict[str, Any]


class ActiveOrder(WireModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    id: str
    status: str
    created_at: Optional[str] = None
    order_number: Optional[str] = None


class NextOpening(WireModel):
    day: str
    time: str
    hours_until: int
    minutes_until: int


class RestaurantStatusData(WireModel):
    """Payload of restaurantStatus."""

    is_open: bool
    message: str = ""
    next_opening: Optional[NextOpening] = None
    active_orders: Optional[list[ActiveOrder]] = None


class LocationCoordinates(WireModel):
    """Payload of geoLocationGather."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = None


class CityInfo(WireModel):
    id: str
    name: str


class ZoneInfo(WireModel):
    id: str
    name: str
    description: Optional[str] = None


class GeofencingData(WireModel):
    """Payload of geofencingValidate (attached on pass and on failure)."""

    city: Optional[CityInfo] = None
    zone: Optional[ZoneInfo] = None
    reason: Optional[str] = None
    message: Optional[str] = None


# =============================================================================
# Validator contract
# =============================================================================


class ValidatorResult(WireModel):
    """Atomic output of one validator invocation.

    A passing result must carry a success-like state and a failing result a
    blocking state; anything else is a validator bug and is rejected here.
    """

    passed: bool
    state: ValidationState
    data: Any = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_state_matches_outcome(self) -> "ValidatorResult":
        if self.passed and not is_success_state(self.state):
            raise ValueError(f"passing result cannot carry state '{self.state.value}'")
        if not self.passed and not should_block_progress(self.state):
            raise ValueError(f"failing result cannot carry state '{self.state.value}'")
        return self


class ValidatorOptions(BaseModel):
    """Per-invocation options handed to a validator."""

    model_config = ConfigDict(frozen=True)

    skip_cache: bool = False  # neither read nor write the cache
    refresh_cache: bool = False  # skip the read, write the fresh result
    timeout_seconds: float = Field(default=API_CALL_TIMEOUT_SECONDS, gt=0)
    high_accuracy: bool = True

    @property
    def reads_cache(self) -> bool:
        return not (self.skip_cache or self.refresh_cache)

    @property
    def writes_cache(self) -> bool:
        return not self.skip_cache


class ValidatorContext(BaseModel):
    """What a validator may see: the target customer and prior step output."""

    model_config = ConfigDict(frozen=True)

    customer_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    active_orders: Optional[list[ActiveOrder]] = None


# =============================================================================
# Pipeline configuration and state
# =============================================================================


class StepConfig(WireModel):
    name: ValidatorName
    enabled: bool = True


class PipelineConfig(WireModel):
    """Ordered validator steps plus the global run options."""

    steps: list[StepConfig] = Field(default_factory=list)
    skip_cache: bool = False
    force_refresh: bool = False
    api_timeout_seconds: float = Field(default=API_CALL_TIMEOUT_SECONDS, gt=0)
    geolocation_timeout_seconds: float = Field(
        default=GEOLOCATION_TIMEOUT_SECONDS, gt=0
    )
    high_accuracy: bool = True
    auto_start: bool = False
    active_orders: Optional[list[ActiveOrder]] = None

    @field_validator("steps", mode="before")
    @classmethod
    def _coerce_step_names(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        return [
            {"name": item} if isinstance(item, (str, ValidatorName)) else item
            for item in value
        ]

    @field_validator("steps")
    @classmethod
    def _reject_duplicate_steps(cls, steps: list[StepConfig]) -> list[StepConfig]:
        seen: set[ValidatorName] = set()
        for step in steps:
            if step.name in seen:
                raise ValueError(f"validator '{step.name.value}' configured twice")
            seen.add(step.name)
        return steps

    @property
    def enabled_steps(self) -> list[ValidatorName]:
        return [step.name for step in self.steps if step.enabled]

    @classmethod
    def full(cls, **options: Any) -> "PipelineConfig":
        """Every validator, canonical order (the welcome page gate)."""
        return cls(steps=list(ValidatorName), **options)

    @classmethod
    def account_only(cls, **options: Any) -> "PipelineConfig":
        """Account and opening-hours checks, no geolocation (menu/cart pages)."""
        return cls(
            steps=[
                ValidatorName.CUSTOMER_EXISTS,
                ValidatorName.CUSTOMER_STATUS,
                ValidatorName.RESTAURANT_STATUS,
            ],
            **options,
        )


class PipelineState(WireModel):
    """Observable state of a pipeline run."""

    phase: PipelinePhase = PipelinePhase.IDLE
    current_step: Optional[str] = None
    failed_step: Optional[str] = None
    completed_steps: list[str] = Field(default_factory=list)
    skipped_steps: list[str] = Field(default_factory=list)
    validation_state: Optional[ValidationState] = None
    error: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_validating(self) -> bool:
        return self.phase == PipelinePhase.VALIDATING

    @property
    def is_success(self) -> bool:
        return self.phase == PipelinePhase.SUCCESS

    @property
    def is_failed(self) -> bool:
        return self.phase == PipelinePhase.FAILED


def dump_payload(value: Any) -> Any:
    """JSON-ready form of a validator payload (models dumped by alias)."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {key: dump_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [dump_payload(item) for item in value]
    return value
