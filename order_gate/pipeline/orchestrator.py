"""Validation pipeline orchestrator.

Runs the configured validators strictly in order, stops at the first
failure and exposes an observable ``PipelineState``.

Phases:
- IDLE: nothing has run yet (or the pipeline was reset)
- VALIDATING: a run is in flight
- SUCCESS: every enabled step passed or was skipped
- FAILED: a step failed, a guard tripped, or something unexpected happened

Every run is stamped with a generation number. A transition is committed
only while its generation is the newest one and the pipeline is open, so a
superseded or abandoned run can never overwrite fresher state.

Example:
    >>> pipeline = ValidationPipeline("cust-123", PipelineConfig.full(), services)
    >>> state = await pipeline.run()
    >>> state.is_success
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Callable, Optional

from order_gate.core.exceptions import PipelineClosedError
from order_gate.core.logging_utils import sanitize_customer_id
from order_gate.domain.cache import invalidate_customer
from order_gate.domain.dependencies import missing_dependencies, order_warnings
from order_gate.domain.models import (
    PipelineConfig,
    PipelineState,
    ValidatorContext,
    ValidatorOptions,
)
from order_gate.domain.states import PipelinePhase, ValidationState, ValidatorName
from order_gate.validators import ValidationServices, run_validator

logger = logging.getLogger(__name__)

StateListener = Callable[[PipelineState], Any]

INIT_STEP = "init"
CONFIG_STEP = "config"


def _generate_run_id() -> str:
    return uuid.uuid4().hex[:12]


class ValidationPipeline:
    """Sequential validator runner bound to one customer.

    Args:
        customer_id: Customer the gate is evaluated for
        config: Default configuration; ``run`` may be given another one
        services: Backend, geolocation and cache collaborators
        on_change: Optional listener called with every committed state

    With ``config.auto_start`` the first run is scheduled on construction,
    which requires a running event loop.
    """

    def __init__(
        self,
        customer_id: str,
        config: PipelineConfig,
        services: ValidationServices,
        on_change: Optional[StateListener] = None,
    ):
        self.customer_id = customer_id
        self.config = config
        self.services = services
        self._on_change = on_change

        self._state = PipelineState()
        self._generation = 0
        self._closed = False
        self._task: Optional[asyncio.Task] = None
        self._refresh_steps: set[ValidatorName] = set()

        for warning in order_warnings(config.enabled_steps):
            logger.warning(
                f"Pipeline config: {warning}",
                extra={"customer_id": sanitize_customer_id(customer_id)},
            )

        if config.auto_start:
            self.start()

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    async def run(self, config: Optional[PipelineConfig] = None) -> PipelineState:
        """Run the pipeline to completion and return the final state.

        Raises:
            PipelineClosedError: If ``close()`` was called
        """
        if self._closed:
            raise PipelineClosedError(self.customer_id)

        self._generation += 1
        generation = self._generation
        refresh_steps = self._refresh_steps
        self._refresh_steps = set()

        return await self._execute(
            config or self.config, generation, refresh_steps, _generate_run_id()
        )

    def start(self, config: Optional[PipelineConfig] = None) -> asyncio.Task:
        """Schedule a run as a task, cancelling any run already in flight."""
        if self._closed:
            raise PipelineClosedError(self.customer_id)

        self._cancel_task()
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(self.run(config))
        return self._task

    async def retry(self, force_refresh: bool = False) -> PipelineState:
        """Run again after a failure (or restart a run in flight).

        The previously failed step is re-checked against the backend and
        its cache entry refreshed; earlier steps may still be served from
        the cache. ``force_refresh`` drops the customer's cache entries and
        re-checks everything.
        """
        if self._closed:
            raise PipelineClosedError(self.customer_id)

        config = self.config
        if force_refresh:
            config = config.model_copy(update={"force_refresh": True})
        elif self._state.is_failed and self._state.failed_step in _VALIDATOR_VALUES:
            self._refresh_steps = {ValidatorName(self._state.failed_step)}

        logger.info(
            "Retrying validation pipeline",
            extra={
                "customer_id": sanitize_customer_id(self.customer_id),
                "phase": self._state.phase.value,
            },
        )
        task = self.start(config)
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        return self._state if task.cancelled() else task.result()

    def reset(self) -> None:
        """Return to IDLE, abandoning any run in flight."""
        self._cancel_task()
        self._generation += 1
        self._refresh_steps = set()
        if not self._closed:
            self._publish(PipelineState())

    def close(self) -> None:
        """Tear the pipeline down; no transition is applied afterwards."""
        if self._closed:
            return
        self._closed = True
        self._cancel_task()
        self._generation += 1
        logger.debug(
            "Validation pipeline closed",
            extra={"customer_id": sanitize_customer_id(self.customer_id)},
        )

    # =========================================================================
    # Run
    # =========================================================================

    async def _execute(
        self,
        config: PipelineConfig,
        generation: int,
        refresh_steps: set[ValidatorName],
        run_id: str,
    ) -> PipelineState:
        log_extra = {
            "run_id": run_id,
            "customer_id": sanitize_customer_id(self.customer_id),
        }

        if not self.customer_id:
            self._transition_to_failed(
                generation,
                failed_step=INIT_STEP,
                validation_state=ValidationState.ERROR,
                error="No customer ID provided",
            )
            logger.warning("Validation aborted: no customer ID", extra=log_extra)
            return self._state

        if not config.enabled_steps:
            self._transition_to_failed(
                generation,
                failed_step=CONFIG_STEP,
                validation_state=ValidationState.ERROR,
                error="No validations configured",
            )
            logger.warning("Validation aborted: no steps configured", extra=log_extra)
            return self._state

        if config.force_refresh:
            invalidate_customer(self.services.cache, self.customer_id)

        self._commit(
            generation,
            phase=PipelinePhase.VALIDATING,
            current_step=None,
            failed_step=None,
            completed_steps=[],
            skipped_steps=[],
            validation_state=ValidationState.LOADING,
            error=None,
            data={},
        )
        logger.info(
            f"Validation started: {[name.value for name in config.enabled_steps]}",
            extra={**log_extra, "phase": PipelinePhase.VALIDATING.value},
        )

        completed: list[str] = []
        skipped: list[str] = []
        data: dict[str, Any] = {}
        current: Optional[ValidatorName] = None
        started = time.perf_counter()

        try:
            for step in config.steps:
                name = step.name
                if not step.enabled:
                    continue

                missing = missing_dependencies(name, completed)
                if missing:
                    skipped.append(name.value)
                    logger.info(
                        f"Skipping {name.value}: unmet dependencies "
                        f"{[dep.value for dep in missing]}",
                        extra={**log_extra, "validator": name.value},
                    )
                    self._commit(generation, skipped_steps=list(skipped))
                    continue

                current = name
                if not self._commit(generation, current_step=name.value):
                    return self._state

                step_started = time.perf_counter()
                result = await run_validator(
                    name,
                    ValidatorContext(
                        customer_id=self.customer_id,
                        data=dict(data),
                        active_orders=config.active_orders,
                    ),
                    self._options_for(name, config, refresh_steps),
                    self.services,
                )
                if not self._is_current(generation):
                    return self._state

                logger.info(
                    f"Step {name.value}: {'passed' if result.passed else 'failed'}",
                    extra={
                        **log_extra,
                        "validator": name.value,
                        "validation_state": result.state.value,
                        "duration_ms": round((time.perf_counter() - step_started) * 1000, 1),
                    },
                )

                if not result.passed:
                    self._transition_to_failed(
                        generation,
                        failed_step=name.value,
                        validation_state=result.state,
                        error=result.error or f"Validation failed: {name.value}",
                        completed_steps=list(completed),
                        skipped_steps=list(skipped),
                        data=dict(data),
                    )
                    return self._state

                if result.data is not None:
                    data[name.value] = result.data
                completed.append(name.value)
                self._commit(generation, completed_steps=list(completed), data=dict(data))
                current = None

        except Exception as e:
            logger.error(
                f"Validation crashed in {current.value if current else 'pipeline'}: {e}",
                extra={**log_extra, "validation_state": ValidationState.ERROR.value},
                exc_info=True,
            )
            self._transition_to_failed(
                generation,
                failed_step=current.value if current else None,
                validation_state=ValidationState.ERROR,
                error=str(e) or "Unexpected validation error",
                completed_steps=list(completed),
                skipped_steps=list(skipped),
                data=dict(data),
            )
            return self._state

        self._commit(
            generation,
            phase=PipelinePhase.SUCCESS,
            current_step=None,
            failed_step=None,
            completed_steps=list(completed),
            skipped_steps=list(skipped),
            validation_state=ValidationState.ALLOWED,
            error=None,
            data=dict(data),
        )
        logger.info(
            "Validation succeeded",
            extra={
                **log_extra,
                "phase": PipelinePhase.SUCCESS.value,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return self._state

    def _options_for(
        self,
        name: ValidatorName,
        config: PipelineConfig,
        refresh_steps: set[ValidatorName],
    ) -> ValidatorOptions:
        timeout = (
            config.geolocation_timeout_seconds
            if name == ValidatorName.GEOLOCATION_GATHER
            else config.api_timeout_seconds
        )
        return ValidatorOptions(
            skip_cache=config.skip_cache,
            refresh_cache=config.force_refresh or name in refresh_steps,
            timeout_seconds=timeout,
            high_accuracy=config.high_accuracy,
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _commit(self, generation: int, **changes: Any) -> bool:
        """Apply changes if the run is still current; False means superseded."""
        if not self._is_current(generation):
            logger.debug(
                "Dropping stale pipeline transition",
                extra={"customer_id": sanitize_customer_id(self.customer_id)},
            )
            return False
        self._publish(self._state.model_copy(update=changes))
        return True

    def _transition_to_failed(self, generation: int, **changes: Any) -> None:
        changes.setdefault("completed_steps", [])
        changes.setdefault("skipped_steps", [])
        changes.setdefault("data", {})
        committed = self._commit(
            generation,
            phase=PipelinePhase.FAILED,
            current_step=None,
            **changes,
        )
        if not committed:
            return
        logger.info(
            f"Validation failed at {changes.get('failed_step')}: {changes.get('error')}",
            extra={
                "customer_id": sanitize_customer_id(self.customer_id),
                "phase": PipelinePhase.FAILED.value,
                "validation_state": ValidationState(changes["validation_state"]).value,
            },
        )

    def _publish(self, state: PipelineState) -> None:
        self._state = state
        if self._on_change is None:
            return
        try:
            self._on_change(state)
        except Exception:
            logger.exception("Pipeline state listener raised")

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


_VALIDATOR_VALUES = frozenset(name.value for name in ValidatorName)
