"""Device location adapters implementing GeolocationPort.

Device location APIs are callback based: the caller hands over a success
and an error callback and the platform invokes one of them later, possibly
from another thread. ``CallbackGeolocationAdapter`` turns that into an
awaitable bounded by the request timeout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional, Union

from order_gate.ports.geolocation_port import (
    Position,
    PositionError,
    PositionErrorCode,
    PositionOptions,
)

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[..., None]
PositionPrimitive = Callable[[SuccessCallback, ErrorCallback, PositionOptions], Any]


def to_position(raw: Union[Position, Mapping[str, Any]]) -> Position:
    """Normalize a reported position (Position or mapping) into a Position."""
    if isinstance(raw, Position):
        return raw
    if isinstance(raw, Mapping):
        try:
            return Position(
                latitude=float(raw["latitude"]),
                longitude=float(raw["longitude"]),
                accuracy=(
                    float(raw["accuracy"]) if raw.get("accuracy") is not None else None
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PositionError(
                PositionErrorCode.POSITION_UNAVAILABLE, f"Malformed position: {e}"
            ) from e
    raise PositionError(
        PositionErrorCode.POSITION_UNAVAILABLE,
        f"Unsupported position type: {type(raw).__name__}",
    )


def _to_position_error(error: Any, message: Optional[str] = None) -> PositionError:
    if isinstance(error, PositionError):
        return error
    try:
        return PositionError(PositionErrorCode(error), message)
    except ValueError:
        return PositionError(PositionErrorCode.POSITION_UNAVAILABLE, message or str(error))


def _cancel_request(handle: Any) -> None:
    cancel = getattr(handle, "cancel", None)
    if callable(cancel):
        cancel()


class CallbackGeolocationAdapter:
    """Wrap ``fn(on_success, on_error, options)`` into an async position request.

    Args:
        get_current_position: Platform primitive. It may return a handle with
            a ``cancel()`` method, invoked when the request is abandoned.
        supported: Result of the platform capability probe
    """

    def __init__(self, get_current_position: PositionPrimitive, supported: bool = True):
        self._get_current_position = get_current_position
        self._supported = supported

    def is_supported(self) -> bool:
        return self._supported

    async def get_current_position(self, options: PositionOptions) -> Position:
        if not self._supported:
            raise PositionError(
                PositionErrorCode.POSITION_UNAVAILABLE, "Geolocation is not supported"
            )

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def _settle(outcome: Union[Position, PositionError]) -> None:
            # Late callbacks after timeout or cancellation land on a done future.
            if future.done():
                return
            if isinstance(outcome, PositionError):
                future.set_exception(outcome)
            else:
                future.set_result(outcome)

        def _deliver(build: Callable[[], Union[Position, PositionError]]) -> None:
            if loop.is_closed():
                return
            try:
                outcome = build()
            except PositionError as e:
                outcome = e
            loop.call_soon_threadsafe(_settle, outcome)

        def on_success(raw: Any) -> None:
            _deliver(lambda: to_position(raw))

        def on_error(error: Any, message: Optional[str] = None) -> None:
            _deliver(lambda: _to_position_error(error, message))

        handle = self._get_current_position(on_success, on_error, options)

        try:
            return await asyncio.wait_for(future, timeout=options.timeout_seconds)
        except asyncio.TimeoutError as e:
            _cancel_request(handle)
            logger.info(f"Position request timed out after {options.timeout_seconds}s")
            raise PositionError(
                PositionErrorCode.TIMEOUT, "Location request timed out"
            ) from e
        except asyncio.CancelledError:
            _cancel_request(handle)
            raise


class ReportedPositionProvider:
    """Serves a position (or position error) the client device already reported."""

    def __init__(
        self,
        position: Union[Position, Mapping[str, Any], None] = None,
        error: Union[PositionErrorCode, str, None] = None,
        supported: bool = True,
    ):
        self._position = position
        self._error = PositionErrorCode(error) if error is not None else None
        self._supported = supported

    def is_supported(self) -> bool:
        return self._supported

    async def get_current_position(self, options: PositionOptions) -> Position:
        if self._error is not None:
            raise PositionError(self._error)
        if self._position is None:
            raise PositionError(
                PositionErrorCode.POSITION_UNAVAILABLE, "No position reported"
            )
        return to_position(self._position)
