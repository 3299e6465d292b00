"""GeolocationPort protocol for the device location capability."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from order_gate.core.config import GEOLOCATION_MAXIMUM_AGE_SECONDS, GEOLOCATION_TIMEOUT_SECONDS


class PositionErrorCode(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"


class PositionError(Exception):
    """The device could not produce a position."""

    def __init__(self, code: PositionErrorCode, message: Optional[str] = None):
        self.code = PositionErrorCode(code)
        super().__init__(message or self.code.value)


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class PositionOptions:
    enable_high_accuracy: bool = True
    timeout_seconds: float = GEOLOCATION_TIMEOUT_SECONDS
    maximum_age_seconds: float = GEOLOCATION_MAXIMUM_AGE_SECONDS


class GeolocationPort(Protocol):
    """Device capability probe plus a one-shot position request."""

    def is_supported(self) -> bool: ...

    async def get_current_position(self, options: PositionOptions) -> Position: ...
