"""Collaborator contracts consumed by the validators."""

from order_gate.ports.backend_port import BackendPort
from order_gate.ports.geolocation_port import (
    GeolocationPort,
    Position,
    PositionError,
    PositionErrorCode,
    PositionOptions,
)

__all__ = [
    "BackendPort",
    "GeolocationPort",
    "Position",
    "PositionError",
    "PositionErrorCode",
    "PositionOptions",
]
