from order_gate.clients.backend_client import BackendClient
from order_gate.clients.geolocation import (
    CallbackGeolocationAdapter,
    ReportedPositionProvider,
)

__all__ = ["BackendClient", "CallbackGeolocationAdapter", "ReportedPositionProvider"]
