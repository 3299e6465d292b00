"""BackendPort protocol for the business backend HTTP API."""

from __future__ import annotations

from typing import Any, Protocol


class BackendPort(Protocol):
    """Abstraction over the backend used by the validators.

    Every method returns the decoded ``{success, data|error}`` envelope and
    raises ``ExternalServiceError`` when the call itself fails (timeout,
    connection error, unexpected status, malformed JSON).
    """

    async def get_customer(self, customer_id: str, *, timeout: float) -> dict[str, Any]: ...

    async def get_customer_status(self, customer_id: str, *, timeout: float) -> dict[str, Any]: ...

    async def get_restaurant_status(self, *, timeout: float) -> dict[str, Any]: ...

    async def validate_delivery_zone(
        self, latitude: float, longitude: float, *, timeout: float
    ) -> dict[str, Any]: ...
