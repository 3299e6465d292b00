"""Async HTTP client for the business backend API."""

import logging
from typing import Any, Optional

import httpx

from order_gate.core.config import (
    CUSTOMER_ENDPOINT,
    CUSTOMER_STATUS_ENDPOINT,
    ERROR_BODY_MAX_CHARS,
    GEOFENCING_ENDPOINT,
    RESTAURANT_STATUS_ENDPOINT,
)
from order_gate.core.exceptions import ExternalServiceError
from order_gate.core.settings import backend_settings

logger = logging.getLogger(__name__)

SERVICE_NAME = "backend"


class BackendClient:
    """Backend client implementing BackendPort using httpx (async).

    Assumes endpoints (relative to the base URL):
    - GET  /customers/{id}                     -> {"success": true, "data": {...}}
    - GET  /business/customer/{id}/status      -> {"success": true, "data": {"canOrder": ...}}
    - GET  /business/status                    -> {"success": true, "data": {"isOpen": ...}}
    - POST /geofencing/validate-delivery-zone  -> {"success": true, "withinDeliveryZone": ..., "data": {...}}

    A 404 from the customer endpoint still carries an envelope and is
    returned as such; any other non-2xx status is an error.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or backend_settings.BACKEND_BASE_URL).rstrip("/")
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else backend_settings.BACKEND_TIMEOUT_SECONDS
        )
        self.verify_ssl = (
            verify_ssl if verify_ssl is not None else backend_settings.BACKEND_VERIFY_SSL
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                verify=self.verify_ssl,
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_customer(self, customer_id: str, *, timeout: float) -> dict[str, Any]:
        return await self._request(
            "GET",
            CUSTOMER_ENDPOINT.format(customer_id=customer_id),
            timeout=timeout,
            envelope_statuses=(404,),
        )

    async def get_customer_status(self, customer_id: str, *, timeout: float) -> dict[str, Any]:
        return await self._request(
            "GET",
            CUSTOMER_STATUS_ENDPOINT.format(customer_id=customer_id),
            timeout=timeout,
        )

    async def get_restaurant_status(self, *, timeout: float) -> dict[str, Any]:
        return await self._request("GET", RESTAURANT_STATUS_ENDPOINT, timeout=timeout)

    async def validate_delivery_zone(
        self, latitude: float, longitude: float, *, timeout: float
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            GEOFENCING_ENDPOINT,
            timeout=timeout,
            json={"latitude": latitude, "longitude": longitude},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        json: Optional[dict[str, Any]] = None,
        envelope_statuses: tuple[int, ...] = (),
    ) -> dict[str, Any]:
        if self._client is None:
            raise RuntimeError("Client not started")

        try:
            resp = await self._client.request(method, path, json=json, timeout=timeout)
        except httpx.TimeoutException as e:
            logger.warning(
                f"Backend {method} {path} timed out after {timeout}s",
                extra={"service": SERVICE_NAME},
            )
            raise ExternalServiceError(
                service_name=SERVICE_NAME,
                error_type="timeout",
                details={"detail": f"{method} {path} timed out after {timeout}s"},
            ) from e
        except httpx.TransportError as e:
            logger.warning(
                f"Backend {method} {path} unreachable: {e}",
                extra={"service": SERVICE_NAME},
            )
            raise ExternalServiceError(
                service_name=SERVICE_NAME,
                error_type="unavailable",
                details={"detail": str(e) or type(e).__name__},
            ) from e

        if not resp.is_success and resp.status_code not in envelope_statuses:
            body = resp.text[:ERROR_BODY_MAX_CHARS]
            logger.warning(
                f"Backend {method} {path} returned HTTP {resp.status_code}",
                extra={"service": SERVICE_NAME, "http_status": resp.status_code},
            )
            raise ExternalServiceError(
                service_name=SERVICE_NAME,
                error_type="error",
                details={
                    "detail": f"HTTP {resp.status_code}: {body}",
                    "http_status": resp.status_code,
                },
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise ExternalServiceError(
                service_name=SERVICE_NAME,
                error_type="error",
                details={"detail": f"Malformed JSON from {path}"},
            ) from e

        if not isinstance(payload, dict):
            raise ExternalServiceError(
                service_name=SERVICE_NAME,
                error_type="error",
                details={"detail": f"Unexpected response shape from {path}"},
            )

        logger.debug(
            f"Backend {method} {path} -> {resp.status_code}",
            extra={"service": SERVICE_NAME, "http_status": resp.status_code},
        )
        return payload
