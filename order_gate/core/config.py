# =============================================================================
# Backend API endpoints (relative to BACKEND_BASE_URL)
# =============================================================================

CUSTOMER_ENDPOINT = "/customers/{customer_id}"
CUSTOMER_STATUS_ENDPOINT = "/business/customer/{customer_id}/status"
RESTAURANT_STATUS_ENDPOINT = "/business/status"
GEOFENCING_ENDPOINT = "/geofencing/validate-delivery-zone"


# =============================================================================
# Timeouts (seconds)
# =============================================================================

API_CALL_TIMEOUT_SECONDS = 5.0  # Per backend request
GEOLOCATION_TIMEOUT_SECONDS = 10.0  # Device position prompt
GEOLOCATION_MAXIMUM_AGE_SECONDS = 0.0  # Never accept a cached device position


# =============================================================================
# Cache
# =============================================================================

CACHE_TTL_SECONDS = 5 * 60
CACHE_KEY_PREFIX = "validation"
GEOFENCE_KEY_PRECISION = 4  # ~11 m


# =============================================================================
# Geofencing reason codes
# =============================================================================

OUTSIDE_CITY_REASONS = frozenset({"CITY_NOT_FOUND", "OUTSIDE_CITY"})


# =============================================================================
# Error Handling
# =============================================================================

ERROR_BODY_MAX_CHARS = 200  # Maximum chars from error response bodies
