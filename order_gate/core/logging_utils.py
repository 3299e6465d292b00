"""
PII-safe logging utilities.

Customer ids arrive in shared links and coordinates pin a customer's home,
so neither is written to logs verbatim.
"""


def sanitize_customer_id(customer_id: str | None) -> str:
    """
    Sanitize customer ID for logs.

    Rules:
    - None / empty / <6 chars → fully masked
    - Otherwise → first 3 + last 2 chars, middle masked
    """
    if not customer_id:
        return "***"

    customer_id = customer_id.strip()
    if len(customer_id) < 6:
        return "***"

    return f"{customer_id[:3]}***{customer_id[-2:]}"


def sanitize_coordinates(latitude: float | None, longitude: float | None) -> str:
    """
    Coarsen coordinates for logs (2 decimals, ~1 km).
    """
    if latitude is None or longitude is None:
        return "N/A"

    return f"{latitude:.2f},{longitude:.2f}"
