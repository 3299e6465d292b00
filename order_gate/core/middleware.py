"""Request tracing middleware."""

from fastapi import Request

from order_gate.core.utils import ensure_trace_id


async def trace_id_middleware(request: Request, call_next):
    """Ensure every request has a trace ID in state and response headers.

    An incoming ``X-Trace-ID`` header is reused so the gate decision can be
    correlated with the caller's own logs.
    """
    trace_id = ensure_trace_id(request)
    response = await call_next(request)
    response.headers["X-Trace-ID"] = trace_id
    return response
