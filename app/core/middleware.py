"""Custom middleware for request handling"""
import uuid
import time
import logging
from contextvars import ContextVar
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Read by the logging filter so service-layer log lines carry the request's id
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


async def correlation_id_middleware(request: Request, call_next):
    """Tag the request (and every log line it produces) with a correlation ID"""
    correlation_id = request.headers.get("X-Correlation-ID") or uuid.uuid4().hex[:12]
    request.state.correlation_id = correlation_id
    token = correlation_id_var.set(correlation_id)

    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token)

    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """One line per request: method, path, status, latency"""
    started = time.perf_counter()

    response = await call_next(request)

    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    if response.status_code >= 500:
        log = logger.warning
    elif request.url.path.startswith("/health"):
        log = logger.debug
    else:
        log = logger.info
    log(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)")

    return response
