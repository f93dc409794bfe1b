"""
HTTP client construction.

Each JaguarFluxClient owns one pooled httpx.AsyncClient. Endpoints live on
different hosts (one per Modal function), so no base_url is set here.
"""

from __future__ import annotations

import httpx

from jaguar_flux.logger import get_logger

logger = get_logger(__name__)

DEFAULT_KEEPALIVE_EXPIRY = 30.0


def create_http_client(
    timeout: float = 30.0,
    headers: dict[str, str] | None = None,
    max_connections: int = 10,
    max_keepalive_connections: int = 5,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create a pooled HTTP client for the Jaguar Flux endpoints.

    Args:
        timeout: Request timeout in seconds
        headers: Optional default headers for all requests
        max_connections: Maximum number of connections
        max_keepalive_connections: Maximum number of keepalive connections
        transport: Optional transport override (tests use an in-memory one)

    Returns:
        httpx.AsyncClient: A new client instance
    """
    limits = httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=max_keepalive_connections,
        keepalive_expiry=DEFAULT_KEEPALIVE_EXPIRY,
    )
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers=headers or {},
        limits=limits,
        http2=transport is None,  # HTTP/2 multiplexing for real connections
        transport=transport,
    )
    logger.debug(
        "http_client_created",
        max_connections=max_connections,
        max_keepalive=max_keepalive_connections,
    )
    return client
