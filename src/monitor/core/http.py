from functools import lru_cache

import httpx

from monitor.core.config import get_settings


@lru_cache
def create_http_client() -> httpx.AsyncClient:
    """Shared transport with the deadlines and pool limits from settings."""
    settings = get_settings().http
    timeout = httpx.Timeout(
        connect=settings.connect_timeout,
        read=settings.read_timeout,
        write=settings.write_timeout,
        pool=settings.pool_timeout,
    )
    limits = httpx.Limits(
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
        keepalive_expiry=settings.keepalive_expiry,
    )
    return httpx.AsyncClient(timeout=timeout, limits=limits)
