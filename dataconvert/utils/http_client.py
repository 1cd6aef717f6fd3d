"""
Centralized HTTP client factory for outbound calls.

The only outbound dependency is the generative assist backend. Clients are
created once per application lifespan and closed on shutdown. There is no
retry layer: an assisted call that fails falls back to the native conversion
path instead.
"""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ServiceType(Enum):
    """Service types for HTTP client configuration."""
    DEFAULT = "default"
    ASSIST = "assist"


class HTTPClientFactory:
    """
    Factory for creating and managing HTTP clients.

    Provides consistent connection pooling and per-service timeouts.
    """

    def __init__(self):
        self._clients: Dict[ServiceType, httpx.AsyncClient] = {}
        self._limits = None

    def _get_connection_limits(self) -> httpx.Limits:
        if self._limits is None:
            self._limits = httpx.Limits(
                max_keepalive_connections=20,
                max_connections=100,
                keepalive_expiry=30.0
            )
        return self._limits

    def _get_timeout(self, service_type: ServiceType, read_timeout: Optional[float]) -> httpx.Timeout:
        if service_type == ServiceType.ASSIST:
            # Prompts carry the whole pasted document
            return httpx.Timeout(connect=5.0, read=read_timeout, write=60.0, pool=5.0)
        return httpx.Timeout(connect=5.0, read=read_timeout, write=30.0, pool=5.0)

    def create_client(
        self,
        service_type: ServiceType = ServiceType.DEFAULT,
        read_timeout: Optional[float] = 30.0,
        **overrides
    ) -> httpx.AsyncClient:
        """
        Create an HTTP client with service-specific settings.

        Args:
            service_type: Type of service the client will be used for
            read_timeout: Seconds to wait for the response body
            **overrides: Override default client configuration (e.g. ``transport``)

        Returns:
            Configured AsyncClient instance
        """
        config = {
            'timeout': self._get_timeout(service_type, read_timeout),
            'limits': self._get_connection_limits(),
            'follow_redirects': False,
        }
        config.update(overrides)

        client = httpx.AsyncClient(**config)
        self._clients[service_type] = client
        return client

    def get_client(self, service_type: ServiceType) -> Optional[httpx.AsyncClient]:
        """Get an existing client for a service type."""
        return self._clients.get(service_type)

    async def close_all_clients(self):
        """Close all managed clients."""
        for client in self._clients.values():
            try:
                await client.aclose()
            except Exception as e:
                logger.warning(f"Error closing HTTP client: {e}")

        self._clients.clear()


# Global factory instance
_http_factory = HTTPClientFactory()


def get_http_client_factory() -> HTTPClientFactory:
    """Get the global HTTP client factory instance."""
    return _http_factory


@asynccontextmanager
async def lifespan_http_clients(factory: Optional[HTTPClientFactory] = None):
    """
    Context manager for HTTP client lifecycle management.

    Use this in FastAPI lifespan events to ensure proper client cleanup.
    """
    factory = factory or _http_factory
    try:
        yield factory
    finally:
        await factory.close_all_clients()
