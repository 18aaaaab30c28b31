"""Redis key naming conventions for SSE streams.

Key Patterns:
    <configured key>             - Shared broadcast stream (e.g. sse:stream:broadcast)
    sse:stream:tenant:{tenant}   - Per-tenant stream selected by the client-id header
    sse:active_connections       - Counter of open SSE connections
"""

import re

from livefeed.core.constants import SSE_KEY_PREFIX

_TENANT_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{1,64}$")


class SSEStreamKeys:
    """Centralized Redis key generation for SSE.

    Example:
        >>> SSEStreamKeys.tenant_stream("acme")
        'sse:stream:tenant:acme'
    """

    @staticmethod
    def tenant_stream(tenant: str) -> str:
        """Get the stream key dedicated to one tenant.

        Args:
            tenant: Tenant identifier (validated by is_valid_tenant).

        Returns:
            Stream key for that tenant.
        """
        return f"{SSE_KEY_PREFIX}:stream:tenant:{tenant}"

    @staticmethod
    def resolve(default_stream: str, tenant: str | None) -> str:
        """Pick the tenant stream when a tenant is given, else the default."""
        if tenant:
            return SSEStreamKeys.tenant_stream(tenant)
        return default_stream

    @staticmethod
    def active_connections() -> str:
        """Get the active connection counter key."""
        return f"{SSE_KEY_PREFIX}:active_connections"

    @staticmethod
    def is_valid_tenant(tenant: str) -> bool:
        """Tenant ids are short and limited to key-safe characters."""
        return bool(_TENANT_PATTERN.match(tenant))

    @staticmethod
    def parse_tenant_from_stream(stream: str) -> str | None:
        """Extract the tenant id from a tenant stream key.

        Returns:
            Tenant id, or None for any other key.
        """
        prefix = f"{SSE_KEY_PREFIX}:stream:tenant:"
        if stream.startswith(prefix) and len(stream) > len(prefix):
            return stream[len(prefix) :]
        return None
