"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console adapter)
- Redis client (shared connection pool, decoded responses)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from livefeed.core.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from livefeed.domain.protocols.logger_protocol import LoggerProtocol


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from livefeed.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(
        use_json=not settings.is_development,
        level="DEBUG" if settings.debug else settings.log_level,
    )


@lru_cache()
def get_redis() -> "Redis":
    """Get the shared async Redis client (app-scoped).

    Responses are decoded to str so stream fields and entry ids need no
    further conversion. The socket timeout outlasts the XREADGROUP block so
    a quiet stream is not mistaken for a dead connection.

    Returns:
        Redis client backed by a connection pool.
    """
    from redis.asyncio import ConnectionPool, Redis

    settings = get_settings()
    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=settings.sse_block_ms / 1000 + 5,
        retry_on_timeout=True,
        socket_keepalive=True,
    )
    return Redis(connection_pool=pool)
