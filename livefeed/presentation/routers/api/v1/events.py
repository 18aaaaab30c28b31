"""SSE events endpoints.

Endpoints:
    GET    /api/v1/events             Server-Sent Events stream
    GET    /api/v1/events/status      Stream health, connection count, config
    DELETE /api/v1/events/backlog     Clear retained entries (groups survive)
    POST   /api/v1/events/broadcasts  Append an operator test event

Every endpoint honours the tenant header (`client-id` by default): when
present the request targets `sse:stream:tenant:<id>` instead of the shared
stream.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from livefeed.core.config import Settings, get_settings
from livefeed.core.container import (
    get_connection_counter,
    get_consumer_groups,
    get_event_publisher,
    get_logger,
    get_stream_monitor,
)
from livefeed.core.enums import ErrorCode
from livefeed.core.errors import ValidationError
from livefeed.core.result import Failure, Result, Success
from livefeed.domain.protocols.logger_protocol import LoggerProtocol
from livefeed.domain.value_objects import new_session_id
from livefeed.infrastructure.streaming import (
    RedisConnectionCounter,
    RedisConsumerGroups,
    RedisEventPublisher,
    SSEStreamKeys,
    StreamMonitor,
)
from livefeed.presentation.api.middleware.trace_middleware import get_trace_id
from livefeed.presentation.routers.api.v1.errors import ErrorResponseBuilder
from livefeed.presentation.sse import SSEResponse, SSESession
from livefeed.schemas.stream_schemas import (
    BacklogClearedResponse,
    BroadcastRequest,
    BroadcastResponse,
    StreamStatusResponse,
)

events_router = APIRouter(prefix="/events", tags=["Events"])


def _resolve_tenant(
    request: Request, settings: Settings
) -> Result[str | None, ValidationError]:
    tenant = request.headers.get(settings.sse_tenant_header)
    if tenant is None or not tenant.strip():
        return Success(value=None)
    tenant = tenant.strip()
    if not SSEStreamKeys.is_valid_tenant(tenant):
        return Failure(
            error=ValidationError(
                code=ErrorCode.VALIDATION_FAILED,
                message="Tenant id may only contain letters, digits, '.', '_' and '-'",
                field=settings.sse_tenant_header,
            )
        )
    return Success(value=tenant)


@events_router.get("", response_model=None)
async def stream_events(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    consumer_groups: Annotated[RedisConsumerGroups, Depends(get_consumer_groups)],
    counter: Annotated[RedisConnectionCounter, Depends(get_connection_counter)],
    logger: Annotated[LoggerProtocol, Depends(get_logger)],
) -> Response:
    """Stream real-time events via Server-Sent Events (SSE).

    The connection starts at the stream tail: only events appended after it
    opened are delivered, in append order. The first frames are a `retry:`
    hint and a `connected` event carrying the session id; idle periods are
    filled with `ping` events. The server recycles a connection after its
    maximum lifetime and the client is expected to reconnect.

    Returns:
        SSEResponse, or a 400 problem response for an invalid tenant header.
    """
    tenant_result = _resolve_tenant(request, settings)
    if isinstance(tenant_result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            tenant_result.error, request, get_trace_id()
        )

    stream = SSEStreamKeys.resolve(settings.sse_stream_key, tenant_result.value)
    session_id = new_session_id()

    last_event_id = request.headers.get("last-event-id")
    if last_event_id:
        # Connections always start at the tail; the id is informational only
        logger.debug(
            "sse_reconnect_requested",
            session_id=session_id,
            last_event_id=last_event_id,
        )

    session = SSESession(
        session_id=session_id,
        stream=stream,
        consumer_groups=consumer_groups,
        counter=counter,
        logger=logger.bind(trace_id=get_trace_id()),
        block_ms=settings.sse_block_ms,
        read_count=settings.sse_read_count,
        heartbeat_interval=settings.sse_heartbeat_interval_seconds,
        write_timeout=settings.sse_write_timeout_seconds,
        lifetime=settings.sse_connection_lifetime_seconds,
        max_read_failures=settings.sse_max_read_failures,
        retry_ms=settings.sse_retry_interval_ms,
    )
    return SSEResponse(session, headers={"X-SSE-Session-Id": session_id})


@events_router.get("/status", response_model=StreamStatusResponse)
async def get_stream_status(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    monitor: Annotated[StreamMonitor, Depends(get_stream_monitor)],
) -> Response | StreamStatusResponse:
    """Report stream length, consumer groups, open connections and config.

    An unreachable Redis is reported in the body (`healthy: false`,
    `active_connections: -1`) rather than as an HTTP error.
    """
    tenant_result = _resolve_tenant(request, settings)
    if isinstance(tenant_result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            tenant_result.error, request, get_trace_id()
        )
    stream = SSEStreamKeys.resolve(settings.sse_stream_key, tenant_result.value)

    result = await monitor.check_health(stream)
    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            result.error, request, get_trace_id()
        )
    return StreamStatusResponse.from_status(stream, result.value, settings)


@events_router.delete("/backlog", response_model=BacklogClearedResponse)
async def clear_backlog(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    monitor: Annotated[StreamMonitor, Depends(get_stream_monitor)],
) -> Response | BacklogClearedResponse:
    """Remove every retained entry from the stream.

    Consumer groups and their cursors survive, so open connections keep
    streaming whatever is appended next.
    """
    tenant_result = _resolve_tenant(request, settings)
    if isinstance(tenant_result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            tenant_result.error, request, get_trace_id()
        )
    stream = SSEStreamKeys.resolve(settings.sse_stream_key, tenant_result.value)

    result = await monitor.clear_backlog(stream)
    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            result.error, request, get_trace_id()
        )
    return BacklogClearedResponse(stream=stream, removed=result.value)


@events_router.post(
    "/broadcasts",
    response_model=BroadcastResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_broadcast(
    request: Request,
    body: BroadcastRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    publisher: Annotated[RedisEventPublisher, Depends(get_event_publisher)],
) -> Response | BroadcastResponse:
    """Append an operator test event; every open connection receives it."""
    tenant_result = _resolve_tenant(request, settings)
    if isinstance(tenant_result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            tenant_result.error, request, get_trace_id()
        )
    tenant = tenant_result.value

    result = await publisher.append(body.event_type, body.payload, tenant=tenant)
    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(
            result.error, request, get_trace_id()
        )
    return BroadcastResponse(
        entry_id=result.value,
        stream=SSEStreamKeys.resolve(publisher.stream_key, tenant),
        event_type=body.event_type,
    )
