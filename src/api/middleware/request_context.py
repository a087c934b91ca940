"""Correlation ID propagation.

The ``X-Correlation-ID`` request header is reused when present, otherwise a
new UUID4 is generated. The ID is stored in ``RequestContext``, bound to
every Loguru record emitted while handling the request, and echoed back in
the response headers.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.api.constants import CORRELATION_ID_HEADER
from src.core.context import RequestContext, generate_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Set up the correlation ID for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)

        try:
            with logger.contextualize(correlation_id=correlation_id):
                response = await call_next(request)
        finally:
            RequestContext.clear()

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
