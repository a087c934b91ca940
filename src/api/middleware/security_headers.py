"""Security headers added to every response."""

from collections.abc import Awaitable, Callable
from typing import Final

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.constants import PROFILES_PATH
from src.core.constants import DEFAULT_HSTS_MAX_AGE

SECURITY_HEADERS: Final[dict[str, str]] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": f"max-age={DEFAULT_HSTS_MAX_AGE}; includeSubDomains",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add ``SECURITY_HEADERS`` to every response.

    Profile responses also get ``Cache-Control: no-store`` unless the route
    set its own, since they carry names and email addresses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)

        response.headers.update(SECURITY_HEADERS)
        if request.url.path.startswith(PROFILES_PATH):
            response.headers.setdefault("Cache-Control", "no-store")

        return response
