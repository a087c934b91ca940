"""Request-scoped correlation and request identifiers."""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class RequestContext:
    """Async-safe holder for the correlation ID of the current request."""

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Store the correlation ID for the current context."""
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Return the correlation ID for the current context, if any."""
        return _correlation_id_var.get()

    @staticmethod
    def clear() -> None:
        """Reset the context at the end of a request."""
        _correlation_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a correlation ID (a UUID4 string).

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a request ID in the form ``req-<uuid4>``.

    Examples:
        >>> generate_request_id().startswith("req-")
        True
    """
    return f"req-{uuid.uuid4()}"
