"""Type aliases for loosely structured data passed between layers."""

from typing import Any

# Details attached to exceptions and returned to clients; must stay
# JSON-serializable since they end up in log records and error bodies.
type ErrorContext = dict[str, Any]
