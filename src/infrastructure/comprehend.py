"""HTTP client for the API Gateway that serves Comprehend results.

Each lookup is a single GET to ``<base_uri>microComprehend`` with the table
name and item id as query parameters. The response body is handed back
untouched; there are no retries.
"""

import httpx
from loguru import logger

from src.core.config import ComprehendConfig, get_settings
from src.core.exceptions import ExternalServiceError
from src.core.observability import (
    RESULTS_ITEM_ATTR,
    RESULTS_LOOKUP_SPAN,
    RESULTS_TABLE_ATTR,
    UPSTREAM_STATUS_ATTR,
    trace_operation,
)
from src.infrastructure.constants import COMPREHEND_RESULTS_PATH

COMPREHEND_SERVICE = "comprehend"

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "*/*",
}


class ComprehendResultsClient:
    """Read-through client for Comprehend results.

    Args:
        config: Base URI and timeout of the upstream API.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        config: ComprehendConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_uri = config.base_uri
        self.timeout = config.timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_uri,
                timeout=self.timeout,
                headers=DEFAULT_HEADERS,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def get_results(self, table_name: str, item_id: str) -> str:
        """Fetch the raw results document for one item.

        Args:
            table_name: DynamoDB table holding the results.
            item_id: Identifier of the analysed item.

        Returns:
            str: Upstream response body, unchanged.

        Raises:
            ExternalServiceError: On transport failure or non-2xx response.
        """
        params = {"tablename": table_name, "id": item_id}
        logger.debug("Requesting Comprehend results", **params)

        with trace_operation(
            RESULTS_LOOKUP_SPAN,
            {RESULTS_TABLE_ATTR: table_name, RESULTS_ITEM_ATTR: item_id},
        ) as span:
            try:
                response = await self.get_client().get(
                    COMPREHEND_RESULTS_PATH, params=params
                )
                span.set_attribute(UPSTREAM_STATUS_ATTR, response.status_code)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ExternalServiceError(
                    f"Comprehend results API returned {e.response.status_code}",
                    service=COMPREHEND_SERVICE,
                    status_code=e.response.status_code,
                    context={"tablename": table_name, "id": item_id},
                    cause=e,
                ) from e
            except httpx.RequestError as e:
                raise ExternalServiceError(
                    f"Comprehend results API request failed: {type(e).__name__}",
                    service=COMPREHEND_SERVICE,
                    context={"tablename": table_name, "id": item_id},
                    cause=e,
                ) from e

        return response.text


class _ClientHolder:
    def __init__(self) -> None:
        self.client: ComprehendResultsClient | None = None


_holder = _ClientHolder()


def get_comprehend_client() -> ComprehendResultsClient:
    """Return the process-wide results client."""
    if _holder.client is None:
        _holder.client = ComprehendResultsClient(get_settings().comprehend_config)
    return _holder.client


async def close_comprehend_client() -> None:
    """Close the process-wide results client. Called on shutdown."""
    if _holder.client is not None:
        await _holder.client.close()
        _holder.client = None
