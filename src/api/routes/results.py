"""Pass-through endpoint for Comprehend results."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from loguru import logger

from src.infrastructure.comprehend import (
    ComprehendResultsClient,
    get_comprehend_client,
)

router = APIRouter(tags=["comprehend"])


@router.get("/getComprehendResults/")
async def get_comprehend_results(
    table_name: Annotated[str, Query(alias="tablename")],
    item_id: Annotated[str, Query(alias="id")],
    client: Annotated[ComprehendResultsClient, Depends(get_comprehend_client)],
) -> Response:
    """Return the upstream results document for ``id`` in ``tablename`` as-is."""
    logger.debug(
        "REST request to get Comprehend results : tablename={}, id={}",
        table_name,
        item_id,
    )
    body = await client.get_results(table_name, item_id)
    return Response(content=body, media_type="application/json")
