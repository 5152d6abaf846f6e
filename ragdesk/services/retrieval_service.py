"""
Retrieval: build the scored vector query and run it against the search provider.

Responsibility: Turn a question embedding plus a project filter into the
provider search request, issue one call (no retry) and log what came back.
"""

import asyncio
import logging

from ragdesk.core.config import RagOptions
from ragdesk.core.contracts import SearchProvider
from ragdesk.core.result import Result
from ragdesk.schemas.chat import RetrievedChunk, VectorQuery, VectorSearchRequest

logger = logging.getLogger(__name__)


def build_search_request(
    vector: list[float], project_filter: str, options: RagOptions
) -> VectorSearchRequest:
    """Top-k nearest neighbours over the embeddings field, filtered to one project."""
    return VectorSearchRequest(
        count=True,
        select=options.search_select,
        top=options.search_top,
        filter=f"projectName eq '{project_filter}'",
        vector_queries=[
            VectorQuery(vector=vector, k=options.vector_k, fields=options.vector_field),
        ],
    )


async def retrieve_context(
    search_provider: SearchProvider,
    vector: list[float],
    project_filter: str,
    options: RagOptions,
    cancel_event: asyncio.Event | None = None,
) -> Result[list[RetrievedChunk]]:
    logger.info("[retrieval:retrieve_context] IN  dim=%d filter=%r", len(vector), project_filter)
    request = build_search_request(vector, project_filter, options)
    result = await search_provider.search(request, cancel_event)
    if not result.is_success:
        logger.warning("[retrieval:retrieve_context] search failed: %s", result.error_message)
        return result
    chunks = result.value or []
    logger.info(
        "[retrieval:retrieve_context] OUT chunks=%d types=%s scores=%s",
        len(chunks),
        [c.type for c in chunks[:5]],
        [round(c.score or 0.0, 4) for c in chunks[:5]],
    )
    return Result.success(chunks)
