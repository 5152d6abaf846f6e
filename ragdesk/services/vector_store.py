"""
Vector store client: scored search against an Azure AI Search compatible index.

Responsibility: POST the vector query to indexes/{index}/docs/search, map the
`value` array into RetrievedChunk objects. The index's ranking is opaque here.
"""

import asyncio
import logging

import httpx
from pydantic import ValidationError

from ragdesk.agent.retry import CANCELLED_MESSAGE
from ragdesk.core.result import Result
from ragdesk.schemas.chat import RetrievedChunk, VectorSearchRequest

logger = logging.getLogger(__name__)


class VectorStoreClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        index_name: str,
        api_version: str = "2023-11-01",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._index_name = index_name
        self._api_version = api_version
        self._timeout = timeout
        self._transport = transport

    @property
    def search_url(self) -> str:
        return f"{self._base_url}/indexes/{self._index_name}/docs/search"

    async def search(
        self, request: VectorSearchRequest, cancel_event: asyncio.Event | None = None
    ) -> Result[list[RetrievedChunk]]:
        if cancel_event is not None and cancel_event.is_set():
            return Result.failure(CANCELLED_MESSAGE)

        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._api_key:
            headers["api-key"] = self._api_key
        payload = request.model_dump(by_alias=True, exclude_none=True)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.search_url,
                    params={"api-version": self._api_version},
                    json=payload,
                    headers=headers,
                )
            if response.status_code >= 400:
                logger.warning(
                    "Vector DB search error %s: %s", response.status_code, response.text[:200]
                )
                return Result.failure(f"Vector DB search failed with status {response.status_code}")
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Vector DB search request failed: %s", e)
            return Result.failure(f"An error occurred during Vector DB search: {e}")
        except ValueError as e:
            logger.warning("Vector DB search returned invalid JSON: %s", e)
            return Result.failure(f"Vector DB search returned invalid JSON: {e}")

        hits = data.get("value") if isinstance(data, dict) else None
        try:
            chunks = [RetrievedChunk.model_validate(h) for h in (hits or [])]
        except ValidationError as e:
            logger.warning("Vector DB search returned malformed hits: %s", e)
            return Result.failure(f"Vector DB search returned malformed hits: {e}")
        logger.info("[vector_store:search] OUT hits=%d", len(chunks))
        return Result.success(chunks)
