"""
Collaborator capabilities consumed by the answer pipeline.

Any concrete provider (HTTP adapter, test fake) that matches these shapes can
be plugged into the orchestrator. Cancellation is an optional asyncio.Event
checked before each outbound call.
"""

import asyncio
from typing import Protocol

from ragdesk.core.result import Result
from ragdesk.schemas.chat import (
    ChatCompletionResponse,
    ChatMessage,
    EmbeddingResponse,
    RetrievedChunk,
    VectorSearchRequest,
)


class EmbeddingProvider(Protocol):
    async def create_embedding(
        self, text: str, cancel_event: asyncio.Event | None = None
    ) -> Result[EmbeddingResponse]: ...


class CompletionProvider(Protocol):
    async def create_chat_completion(
        self, messages: list[ChatMessage], cancel_event: asyncio.Event | None = None
    ) -> Result[ChatCompletionResponse]: ...


class SearchProvider(Protocol):
    async def search(
        self, request: VectorSearchRequest, cancel_event: asyncio.Event | None = None
    ) -> Result[list[RetrievedChunk]]: ...
