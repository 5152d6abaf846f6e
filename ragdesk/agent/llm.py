"""
Agent LLM: OpenAI embeddings and chat completions.

Thin adapter over AsyncOpenAI that reports every outcome as a Result, so the
answer pipeline never has to catch SDK exceptions.
"""

import asyncio
import logging

from openai import AsyncOpenAI, OpenAIError

from ragdesk.agent.retry import CANCELLED_MESSAGE
from ragdesk.core.result import Result
from ragdesk.schemas.chat import (
    ChatChoice,
    ChatCompletionResponse,
    ChatMessage,
    EmbeddingData,
    EmbeddingResponse,
)

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Embedding + completion provider backed by the OpenAI API (or a compatible base_url)."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        embed_model: str,
        chat_model: str,
        temperature: float = 0.2,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self._embed_model = embed_model
        self._chat_model = chat_model
        self._temperature = temperature

    async def create_embedding(
        self, text: str, cancel_event: asyncio.Event | None = None
    ) -> Result[EmbeddingResponse]:
        if cancel_event is not None and cancel_event.is_set():
            return Result.failure(CANCELLED_MESSAGE)
        logger.info("[llm:embed] IN  model=%s text_len=%d", self._embed_model, len(text))
        try:
            response = await self._client.embeddings.create(model=self._embed_model, input=text)
        except OpenAIError as e:
            logger.warning("[llm:embed] OpenAI embeddings call failed: %s", e)
            return Result.failure(f"OpenAI embeddings call failed: {e}")
        embedding = EmbeddingResponse(
            model=response.model or self._embed_model,
            data=[EmbeddingData(index=d.index, embedding=list(d.embedding)) for d in response.data],
        )
        logger.info("[llm:embed] OUT vectors=%d", len(embedding.data))
        return Result.success(embedding)

    async def create_chat_completion(
        self, messages: list[ChatMessage], cancel_event: asyncio.Event | None = None
    ) -> Result[ChatCompletionResponse]:
        if cancel_event is not None and cancel_event.is_set():
            return Result.failure(CANCELLED_MESSAGE)
        logger.info("[llm:chat] IN  model=%s messages=%d", self._chat_model, len(messages))
        try:
            response = await self._client.chat.completions.create(
                model=self._chat_model,
                messages=[{"role": m.role, "content": m.content} for m in messages],
                temperature=self._temperature,
            )
        except OpenAIError as e:
            logger.warning("[llm:chat] OpenAI chat completion failed: %s", e)
            return Result.failure(f"OpenAI chat completion failed: {e}")
        completion = ChatCompletionResponse(
            id=response.id or "",
            model=response.model or self._chat_model,
            choices=[
                ChatChoice(
                    message=ChatMessage(
                        role=c.message.role or "assistant",
                        content=c.message.content or "",
                    ),
                    finish_reason=c.finish_reason,
                )
                for c in response.choices
            ],
        )
        out = completion.first_content or ""
        logger.info("[llm:chat] OUT response_len=%d", len(out))
        logger.debug("[llm:chat] OUT response_full=%r", out)
        return Result.success(completion)
