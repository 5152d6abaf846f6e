"""
Shared fakes for the answer pipeline: in-memory embedding, search and chat providers.

No network: every provider returns canned Results and records what it was asked.
"""

from types import SimpleNamespace

import pytest

from ragdesk.agent.graph import RagOrchestrator
from ragdesk.core.config import RagOptions
from ragdesk.core.result import Result
from ragdesk.schemas.chat import (
    ChatChoice,
    ChatCompletionResponse,
    ChatMessage,
    EmbeddingData,
    EmbeddingResponse,
    RetrievedChunk,
)

JUDGE_PROMPT_PREFIX = "You are a coverage judge"


def completion_of(text: str) -> ChatCompletionResponse:
    return ChatCompletionResponse(
        id="chatcmpl-test",
        model="gpt-test",
        choices=[ChatChoice(message=ChatMessage(role="assistant", content=text), finish_reason="stop")],
    )


class FakeEmbeddings:
    def __init__(self, result: Result[EmbeddingResponse] | None = None) -> None:
        self.result = result or Result.success(
            EmbeddingResponse(data=[EmbeddingData(index=0, embedding=[0.1, 0.2])], model="embed-test")
        )
        self.calls: list[str] = []

    async def create_embedding(self, text, cancel_event=None):
        self.calls.append(text)
        return self.result


class FakeSearch:
    def __init__(self, result: Result[list[RetrievedChunk]]) -> None:
        self.result = result
        self.requests = []

    async def search(self, request, cancel_event=None):
        self.requests.append(request)
        return self.result


class FakeLLM:
    """
    Routes judge calls and answer calls to separate reply queues.
    A queue pops until one reply is left, then keeps returning it.
    Replies are raw text (wrapped as a successful completion) or a Result.
    """

    def __init__(self, *, judge=None, answers=None) -> None:
        self.judge_replies = list(judge or ["YES"])
        self.answer_replies = list(answers or [])
        self.judge_calls: list[list[ChatMessage]] = []
        self.answer_calls: list[list[ChatMessage]] = []

    async def create_chat_completion(self, messages, cancel_event=None):
        if messages and messages[0].content.startswith(JUDGE_PROMPT_PREFIX):
            self.judge_calls.append(list(messages))
            queue = self.judge_replies
        else:
            self.answer_calls.append(list(messages))
            queue = self.answer_replies
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Result):
            return reply
        return Result.success(completion_of(reply))


def chunk(content: str, type_: str = "N1", score: float | None = 0.9) -> RetrievedChunk:
    return RetrievedChunk(content=content, type=type_, score=score)


@pytest.fixture
def make_chunk():
    return chunk


@pytest.fixture
def build_pipeline():
    """Factory: wire a RagOrchestrator over fakes and return it with the fakes."""

    def _build(
        *,
        chunks: list[RetrievedChunk] | None = None,
        search_result: Result | None = None,
        embedding_result: Result | None = None,
        judge=None,
        answers=None,
        options: RagOptions | None = None,
    ) -> SimpleNamespace:
        embeddings = FakeEmbeddings(embedding_result)
        search = FakeSearch(search_result or Result.success(list(chunks or [])))
        llm = FakeLLM(judge=judge, answers=answers)
        orchestrator = RagOrchestrator(
            embeddings=embeddings,
            llm=llm,
            search=search,
            options=options or RagOptions(),
        )
        return SimpleNamespace(
            orchestrator=orchestrator, embeddings=embeddings, search=search, llm=llm
        )

    return _build
