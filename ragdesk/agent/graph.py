"""
LangGraph answer pipeline: project → embed → retrieve → judge → (clarify | escalate | generate).

Every terminal node writes `result`; every conditional edge ends the run as
soon as a result exists, so each terminal state and its handover flag is
built in exactly one place. The generate node loops on itself while the
parse / unwanted-handover retry budget lasts.
"""

import asyncio
import logging
from typing import TypedDict

from langgraph.graph import END, StateGraph

from ragdesk.agent.heuristics import (
    build_context,
    count_clarifications,
    has_reached_clarification_limit,
    is_all_escalation_tier,
    is_any_escalation_tier,
    should_clarify,
)
from ragdesk.agent.judge import CoverageJudge
from ragdesk.agent.parser import parse_model_response
from ragdesk.agent.prompts import user_with_context
from ragdesk.agent.retry import execute_with_retry
from ragdesk.core.config import RagOptions
from ragdesk.core.contracts import CompletionProvider, EmbeddingProvider, SearchProvider
from ragdesk.core.projects import to_filter_value
from ragdesk.core.result import Status
from ragdesk.schemas.chat import (
    ASSISTANT_ROLE,
    SYSTEM_ROLE,
    USER_ROLE,
    ChatCompletionResponse,
    ChatMessage,
    EmbeddingResponse,
    OrchestrationResult,
    RagRequest,
    RetrievedChunk,
)
from ragdesk.services.retrieval_service import retrieve_context

logger = logging.getLogger(__name__)

INVALID_PROJECT_ANSWER = "Invalid project ID."
EMBEDDING_FAILED_ANSWER = "Embedding failed"
RETRIEVAL_FAILED_ANSWER = "Context retrieval failed."
INTERNAL_ERROR_ANSWER = "An internal error occurred."
COMPLETION_FAILED_ANSWER = "Failed to get chat completion."
PARSE_FAILED_ANSWER = "Failed to parse model response."


class RagState(TypedDict, total=False):
    request: RagRequest
    cancel_event: asyncio.Event | None
    project_filter: str
    embedding: EmbeddingResponse
    retrieved: list[RetrievedChunk]
    context: str
    all_escalation_tier: bool
    any_escalation_tier: bool
    need_clarification: bool
    clarification: str
    attempt: int
    completion: ChatCompletionResponse
    result: OrchestrationResult


def _done_or(next_node: str):
    """Edge: stop when a terminal result was written, else go to next_node."""

    def route(state: RagState) -> str:
        return END if state.get("result") is not None else next_node

    return route


class RagOrchestrator:
    """Decides, per question, whether to answer, ask for clarification, or hand over to a human."""

    def __init__(
        self,
        *,
        embeddings: EmbeddingProvider,
        llm: CompletionProvider,
        search: SearchProvider,
        options: RagOptions | None = None,
        judge: CoverageJudge | None = None,
    ) -> None:
        self._embeddings = embeddings
        self._llm = llm
        self._search = search
        self._options = options or RagOptions()
        self._judge = judge or CoverageJudge(llm, self._options)
        self._graph = self.build_graph()

    @property
    def options(self) -> RagOptions:
        return self._options

    async def generate_answer(
        self, request: RagRequest, cancel_event: asyncio.Event | None = None
    ) -> OrchestrationResult:
        logger.info(
            "[run_agent] START question=%r history_len=%d project_id=%s",
            request.question,
            len(request.history),
            request.project_id,
        )
        initial: RagState = {"request": request, "cancel_event": cancel_event, "attempt": 0}
        final = await self._graph.ainvoke(initial)
        result: OrchestrationResult = final["result"]
        logger.info(
            "[run_agent] END handover=%s status=%s answer_len=%d",
            result.handover_to_human_needed,
            result.status.code.value,
            len(result.answer),
        )
        return result

    def build_graph(self):
        """
        Build and compile the answer graph.
        resolve_project → embed_question → retrieve_context → (escalate | judge_coverage)
        → (clarify | escalate | generate_answer ⟲) → END.
        """
        graph = StateGraph(RagState)

        graph.add_node("resolve_project", self._resolve_project)
        graph.add_node("embed_question", self._embed_question)
        graph.add_node("retrieve_context", self._retrieve_context)
        graph.add_node("judge_coverage", self._judge_coverage)
        graph.add_node("clarify", self._clarify)
        graph.add_node("escalate", self._escalate)
        graph.add_node("generate_answer", self._generate_answer)

        graph.set_entry_point("resolve_project")
        graph.add_conditional_edges(
            "resolve_project", _done_or("embed_question"), ["embed_question", END]
        )
        graph.add_conditional_edges(
            "embed_question", _done_or("retrieve_context"), ["retrieve_context", END]
        )
        graph.add_conditional_edges(
            "retrieve_context", self._route_after_retrieve, ["judge_coverage", "escalate", END]
        )
        graph.add_conditional_edges(
            "judge_coverage",
            self._route_after_judge,
            ["clarify", "escalate", "generate_answer", END],
        )
        graph.add_conditional_edges(
            "generate_answer", _done_or("generate_answer"), ["generate_answer", END]
        )
        graph.add_edge("clarify", END)
        graph.add_edge("escalate", END)

        return graph.compile()

    # --- result builders ---

    def _terminal(
        self,
        state: RagState,
        answer: str,
        status: Status,
        *,
        handover: bool,
        completion: ChatCompletionResponse | None = None,
    ) -> OrchestrationResult:
        """Failure result: input history is returned unchanged."""
        return OrchestrationResult(
            answer=answer,
            embedding=state.get("embedding"),
            retrieved_chunks=list(state.get("retrieved") or []),
            completion=completion,
            history=list(state["request"].history),
            handover_to_human_needed=handover,
            status=status,
        )

    def _with_turns(
        self,
        state: RagState,
        reply: str,
        *,
        handover: bool,
        completion: ChatCompletionResponse | None = None,
    ) -> OrchestrationResult:
        """Completed interaction: history gains the plain question and the user-facing reply."""
        request = state["request"]
        history = [
            *request.history,
            ChatMessage(role=USER_ROLE, content=request.question),
            ChatMessage(role=ASSISTANT_ROLE, content=reply),
        ]
        return OrchestrationResult(
            answer=reply,
            embedding=state.get("embedding"),
            retrieved_chunks=list(state.get("retrieved") or []),
            completion=completion,
            history=history,
            handover_to_human_needed=handover,
            status=Status.ok(),
        )

    def _escalation(
        self, state: RagState, completion: ChatCompletionResponse | None = None
    ) -> OrchestrationResult:
        return self._with_turns(
            state, self._options.escalation_answer, handover=True, completion=completion
        )

    # --- nodes ---

    async def _resolve_project(self, state: RagState) -> dict:
        project_id = state["request"].project_id
        resolved = to_filter_value(project_id)
        if not resolved.is_success:
            logger.warning("[graph:resolve_project] %s", resolved.error_message)
            return {
                "result": self._terminal(
                    state, INVALID_PROJECT_ANSWER, resolved.status, handover=False
                )
            }
        logger.info("[graph:resolve_project] OUT filter=%r", resolved.value)
        return {"project_filter": resolved.value}

    async def _embed_question(self, state: RagState) -> dict:
        question = state["request"].question
        logger.info("[graph:embed_question] IN  question_len=%d", len(question))
        embedded = await self._embeddings.create_embedding(question, state.get("cancel_event"))
        if not embedded.is_success:
            logger.warning("[graph:embed_question] embedding failed: %s", embedded.error_message)
            return {
                "result": self._terminal(
                    state, EMBEDDING_FAILED_ANSWER, embedded.status, handover=False
                )
            }
        if embedded.value is None or embedded.value.first_vector is None:
            logger.warning("[graph:embed_question] embedding failed: no embedding data returned")
            return {
                "result": self._terminal(
                    state,
                    EMBEDDING_FAILED_ANSWER,
                    Status.error("No embedding data returned"),
                    handover=False,
                )
            }
        logger.info("[graph:embed_question] OUT dim=%d", len(embedded.value.first_vector))
        return {"embedding": embedded.value}

    async def _retrieve_context(self, state: RagState) -> dict:
        vector = state["embedding"].first_vector or []
        retrieved = await retrieve_context(
            self._search,
            vector,
            state["project_filter"],
            self._options,
            state.get("cancel_event"),
        )
        if not retrieved.is_success:
            return {
                "result": self._terminal(
                    state, RETRIEVAL_FAILED_ANSWER, retrieved.status, handover=False
                )
            }
        chunks = retrieved.value or []
        label = self._options.escalation_label
        all_tier = is_all_escalation_tier(chunks, label)
        any_tier = is_any_escalation_tier(chunks, label)
        logger.info(
            "[graph:retrieve_context] OUT chunks=%d all_escalation_tier=%s any_escalation_tier=%s",
            len(chunks),
            all_tier,
            any_tier,
        )
        return {
            "retrieved": chunks,
            "context": build_context(chunks),
            "all_escalation_tier": all_tier,
            "any_escalation_tier": any_tier,
        }

    def _route_after_retrieve(self, state: RagState) -> str:
        if state.get("result") is not None:
            return END
        if state.get("all_escalation_tier"):
            logger.info("[graph:route_after_retrieve] every chunk is escalation-tier -> escalate")
            return "escalate"
        return "judge_coverage"

    async def _judge_coverage(self, state: RagState) -> dict:
        question = state["request"].question
        verdict = await self._judge.evaluate(
            question, state.get("context") or "", state.get("cancel_event")
        )
        if not verdict.is_success:
            logger.warning("[graph:judge_coverage] judge failed: %s", verdict.error_message)
            return {
                "result": self._terminal(
                    state, INTERNAL_ERROR_ANSWER, verdict.status, handover=True
                )
            }
        judge_clarify, reason = verdict.value
        heuristic_clarify = should_clarify(state.get("retrieved") or [], self._options)
        need = judge_clarify or heuristic_clarify
        logger.info(
            "[graph:judge_coverage] OUT judge_clarify=%s heuristic_clarify=%s -> need_clarification=%s",
            judge_clarify,
            heuristic_clarify,
            need,
        )
        return {
            "need_clarification": need,
            "clarification": reason or self._options.default_clarification,
        }

    def _route_after_judge(self, state: RagState) -> str:
        if state.get("result") is not None:
            return END
        if not state.get("need_clarification"):
            return "generate_answer"
        history = state["request"].history
        so_far = count_clarifications(history, self._options.clarification_tag)
        limit = self._options.max_clarifications
        if has_reached_clarification_limit(so_far, limit):
            logger.info(
                "[graph:route_after_judge] clarifications=%d max=%d -> escalate", so_far, limit
            )
            return "escalate"
        logger.info("[graph:route_after_judge] clarifications=%d max=%d -> clarify", so_far, limit)
        return "clarify"

    async def _clarify(self, state: RagState) -> dict:
        text = f"{self._options.clarification_tag} {state.get('clarification') or ''}".rstrip()
        logger.info("[graph:clarify] OUT clarification=%r", text)
        return {"result": self._with_turns(state, text, handover=False)}

    async def _escalate(self, state: RagState) -> dict:
        logger.info("[graph:escalate] handing over to a human")
        return {"result": self._escalation(state, state.get("completion"))}

    async def _generate_answer(self, state: RagState) -> dict:
        request = state["request"]
        cancel_event = state.get("cancel_event")
        attempt = state.get("attempt") or 0
        max_retries = self._options.max_retries

        messages = [
            ChatMessage(role=SYSTEM_ROLE, content=self._options.answer_system_prompt),
            *request.history,
            ChatMessage(
                role=USER_ROLE,
                content=user_with_context(request.question, state.get("context") or ""),
            ),
        ]
        logger.info(
            "[graph:generate_answer] IN  attempt=%d messages=%d", attempt + 1, len(messages)
        )
        call = await execute_with_retry(
            lambda: self._llm.create_chat_completion(messages, cancel_event),
            max_retries=max_retries,
            cancel_event=cancel_event,
        )
        if not call.is_success:
            logger.warning("[graph:generate_answer] completion failed: %s", call.error_message)
            return {
                "result": self._terminal(
                    state, COMPLETION_FAILED_ANSWER, call.status, handover=True
                )
            }

        completion = call.value
        parsed = parse_model_response(completion.first_content if completion else None)
        if not parsed.is_success:
            logger.warning(
                "[graph:generate_answer] attempt=%d parse failed: %s",
                attempt + 1,
                parsed.error_message,
            )
            if attempt >= max_retries:
                return {
                    "result": self._terminal(
                        state,
                        PARSE_FAILED_ANSWER,
                        parsed.status,
                        handover=True,
                        completion=completion,
                    )
                }
            return {"attempt": attempt + 1, "completion": completion}

        answer, handover = parsed.value
        if handover and state.get("any_escalation_tier"):
            logger.info(
                "[graph:generate_answer] attempt=%d model flagged escalation-tier reliance",
                attempt + 1,
            )
            if attempt >= max_retries:
                return {"result": self._escalation(state, completion)}
            return {"attempt": attempt + 1, "completion": completion}

        logger.info(
            "[graph:generate_answer] OUT answer_len=%d handover=%s", len(answer), handover
        )
        return {"result": self._with_turns(state, answer, handover=handover, completion=completion)}

