"""Schemas for the ask/query endpoints."""

from uuid import UUID

from pydantic import BaseModel, Field

from ragdesk.schemas.chat import ChatMessage, OrchestrationResult, RetrievedChunk


class AskRequest(BaseModel):
    """Request body for POST /rag/ask. The caller owns and re-sends the history."""

    question: str = Field(..., min_length=1, description="User question.")
    history: list[ChatMessage] = Field(default_factory=list, description="Prior turns, oldest first.")
    project_id: UUID | None = Field(None, description="Project whose documents are searched.")


class SessionQueryRequest(BaseModel):
    """Request body for POST /query. History is stored server-side by session_id."""

    question: str = Field(..., min_length=1, description="User question.")
    session_id: str = Field(..., min_length=1, description="Session ID; chat history is kept on the server.")
    project_id: UUID | None = Field(None, description="Project whose documents are searched.")


class AskResponse(BaseModel):
    """Response for POST /rag/ask and POST /query."""

    answer: str = Field(..., description="Answer, clarification question, escalation notice or error placeholder.")
    handover_to_human_needed: bool = Field(False, description="True when a human must take over.")
    history: list[ChatMessage] = Field(default_factory=list, description="Updated conversation history.")
    retrieved_chunks: list[RetrievedChunk] = Field(default_factory=list, description="Chunks the answer was grounded on.")
    ok: bool = Field(True, description="False when the pipeline ended in a failure state.")
    error_message: str | None = Field(None, description="Original failure message, for logging.")

    @classmethod
    def from_result(cls, result: OrchestrationResult) -> "AskResponse":
        return cls(
            answer=result.answer,
            handover_to_human_needed=result.handover_to_human_needed,
            history=result.history,
            retrieved_chunks=result.retrieved_chunks,
            ok=result.status.is_ok,
            error_message=result.status.error_message,
        )


class EmbeddingProbeRequest(BaseModel):
    input: str = Field(..., min_length=1, description="Text to embed.")
