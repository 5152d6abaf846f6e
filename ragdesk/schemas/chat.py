"""
Schemas for the answer pipeline: conversation turns, provider payloads,
retrieved chunks, the inbound request and the orchestration result.
"""

from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ragdesk.core.result import Status

SYSTEM_ROLE = "system"
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


class ChatMessage(BaseModel):
    """One conversation turn."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(..., description="user, assistant or system.")
    content: str = ""


# --- Embeddings ---

class EmbeddingData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    embedding: list[float] = Field(default_factory=list)


class EmbeddingResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[EmbeddingData] = Field(default_factory=list)
    model: str = ""

    @property
    def first_vector(self) -> list[float] | None:
        if not self.data or not self.data[0].embedding:
            return None
        return self.data[0].embedding


# --- Chat completions ---

class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: ChatMessage
    finish_reason: str | None = None


class ChatCompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    model: str = ""
    choices: list[ChatChoice] = Field(default_factory=list)

    @property
    def first_content(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].message.content


# --- Vector search ---

class VectorQuery(BaseModel):
    kind: str = "vector"
    vector: list[float]
    k: int
    fields: str


class VectorSearchRequest(BaseModel):
    """Search body; dump with by_alias=True for the wire."""

    model_config = ConfigDict(populate_by_name=True)

    count: bool = True
    select: str
    top: int
    filter: str | None = None
    vector_queries: list[VectorQuery] = Field(default_factory=list, alias="vectorQueries")


class RetrievedChunk(BaseModel):
    """A scored unit of retrieved content. `type` is the classification label (e.g. N1, N2)."""

    model_config = ConfigDict(extra="ignore")

    content: str = ""
    type: str = ""
    score: float | None = Field(
        default=None, validation_alias=AliasChoices("@search.score", "score")
    )

    @field_validator("content", "type", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        # Index fields may come back as JSON null; a null label is not escalation-tier.
        return "" if v is None else v


# --- Orchestration ---

class RagRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str
    history: list[ChatMessage] = Field(default_factory=list)
    project_id: UUID | None = None


class OrchestrationResult(BaseModel):
    """Outcome of one pass through the answer pipeline, for every terminal state."""

    answer: str
    embedding: EmbeddingResponse | None = None
    retrieved_chunks: list[RetrievedChunk] = Field(default_factory=list)
    completion: ChatCompletionResponse | None = None
    history: list[ChatMessage] = Field(default_factory=list)
    handover_to_human_needed: bool = False
    status: Status = Field(default_factory=Status.ok)
