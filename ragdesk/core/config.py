"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
The decision engine never reads these globals directly: it receives a
RagOptions value built by load_rag_options().
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from ragdesk.agent.prompts import ANSWER_SYSTEM_PROMPT, COVERAGE_JUDGE_SYSTEM_PROMPT

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


# OpenAI (embeddings + chat completions)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_BASE_URL: str = (
    os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
    or "https://api.openai.com/v1"
)
OPENAI_EMBED_MODEL: str = (
    os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-large").strip()
    or "text-embedding-3-large"
)
OPENAI_CHAT_MODEL: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o").strip() or "gpt-4o"
CHAT_TEMPERATURE: float = _env_float("CHAT_TEMPERATURE", 0.2)

# Vector index (Azure AI Search compatible REST API)
VECTOR_DB_URL: str = os.getenv("VECTOR_DB_URL", "").strip()
VECTOR_DB_API_KEY: str = os.getenv("VECTOR_DB_API_KEY", "").strip()
VECTOR_DB_INDEX: str = os.getenv("VECTOR_DB_INDEX", "").strip()
VECTOR_DB_API_VERSION: str = (
    os.getenv("VECTOR_DB_API_VERSION", "2023-11-01").strip() or "2023-11-01"
)

# API timeouts (seconds)
LLM_API_TIMEOUT: float = _env_float("LLM_API_TIMEOUT", 60.0)
SEARCH_API_TIMEOUT: float = _env_float("SEARCH_API_TIMEOUT", 30.0)

# Relevance gate (tuning these changes how often the user is asked to clarify)
TOP_SCORE_THRESHOLD: float = _env_float("TOP_SCORE_THRESHOLD", 0.45)
AVG_TOP3_SCORE_THRESHOLD: float = _env_float("AVG_TOP3_SCORE_THRESHOLD", 0.40)

# Conversation budgets
MAX_CLARIFICATIONS: int = _env_int("MAX_CLARIFICATIONS", 2)
MAX_RETRIES: int = _env_int("MAX_RETRIES", 2)

# Vector query shape
VECTOR_K: int = 3
VECTOR_FIELD: str = "embeddings"
SEARCH_TOP: int = 10
SEARCH_SELECT: str = "content,type"

CLARIFICATION_TAG: str = "[clarification]"
ESCALATION_LABEL: str = "N2"
ESCALATION_ANSWER: str = "I need to hand this over to a human specialist for further assistance."
DEFAULT_CLARIFICATION: str = (
    "I can't find a confident answer in my internal search. "
    "Could you add more detail or rephrase your question?"
)


@dataclass(frozen=True)
class RagOptions:
    """Policy knobs for one orchestrator instance."""

    top_score_threshold: float = 0.45
    avg_top3_score_threshold: float = 0.40
    max_clarifications: int = 2
    max_retries: int = 2
    clarification_tag: str = CLARIFICATION_TAG
    escalation_label: str = ESCALATION_LABEL
    escalation_answer: str = ESCALATION_ANSWER
    default_clarification: str = DEFAULT_CLARIFICATION
    judge_system_prompt: str = COVERAGE_JUDGE_SYSTEM_PROMPT
    answer_system_prompt: str = ANSWER_SYSTEM_PROMPT
    vector_k: int = VECTOR_K
    vector_field: str = VECTOR_FIELD
    search_top: int = SEARCH_TOP
    search_select: str = SEARCH_SELECT


def load_rag_options() -> RagOptions:
    """Build RagOptions from the environment-backed constants above."""
    return RagOptions(
        top_score_threshold=TOP_SCORE_THRESHOLD,
        avg_top3_score_threshold=AVG_TOP3_SCORE_THRESHOLD,
        max_clarifications=MAX_CLARIFICATIONS,
        max_retries=MAX_RETRIES,
    )
