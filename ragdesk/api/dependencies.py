"""
FastAPI dependency wiring: build the orchestrator and its providers from config.

Responsibility: Turn env-backed settings into concrete providers once per
process. Misconfiguration surfaces as ServiceUnavailableError (HTTP 503).
"""

import logging
from functools import lru_cache

from ragdesk.agent.graph import RagOrchestrator
from ragdesk.agent.llm import OpenAIClient
from ragdesk.core import config
from ragdesk.core.errors import ServiceUnavailableError
from ragdesk.services.vector_store import VectorStoreClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_llm_client() -> OpenAIClient:
    if not config.OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY must be set in .env")
    logger.info("[dependencies] OpenAI client model=%s embed=%s", config.OPENAI_CHAT_MODEL, config.OPENAI_EMBED_MODEL)
    return OpenAIClient(
        api_key=config.OPENAI_API_KEY,
        base_url=config.OPENAI_BASE_URL,
        embed_model=config.OPENAI_EMBED_MODEL,
        chat_model=config.OPENAI_CHAT_MODEL,
        temperature=config.CHAT_TEMPERATURE,
        timeout=config.LLM_API_TIMEOUT,
    )


@lru_cache(maxsize=1)
def get_vector_store() -> VectorStoreClient:
    if not config.VECTOR_DB_URL or not config.VECTOR_DB_INDEX:
        raise ServiceUnavailableError("VECTOR_DB_URL and VECTOR_DB_INDEX must be set in .env")
    logger.info("[dependencies] vector index=%s", config.VECTOR_DB_INDEX)
    return VectorStoreClient(
        base_url=config.VECTOR_DB_URL,
        api_key=config.VECTOR_DB_API_KEY,
        index_name=config.VECTOR_DB_INDEX,
        api_version=config.VECTOR_DB_API_VERSION,
        timeout=config.SEARCH_API_TIMEOUT,
    )


@lru_cache(maxsize=1)
def get_orchestrator() -> RagOrchestrator:
    llm = get_llm_client()
    return RagOrchestrator(
        embeddings=llm,
        llm=llm,
        search=get_vector_store(),
        options=config.load_rag_options(),
    )
