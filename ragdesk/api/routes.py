"""
API route aggregator: register endpoints; no decision logic, only delegate to the orchestrator.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ragdesk.agent.graph import RagOrchestrator
from ragdesk.agent.llm import OpenAIClient
from ragdesk.api.dependencies import get_llm_client, get_orchestrator, get_vector_store
from ragdesk.core.session_store import clear_session, get_history, replace_history
from ragdesk.schemas.chat import EmbeddingResponse, RagRequest, RetrievedChunk, VectorSearchRequest
from ragdesk.schemas.query import AskRequest, AskResponse, EmbeddingProbeRequest, SessionQueryRequest
from ragdesk.services.vector_store import VectorStoreClient

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "RAG answer service running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Ask (caller-held history) ---

@router.post(
    "/rag/ask",
    response_model=AskResponse,
    tags=["rag"],
    summary="Ask a question",
    description="Answer, clarify or escalate. Decision outcomes are always 200; failures are reported in the body (ok=false).",
)
async def post_ask(
    body: AskRequest, orchestrator: RagOrchestrator = Depends(get_orchestrator)
) -> AskResponse:
    logger.info("[api:post_ask] IN  question=%r history_len=%d", body.question, len(body.history))
    result = await orchestrator.generate_answer(
        RagRequest(question=body.question, history=body.history, project_id=body.project_id)
    )
    logger.info(
        "[api:post_ask] OUT handover=%s ok=%s", result.handover_to_human_needed, result.status.is_ok
    )
    return AskResponse.from_result(result)


# --- Query (server-held history) ---

@router.post(
    "/query",
    response_model=AskResponse,
    tags=["rag"],
    summary="Ask a question within a server-side session",
    description="Same as /rag/ask, but history is kept on the server per session_id.",
)
async def post_query(
    body: SessionQueryRequest, orchestrator: RagOrchestrator = Depends(get_orchestrator)
) -> AskResponse:
    logger.info("[api:post_query] IN  question=%r session_id=%s", body.question, body.session_id)
    history = get_history(body.session_id)
    result = await orchestrator.generate_answer(
        RagRequest(question=body.question, history=history, project_id=body.project_id)
    )
    replace_history(body.session_id, result.history)
    return AskResponse.from_result(result)


@router.delete("/query/{session_id}", tags=["rag"], summary="Forget a session's history")
def delete_session(session_id: str) -> dict:
    return {"cleared": clear_session(session_id)}


# --- Provider probes ---

@router.post(
    "/external/embeddings",
    response_model=EmbeddingResponse,
    tags=["external"],
    summary="Embed text with the configured embedding provider",
)
async def post_embeddings(
    body: EmbeddingProbeRequest, llm: OpenAIClient = Depends(get_llm_client)
) -> EmbeddingResponse:
    result = await llm.create_embedding(body.input)
    if not result.is_success:
        raise HTTPException(status_code=502, detail=result.error_message or "Embedding request failed")
    return result.value


@router.post(
    "/external/search",
    response_model=list[RetrievedChunk],
    tags=["external"],
    summary="Run a raw search request against the vector index",
)
async def post_search(
    body: VectorSearchRequest, store: VectorStoreClient = Depends(get_vector_store)
) -> list[RetrievedChunk]:
    result = await store.search(body)
    if not result.is_success:
        raise HTTPException(status_code=502, detail=result.error_message or "Search request failed")
    return result.value or []
