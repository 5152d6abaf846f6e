"""
Relevance gate and escalation rules over retrieved chunks and history.

Pure functions; no provider calls.
"""

from collections.abc import Sequence

from ragdesk.core.config import RagOptions
from ragdesk.schemas.chat import ASSISTANT_ROLE, ChatMessage, RetrievedChunk


def should_clarify(chunks: Sequence[RetrievedChunk], options: RagOptions) -> bool:
    """
    True when retrieval is too weak to answer directly.

    Clarify if the best match is weak OR the top-3 average is weak; either a
    lone mediocre match or many mediocre ones trigger it. Scores are assumed
    sorted descending; a missing score counts as 0.
    """
    if not chunks:
        return True
    scores = [c.score or 0.0 for c in chunks]
    top_score = scores[0]
    head = scores[: min(3, len(scores))]
    avg_top3 = sum(head) / len(head)
    return top_score < options.top_score_threshold or avg_top3 < options.avg_top3_score_threshold


def _has_label(chunk: RetrievedChunk, label: str) -> bool:
    return (chunk.type or "").casefold() == label.casefold()


def is_all_escalation_tier(chunks: Sequence[RetrievedChunk], label: str) -> bool:
    return bool(chunks) and all(_has_label(c, label) for c in chunks)


def is_any_escalation_tier(chunks: Sequence[RetrievedChunk], label: str) -> bool:
    return any(_has_label(c, label) for c in chunks)


def count_clarifications(history: Sequence[ChatMessage], tag: str) -> int:
    """Number of assistant turns already carrying the clarification tag."""
    needle = tag.casefold()
    return sum(
        1
        for m in history
        if (m.role or "").casefold() == ASSISTANT_ROLE and needle in (m.content or "").casefold()
    )


def has_reached_clarification_limit(clarifications_so_far: int, max_clarifications: int) -> bool:
    return clarifications_so_far >= max_clarifications


def build_context(chunks: Sequence[RetrievedChunk]) -> str:
    """Render chunks as "[type] content" blocks separated by blank lines."""
    return "\n\n".join(f"[{c.type}] {c.content}" for c in chunks)
