"""
In-memory chat session store for the /query endpoint. Keyed by session_id.

The answer pipeline never touches this: it receives history and returns the
updated history, which the route stores back here.
"""

import logging
import threading

from ragdesk.schemas.chat import ChatMessage

logger = logging.getLogger(__name__)

# session_id -> list of ChatMessage
_sessions: dict[str, list[ChatMessage]] = {}
_lock = threading.Lock()


def get_history(session_id: str) -> list[ChatMessage]:
    """Return chat history for the session (copy so caller cannot mutate store)."""
    if not session_id or not isinstance(session_id, str):
        logger.info("[session_store:get_history] IN  session_id=%r -> empty", session_id)
        return []
    with _lock:
        out = list(_sessions.get(session_id) or [])
    logger.info("[session_store:get_history] IN  session_id=%s OUT messages=%d", session_id[:16], len(out))
    return out


def replace_history(session_id: str, history: list[ChatMessage]) -> None:
    """Store the history returned by the orchestrator as the session's new history."""
    if not session_id or not isinstance(session_id, str):
        logger.info("[session_store:replace_history] skip invalid session_id=%r", session_id)
        return
    with _lock:
        _sessions[session_id] = list(history)
    logger.info("[session_store:replace_history] session_id=%s messages=%d", session_id[:16], len(history))


def clear_session(session_id: str) -> bool:
    """Drop a session's history. Returns True if the session existed."""
    with _lock:
        existed = _sessions.pop(session_id, None) is not None
    logger.info("[session_store:clear_session] session_id=%s existed=%s", session_id[:16], existed)
    return existed
