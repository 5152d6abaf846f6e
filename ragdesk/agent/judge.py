"""
Coverage judge: one LLM call deciding whether retrieved context can answer the question.

Verdict line: "YES" or "NO: <what is missing>". A NO without a reason is not
actionable and is reported as a failure.
"""

import asyncio
import logging
from typing import NamedTuple

from ragdesk.agent.prompts import user_with_context
from ragdesk.agent.retry import execute_with_retry
from ragdesk.core.config import RagOptions
from ragdesk.core.contracts import CompletionProvider
from ragdesk.core.result import Result
from ragdesk.schemas.chat import SYSTEM_ROLE, USER_ROLE, ChatMessage


logger = logging.getLogger(__name__)


class CoverageVerdict(NamedTuple):
    need_clarification: bool
    clarification: str | None


def parse_verdict(judge_text: str | None) -> Result[CoverageVerdict]:
    """Map raw judge output to a verdict (case-insensitive YES/NO prefix)."""
    if judge_text is None or not judge_text.strip():
        return Result.failure("No response from coverage judge")
    text = judge_text.strip()
    upper = text.upper()
    if upper.startswith("NO"):
        reason = text[2:].lstrip(": \t")
        if not reason.strip():
            return Result.failure("Coverage judge returned NO but provided no clarification")
        return Result.success(CoverageVerdict(need_clarification=True, clarification=reason))
    if upper.startswith("YES"):
        return Result.success(CoverageVerdict(need_clarification=False, clarification=None))
    return Result.failure(f"Unexpected response from coverage judge: {text}")


class CoverageJudge:
    def __init__(self, completion_provider: CompletionProvider, options: RagOptions) -> None:
        self._llm = completion_provider
        self._options = options

    async def evaluate(
        self,
        question: str,
        context: str,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[CoverageVerdict]:
        if not context or not context.strip():
            return Result.failure("No context retrieved from vector index")

        messages = [
            ChatMessage(role=SYSTEM_ROLE, content=self._options.judge_system_prompt),
            ChatMessage(role=USER_ROLE, content=user_with_context(question, context)),
        ]
        logger.info("[judge:evaluate] IN  question=%r context_len=%d", question, len(context))
        call = await execute_with_retry(
            lambda: self._llm.create_chat_completion(messages, cancel_event),
            max_retries=self._options.max_retries,
            cancel_event=cancel_event,
        )
        if not call.is_success:
            return Result.failure(call.status)

        judge_text = call.value.first_content if call.value is not None else None
        logger.info("[judge:evaluate] llm_raw=%r", judge_text)
        verdict = parse_verdict(judge_text)
        if not verdict.is_success:
            logger.warning("[judge:evaluate] %s", verdict.error_message)
        else:
            logger.info("[judge:evaluate] OUT need_clarification=%s", verdict.value.need_clarification)
        return verdict
