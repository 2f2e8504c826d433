"""Finance chat assistant backed by the OpenAI Responses API."""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from openai import OpenAI

from .config import get_assistant_model
from .logging_setup import get_logger
from .models import FinancialSummary, Transaction
from .prompting import build_financial_context, build_system_instructions, build_user_content

_logger = get_logger("finance_tracker.assistant")


class AssistantError(RuntimeError):
    """The assistant returned no usable text."""


def _create_client() -> OpenAI:
    return OpenAI()


def _extract_output_text(resp: Any) -> str:
    """Pull the reply text from a Responses API result.

    Prefers ``resp.output_text`` and falls back to the first content block.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        output = getattr(resp, "output", None) or []
        content = getattr(output[0], "content", None) if output else None
        if content:
            maybe = getattr(content[0], "text", None)
            text = maybe if isinstance(maybe, str) else getattr(maybe, "value", None)
    if not text or not isinstance(text, str):
        raise AssistantError("Unexpected Responses API shape; unable to locate text output")
    return text.strip()


def ask_assistant(
    question: str,
    *,
    summary: FinancialSummary | None,
    recent_transactions: Sequence[Transaction] = (),
    client: OpenAI | None = None,
    model: str | None = None,
) -> str:
    """Answer ``question`` about the user's finances.

    Parameters
    ----------
    question:
        The user's message. Must be non-blank.
    summary:
        Current financial summary, or ``None`` when no data is loaded yet.
    recent_transactions:
        Newest-first transactions; only the first ten are sent.
    client, model:
        Injection points for tests. Default to ``OpenAI()`` and
        ``FT_ASSISTANT_MODEL``.
    """

    if not question or not question.strip():
        raise ValueError("question must be non-empty")

    context = build_financial_context(summary, recent_transactions)
    client = client or _create_client()
    model = model or get_assistant_model()

    _logger.info("assistant:request model=%s context_chars=%d", model, len(context))
    t0 = time.perf_counter()
    resp = client.responses.create(
        model=model,
        instructions=build_system_instructions(),
        input=build_user_content(context, question),
    )
    answer = _extract_output_text(resp)
    _logger.info(
        "assistant:done chars=%d latency_ms=%.2f",
        len(answer),
        (time.perf_counter() - t0) * 1000.0,
    )
    return answer


__all__ = ["AssistantError", "ask_assistant"]
