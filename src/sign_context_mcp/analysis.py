"""Request builder: one multimodal Gemini request per analysis or chat turn.

Both operations send the complete media payload inline every time; no
server-side upload handle or conversation state is assumed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence

from .client import GeminiClient, Transport
from .config import MODEL_VARIANTS, get_config
from .credentials import CredentialSource
from .errors import QuotaExceededError, SignContextError, classify_failure, is_quota_error
from .media import MediaAsset, media_content
from .models.analysis import AnalysisResult, ChatMessage
from .parsing import analysis_response_schema, parse_analysis
from .prompts.analysis import (
    ANALYSIS_PROMPT,
    CHAT_ERROR_TEXT,
    CHAT_PROMPT,
    CHAT_QUOTA_TEXT,
    NO_RESPONSE_TEXT,
)

logger = logging.getLogger(__name__)


def resolve_model(variant: str) -> str:
    """Map ``fast``/``deep`` to the configured Gemini model ID."""
    return get_config().model_for(variant)


def variant_label(variant: str) -> str:
    """Display label for a variant, e.g. ``"Gemini 2.5 Flash"``."""
    cfg = get_config()
    model = cfg.model_for(variant)
    preset = MODEL_VARIANTS[variant]
    return preset["label"] if model == preset["model"] else model


def _effective_timeout(timeout: float | None) -> float | None:
    if timeout is not None:
        return timeout or None
    return get_config().request_timeout_seconds or None


async def _send(
    transport: Transport,
    contents,
    *,
    api_key: str,
    model: str,
    response_schema: dict | None,
    timeout: float | None,
) -> str:
    """Await one transport call, mapping any failure onto the error taxonomy."""
    try:
        call = transport(contents, api_key=api_key, model=model, response_schema=response_schema)
        if timeout:
            return await asyncio.wait_for(call, timeout=timeout)
        return await call
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        raise classify_failure(exc) from exc


async def analyze_media(
    asset: MediaAsset,
    *,
    credentials: CredentialSource,
    variant: str = "fast",
    transport: Transport | None = None,
    timeout: float | None = None,
) -> AnalysisResult:
    """Run one analysis request and return the validated result.

    Args:
        asset: Media to analyze.
        credentials: Key resolution strategy; resolved before any I/O.
        variant: ``"fast"`` or ``"deep"``.
        transport: Request sender, defaults to ``GeminiClient.generate``.
        timeout: Seconds before giving up; ``None`` uses config, ``0`` disables.

    Raises:
        MissingCredentialError: No key could be resolved (no request is sent).
        QuotaExceededError: The endpoint reported a rate limit.
        EmptyResponseError: The model returned no text.
        MalformedResultError: The text was not a valid AnalysisResult.
        RequestFailedError: Any other transport or model failure.
    """
    api_key = credentials.resolve()
    model = resolve_model(variant)
    transport = transport or GeminiClient.generate

    contents = await media_content(asset, ANALYSIS_PROMPT)
    logger.info("Analyzing %s with %s (%d bytes)", asset.name, model, asset.size)
    raw = await _send(
        transport,
        contents,
        api_key=api_key,
        model=model,
        response_schema=analysis_response_schema(),
        timeout=_effective_timeout(timeout),
    )
    result = parse_analysis(raw)
    logger.info(
        "Analysis of %s: %d sign(s), %d transcript segment(s)",
        asset.name, len(result.signs), len(result.transcript),
    )
    return result


def format_history(messages: Sequence[ChatMessage]) -> str:
    """Render prior turns as ``role: text`` lines."""
    return "\n".join(f"{m.role}: {m.text}" for m in messages)


def build_chat_prompt(
    history: Sequence[ChatMessage],
    result: AnalysisResult | None,
    question: str,
) -> str:
    result_json = (
        json.dumps(result.model_dump(mode="json", by_alias=True)) if result is not None else "null"
    )
    return CHAT_PROMPT.format(
        result_json=result_json,
        history=format_history(history),
        question=question,
    )


def chat_error_text(error: BaseException) -> str:
    """In-band text for a failed chat turn."""
    if isinstance(error, QuotaExceededError) or is_quota_error(error):
        return CHAT_QUOTA_TEXT
    detail = str(error).strip()
    return f"{CHAT_ERROR_TEXT} ({detail})" if detail else CHAT_ERROR_TEXT


async def chat_turn(
    log: list[ChatMessage],
    asset: MediaAsset,
    result: AnalysisResult | None,
    question: str,
    *,
    credentials: CredentialSource,
    variant: str = "fast",
    transport: Transport | None = None,
    timeout: float | None = None,
) -> list[ChatMessage]:
    """Ask one follow-up question about *asset* and append both turns to *log*.

    The user message is appended before the request is sent, and exactly one
    model message follows it whatever happens: the answer, a fallback when
    the model returns nothing, or an error description. Request failures are
    never raised past the log.

    Returns:
        The two messages appended by this call.
    """
    question = question.strip()
    if not question:
        raise ValueError("Chat message must not be empty")

    model = resolve_model(variant)
    prior = list(log)
    user_msg = ChatMessage(role="user", text=question)
    log.append(user_msg)

    try:
        api_key = credentials.resolve()
        contents = await media_content(asset, build_chat_prompt(prior, result, question))
        raw = await _send(
            transport or GeminiClient.generate,
            contents,
            api_key=api_key,
            model=model,
            response_schema=None,
            timeout=_effective_timeout(timeout),
        )
        text = (raw or "").strip() or NO_RESPONSE_TEXT
    except SignContextError as exc:
        logger.warning("Chat turn failed (%s): %s", exc.category.value, exc)
        text = chat_error_text(exc)

    model_msg = ChatMessage(role="model", text=text)
    log.append(model_msg)
    return [user_msg, model_msg]
