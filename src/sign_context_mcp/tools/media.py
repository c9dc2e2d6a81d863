"""Media tools: open, analyze, timeline, chat, and inspect a media session."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..analysis import analyze_media, chat_turn, variant_label
from ..config import get_config
from ..credentials import credential_store
from ..errors import make_tool_error
from ..media import load_media
from ..models.analysis import ChatTurnResponse, SessionInfo
from ..prompts.analysis import SUGGESTED_QUESTIONS
from ..sessions import MediaSession, session_store
from ..timeline import build_timeline, timeline_counts
from ..types import (
    ChatText,
    ConfidenceThreshold,
    MediaFilePath,
    MimeTypeParam,
    ModelVariant,
    SessionId,
)

logger = logging.getLogger(__name__)
media_server = FastMCP("media")


def _busy_error(session: MediaSession) -> dict:
    return make_tool_error(
        ValueError(f"Session {session.session_id} already has a request in flight")
    )


@media_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    )
)
async def media_open(
    file_path: MediaFilePath,
    mime_type: MimeTypeParam | None = None,
    variant: ModelVariant | None = None,
    session_id: Annotated[str | None, Field(
        description="Existing session to load the new file into (clears its result and chat)",
    )] = None,
) -> dict:
    """Load a local video or audio file and start (or reset) a session.

    Args:
        file_path: Path to the media file.
        mime_type: Declared MIME type; detected from the extension when omitted.
        variant: Model variant for this session, "fast" or "deep".
        session_id: Reuse an existing session instead of creating one.

    Returns:
        Dict with session_id, file details, model label and suggested questions.
    """
    try:
        asset = await load_media(file_path, mime_type)
        if session_id:
            session = session_store.require(session_id)
            if session.busy:
                return _busy_error(session)
            session_store.replace_media(session_id, asset)
            if variant:
                session.variant = variant
            status = "replaced"
        else:
            session = session_store.create(asset, variant or "")
            status = "opened"
    except Exception as exc:
        return make_tool_error(exc)

    return SessionInfo(
        session_id=session.session_id,
        status=status,
        file_name=asset.name,
        mime_type=asset.mime_type,
        size_bytes=asset.size,
        variant=session.variant,
        model_label=variant_label(session.variant),
        suggested_questions=list(SUGGESTED_QUESTIONS),
    ).model_dump()


@media_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
async def media_analyze(
    session_id: SessionId,
    variant: ModelVariant | None = None,
) -> dict:
    """Detect signs, transcribe speech and describe context for the session's media.

    A successful call replaces any earlier result of the session.

    Args:
        session_id: Session ID from media_open.
        variant: Override the session's model variant ("fast" or "deep").

    Returns:
        Dict with signs, transcript, context and the model used, or a tool
        error (the error is also kept as the session's last_error).
    """
    try:
        session = session_store.require(session_id)
    except Exception as exc:
        return make_tool_error(exc)
    if session.busy:
        return _busy_error(session)

    if variant:
        session.variant = variant
    session.last_error = None
    session.busy = True
    try:
        result = await analyze_media(
            session.asset,
            credentials=credential_store.source(),
            variant=session.variant,
        )
    except Exception as exc:
        logger.warning("Analysis failed for session %s: %s", session_id, exc)
        error = make_tool_error(exc)
        session.set_error(error)
        return error
    finally:
        session.busy = False

    session.set_result(result)
    return {
        **result.model_dump(mode="json", by_alias=True),
        "session_id": session_id,
        "variant": session.variant,
        "model_label": variant_label(session.variant),
    }


@media_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def media_timeline(
    session_id: SessionId,
    confidence_threshold: ConfidenceThreshold | None = None,
    numeric_order: Annotated[bool, Field(
        description="Order by parsed seconds instead of timestamp text (fixes >= 100 min)",
    )] = False,
) -> dict:
    """Return signs above the confidence threshold merged with the transcript, by time.

    Args:
        session_id: Session ID from media_open.
        confidence_threshold: Minimum sign confidence; defaults to the configured value.
        numeric_order: Sort by seconds rather than by the MM:SS string.

    Returns:
        Dict with the ordered items, counts and the threshold applied. Items
        are empty until an analysis has succeeded.
    """
    try:
        session = session_store.require(session_id)
        threshold = (
            confidence_threshold
            if confidence_threshold is not None
            else get_config().confidence_threshold
        )
        items = build_timeline(session.result, threshold, numeric=numeric_order)
    except Exception as exc:
        return make_tool_error(exc)

    return {
        "session_id": session_id,
        "confidence_threshold": threshold,
        "analyzed": session.result is not None,
        "items": [item.flat() for item in items],
        "counts": timeline_counts(items),
    }


@media_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
async def media_chat(
    session_id: SessionId,
    message: ChatText,
) -> dict:
    """Ask a follow-up question about the session's media.

    The full media file, the current analysis and the chat so far are sent
    with every question. Model failures come back as a model message that
    starts with "Error:" rather than as a tool error.

    Args:
        session_id: Session ID from media_open.
        message: The question.

    Returns:
        Dict with the user and model messages appended and the turn count.
    """
    try:
        session = session_store.require(session_id)
    except Exception as exc:
        return make_tool_error(exc)
    if session.busy:
        return _busy_error(session)

    session.busy = True
    try:
        appended = await chat_turn(
            session.chat,
            session.asset,
            session.result,
            message,
            credentials=credential_store.source(),
            variant=session.variant,
        )
    except Exception as exc:
        return make_tool_error(exc)
    finally:
        session.busy = False
        session.touch()

    return ChatTurnResponse(
        messages=appended,
        turn_count=session.turn_count,
        failed=appended[-1].text.startswith("Error:"),
    ).model_dump(mode="json")


@media_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def media_session(session_id: SessionId) -> dict:
    """Snapshot of a session: file, variant, result, last error and chat log.

    Args:
        session_id: Session ID from media_open.

    Returns:
        Dict describing the session's current state.
    """
    try:
        session = session_store.require(session_id)
    except Exception as exc:
        return make_tool_error(exc)

    return {
        "session_id": session.session_id,
        "file_name": session.asset.name,
        "mime_type": session.asset.mime_type,
        "variant": session.variant,
        "model_label": variant_label(session.variant),
        "busy": session.busy,
        "result": (
            session.result.model_dump(mode="json", by_alias=True)
            if session.result is not None else None
        ),
        "last_error": session.last_error,
        "chat": [m.model_dump(mode="json") for m in session.chat],
        "turn_count": session.turn_count,
    }
