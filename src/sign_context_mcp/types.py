"""Shared type aliases for tool parameters."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

ModelVariant = Literal["fast", "deep"]
CredentialAction = Literal["status", "set", "clear"]

MediaFilePath = Annotated[str, Field(
    min_length=1,
    description="Path to a local video or audio file (mp4, webm, mov, mp3, wav, ...)",
)]
MimeTypeParam = Annotated[str, Field(
    min_length=3,
    description="Declared MIME type (video/* or audio/*); overrides extension detection",
)]
SessionId = Annotated[str, Field(min_length=1, description="Session ID from media_open")]
ConfidenceThreshold = Annotated[float, Field(
    ge=0.0,
    le=1.0,
    description="Minimum sign confidence shown on the timeline (0.0-1.0)",
)]
ChatText = Annotated[str, Field(min_length=1, max_length=4000, description="Follow-up question")]
