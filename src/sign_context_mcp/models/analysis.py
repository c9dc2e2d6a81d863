"""Analysis models: the structured output schema sent to Gemini and the chat log.

``AnalysisResult`` doubles as the response schema: its JSON schema (by alias)
is passed as ``response_json_schema`` so the model is constrained to the same
shape the parser validates against.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class SignDetection(BaseModel):
    """A sign-language gesture detected at one moment of the media."""

    timestamp: str = Field(description="Moment of the gesture in MM:SS format")
    gesture: str = Field(description="Short description of the hand/body movement")
    meaning: str = Field(description="What the gesture means")
    confidence: float = Field(ge=0.0, le=1.0, description="Detection confidence from 0.0 to 1.0")


class TranscriptSegment(BaseModel):
    """One spoken segment."""

    timestamp: str = Field(description="Start of the segment in MM:SS format")
    speaker: str = Field(default="", description="Speaker label")
    text: str = Field(description="Transcribed speech")


class ContextAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    environment: str = ""
    tone: str = ""
    nuances: list[str] = Field(
        default_factory=list,
        description='Communicative nuances, e.g. "Sarcastic", "Urgent"',
    )
    cultural_notes: str = Field(default="", alias="culturalNotes")
    reasoning: str = Field(default="", description="Brief explanation of the interpretation")


class AnalysisResult(BaseModel):
    """Complete output of one analysis call.

    All three keys are required: a response missing any of them is treated
    as malformed rather than silently defaulted.
    """

    signs: list[SignDetection]
    transcript: list[TranscriptSegment]
    context: ContextAnalysis


class ChatMessage(BaseModel):
    """One entry of the append-only chat log."""

    role: Literal["user", "model"]
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TimelineItem(BaseModel):
    """A sign or transcript entry tagged with its kind. Derived for display only."""

    kind: Literal["sign", "transcript"]
    entry: Union[SignDetection, TranscriptSegment]

    @property
    def timestamp(self) -> str:
        return self.entry.timestamp

    def flat(self) -> dict:
        """Entry fields plus ``kind`` in a single dict."""
        return {"kind": self.kind, **self.entry.model_dump(mode="json")}


# ── Session models (local state, not structured output) ─────────────────────


class SessionInfo(BaseModel):
    """Output schema for media_open."""

    session_id: str
    status: str = "opened"
    file_name: str = ""
    mime_type: str = ""
    size_bytes: int = 0
    variant: str = ""
    model_label: str = ""
    suggested_questions: list[str] = Field(default_factory=list)


class ChatTurnResponse(BaseModel):
    """Output schema for media_chat: the two messages appended this turn."""

    messages: list[ChatMessage]
    turn_count: int
    failed: bool = False
