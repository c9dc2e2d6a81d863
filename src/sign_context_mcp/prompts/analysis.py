"""Prompt templates for media analysis and follow-up chat.

1. ANALYSIS_PROMPT: fixed instruction block sent after the media part.
   No variables; the JSON layout it describes matches ``AnalysisResult``.
2. CHAT_PROMPT: one chat turn.
   Variables: {result_json}, {history}, {question}.
"""

from __future__ import annotations

ANALYSIS_PROMPT = """\
Analyze media for accessibility.
1. Detect sign language gestures.
2. Transcribe speech.
3. Analyze context (environment, tone, nuances).
4. Explain reasoning briefly.

Return JSON:
{
  "signs": [{"timestamp": "MM:SS", "gesture": "...", "meaning": "...", "confidence": 0.0-1.0}],
  "transcript": [{"timestamp": "MM:SS", "speaker": "...", "text": "..."}],
  "context": {
    "environment": "...",
    "tone": "...",
    "nuances": ["..."],
    "culturalNotes": "...",
    "reasoning": "..."
  }
}"""

CHAT_PROMPT = """\
Context from previous analysis: {result_json}
Chat History:
{history}

User Question: {question}

Answer the user's question based on the video/audio file provided. \
Keep it concise and helpful."""

SUGGESTED_QUESTIONS: tuple[str, ...] = (
    "What is the overall mood?",
    "Describe the speaker's surroundings.",
    "Are there any subtle gestures I missed?",
    "Summarize the key points.",
)

NO_RESPONSE_TEXT = "I couldn't generate a response."
CHAT_QUOTA_TEXT = "Error: Quota exceeded. Please set your own API key."
CHAT_ERROR_TEXT = "Error: Could not process request."
