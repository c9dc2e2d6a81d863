"""Sign-language, speech and context analysis of media via Gemini."""

__version__ = "0.1.0"
