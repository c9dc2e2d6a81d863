"""Shared Gemini client pool and the default request transport."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from google import genai
from google.genai import types

from .credentials import mask_key
from .retry import with_retry

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can send one generate request and return its text."""

    async def __call__(
        self,
        contents: Any,
        *,
        api_key: str,
        model: str,
        response_schema: dict | None = None,
    ) -> str: ...


class GeminiClient:
    """Process-wide Gemini client pool (one client per API key)."""

    _clients: dict[str, genai.Client] = {}

    @classmethod
    def get(cls, api_key: str) -> genai.Client:
        """Return (or create) the shared client for *api_key*."""
        if not api_key:
            raise ValueError("No Gemini API key provided")
        if api_key not in cls._clients:
            cls._clients[api_key] = genai.Client(api_key=api_key)
            logger.info("Created Gemini client (key %s)", mask_key(api_key))
        return cls._clients[api_key]

    @classmethod
    async def generate(
        cls,
        contents: Any,
        *,
        api_key: str,
        model: str,
        response_schema: dict | None = None,
    ) -> str:
        """Send one generate_content call and return the user-visible text.

        Args:
            contents: Prompt contents (media part + instruction text).
            api_key: Resolved Gemini key.
            model: Model ID for the selected variant.
            response_schema: JSON schema dict to constrain output format.

        Returns:
            Concatenated non-thinking text parts; empty string when the model
            produced nothing.
        """
        config = types.GenerateContentConfig()
        if response_schema:
            config.response_mime_type = "application/json"
            config.response_json_schema = response_schema

        client = cls.get(api_key)
        response = await with_retry(
            lambda: client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        )

        parts = []
        if response.candidates and response.candidates[0].content:
            parts = response.candidates[0].content.parts or []
        text_parts = [p.text for p in parts if p.text and not getattr(p, "thought", False)]
        return "\n".join(text_parts) if text_parts else (response.text or "")

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            try:
                await client.aio.aclose()
            except Exception:
                logger.debug("Async close failed", exc_info=True)
            try:
                client.close()
            except Exception:
                logger.debug("Sync close failed", exc_info=True)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count
