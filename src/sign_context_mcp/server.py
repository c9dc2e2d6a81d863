"""Main FastMCP server: mounts all sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from .client import GeminiClient
from .tools.infra import infra_server
from .tools.media import media_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook: tears down shared Gemini clients."""
    yield {}
    closed = await GeminiClient.close_all()
    logger.info("Lifespan shutdown: closed %d client(s)", closed)


app = FastMCP(
    "sign-context",
    instructions=(
        "Accessibility analysis of video and audio: sign-language gestures, "
        "speech transcript and context, plus follow-up questions about the "
        "same media. Open a file with media_open, then media_analyze, "
        "media_timeline and media_chat."
    ),
    lifespan=_lifespan,
)

app.mount(media_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``sign-context-mcp`` console script."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app.run()


if __name__ == "__main__":
    main()
