"""Media asset helpers: MIME detection, hashing, encoding, Gemini part building."""

from __future__ import annotations

import asyncio
import base64
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path

from google.genai import types

from .errors import UnsupportedMediaError

logger = logging.getLogger(__name__)

SUPPORTED_MEDIA_EXTENSIONS: dict[str, str] = {
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".wmv": "video/x-ms-wmv",
    ".3gp": "video/3gpp",
    ".3gpp": "video/3gpp",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".m4a": "audio/mp4",
    ".aiff": "audio/aiff",
    ".opus": "audio/opus",
}

ACCEPTED_MIME_PREFIXES = ("video/", "audio/")


@dataclass(frozen=True)
class MediaAsset:
    """A user-supplied video or audio file held in memory."""

    data: bytes = field(repr=False)
    mime_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    @property
    def content_id(self) -> str:
        """SHA-256 of the content, truncated to 16 hex chars."""
        return hashlib.sha256(self.data).hexdigest()[:16]

    def base64(self) -> str:
        """Standard base64 text encoding of the content."""
        return base64.b64encode(self.data).decode("ascii")


def media_mime_type(path: Path) -> str:
    """Return MIME type for a media file, or raise UnsupportedMediaError."""
    ext = path.suffix.lower()
    mime = SUPPORTED_MEDIA_EXTENSIONS.get(ext)
    if not mime:
        allowed = ", ".join(sorted(SUPPORTED_MEDIA_EXTENSIONS))
        raise UnsupportedMediaError(f"Unsupported media extension '{ext}'. Supported: {allowed}")
    return mime


def check_mime_type(mime_type: str) -> str:
    """Accept any declared ``video/*`` or ``audio/*`` type; content is not sniffed."""
    mime = mime_type.strip().lower()
    if not mime.startswith(ACCEPTED_MIME_PREFIXES) or mime in ACCEPTED_MIME_PREFIXES:
        raise UnsupportedMediaError(
            f"Unsupported media type '{mime_type}'. Expected video/* or audio/*"
        )
    return mime


def validate_media_path(file_path: str, mime_type: str | None = None) -> tuple[Path, str]:
    """Validate path exists and resolve its MIME type. Returns (path, mime)."""
    p = Path(file_path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Media file not found: {file_path}")
    if not p.is_file():
        raise ValueError(f"Not a file: {file_path}")
    mime = check_mime_type(mime_type) if mime_type else media_mime_type(p)
    return p, mime


async def load_media(file_path: str, mime_type: str | None = None) -> MediaAsset:
    """Read a local file into a MediaAsset.

    An explicit *mime_type* overrides extension detection and is passed
    through to the model as declared.
    """
    p, mime = validate_media_path(file_path, mime_type)
    data = await asyncio.to_thread(p.read_bytes)
    asset = MediaAsset(data=data, mime_type=mime, name=p.name)
    logger.info("Loaded %s (%s, %d bytes, id=%s)", asset.name, mime, asset.size, asset.content_id)
    return asset


def media_part(asset: MediaAsset) -> types.Part:
    """Inline-data part for *asset*. The SDK base64-encodes it on the wire."""
    return types.Part.from_bytes(data=asset.data, mime_type=asset.mime_type)


async def media_content(asset: MediaAsset, prompt: str) -> types.Content:
    """Build the single user Content for one request: media part then text.

    Encoding runs off the event loop; every request carries the full payload.
    """
    part = await asyncio.to_thread(media_part, asset)
    return types.Content(role="user", parts=[part, types.Part(text=prompt)])
