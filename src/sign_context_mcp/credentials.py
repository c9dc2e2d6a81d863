"""Credential resolution and the optional remembered key.

Request functions never read process-wide state for the key: they take a
``CredentialSource`` and call ``resolve()``. The module-level
``credential_store`` is what the tool layer uses to build that source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import get_config
from .dotenv import parse_dotenv, write_dotenv_value
from .errors import MissingCredentialError

logger = logging.getLogger(__name__)

REMEMBERED_KEY_NAME = "gemini_api_key"


def mask_key(key: str) -> str:
    return f"…{key[-4:]}" if key else ""


@dataclass(frozen=True)
class CredentialSource:
    """Resolution strategy for the Gemini access key.

    Priority: user override (when overrides are allowed), then the
    environment default.
    """

    override: str = ""
    default: str = ""
    allow_override: bool = True

    def resolve(self) -> str:
        """Return the effective key, or raise MissingCredentialError."""
        if self.allow_override and self.override.strip():
            return self.override.strip()
        if self.default.strip():
            return self.default.strip()
        raise MissingCredentialError(
            "Missing API key. Set GEMINI_API_KEY or add one with infra_credential."
        )

    @property
    def origin(self) -> str:
        """Where the effective key comes from: "override", "environment" or "none"."""
        if self.allow_override and self.override.strip():
            return "override"
        if self.default.strip():
            return "environment"
        return "none"


class CredentialStore:
    """Session-wide user override, optionally remembered on disk."""

    def __init__(self, path: str = "") -> None:
        """Initialize the store, loading a remembered key from *path* if any.

        Args:
            path: Credential file. Empty string = never persisted.
        """
        self._path = Path(path).expanduser() if path else None
        self._override = ""
        if self._path is not None:
            self._override = parse_dotenv(self._path).get(REMEMBERED_KEY_NAME, "")
            if self._override:
                logger.info("Loaded remembered API key (%s)", mask_key(self._override))

    @property
    def override(self) -> str:
        return self._override

    @property
    def remembered(self) -> bool:
        if self._path is None:
            return False
        return bool(parse_dotenv(self._path).get(REMEMBERED_KEY_NAME))

    def set(self, key: str, *, remember: bool = True) -> None:
        """Use *key* for all following requests.

        With ``remember`` the key is written to the credential file; without
        it any previously remembered key is forgotten, so the file never
        holds a key other than the active one.
        """
        key = key.strip()
        if not key:
            raise ValueError("API key must not be empty")
        self._override = key
        if self._path is not None:
            write_dotenv_value(self._path, REMEMBERED_KEY_NAME, key if remember else None)
        logger.info("API key override set (%s, remembered=%s)", mask_key(key), remember)

    def clear(self) -> None:
        """Drop the override and forget the remembered key."""
        self._override = ""
        if self._path is not None:
            write_dotenv_value(self._path, REMEMBERED_KEY_NAME, None)
        logger.info("API key override cleared")

    def source(self) -> CredentialSource:
        """Snapshot the current resolution inputs for one request."""
        cfg = get_config()
        return CredentialSource(
            override=self._override,
            default=cfg.gemini_api_key,
            allow_override=cfg.allow_credential_override,
        )


def _make_default_store() -> CredentialStore:
    """Build the module-level singleton, reading config if available."""
    try:
        return CredentialStore(get_config().credential_file)
    except Exception:
        logger.warning("Credential file unavailable, keys will not be remembered", exc_info=True)
        return CredentialStore()


credential_store = _make_default_store()
