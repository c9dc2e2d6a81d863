"""Shared test fixtures for sign-context-mcp."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock

import pytest

from sign_context_mcp.credentials import CredentialSource, CredentialStore
from sign_context_mcp.media import MediaAsset


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _isolate_files(tmp_path, monkeypatch):
    """Keep the user's real .env and credential file out of every test."""
    monkeypatch.setattr(
        "sign_context_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )
    monkeypatch.setenv("SIGN_CONTEXT_CREDENTIAL_FILE", str(tmp_path / "credentials.env"))


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton between tests."""
    import sign_context_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def credential_store(tmp_path, monkeypatch):
    """Fresh file-backed CredentialStore wired into the tool modules."""
    store = CredentialStore(str(tmp_path / "credentials.env"))
    for target in (
        "sign_context_mcp.credentials.credential_store",
        "sign_context_mcp.tools.media.credential_store",
        "sign_context_mcp.tools.infra.credential_store",
    ):
        monkeypatch.setattr(target, store)
    return store


@pytest.fixture()
def session_store(monkeypatch):
    """Fresh SessionStore wired into the tool modules."""
    from sign_context_mcp.sessions import SessionStore

    store = SessionStore()
    monkeypatch.setattr("sign_context_mcp.sessions.session_store", store)
    monkeypatch.setattr("sign_context_mcp.tools.media.session_store", store)
    return store


@pytest.fixture()
def creds() -> CredentialSource:
    return CredentialSource(default="test-key-not-real")


@pytest.fixture()
def asset() -> MediaAsset:
    return MediaAsset(data=b"\x00\x00\x00\x18ftypmp42fake", mime_type="video/mp4", name="clip.mp4")


@pytest.fixture()
def sample_payload() -> dict:
    return {
        "signs": [
            {"timestamp": "00:10", "gesture": "Wave", "meaning": "Hello", "confidence": 0.9},
        ],
        "transcript": [
            {"timestamp": "00:05", "speaker": "A", "text": "Hi"},
        ],
        "context": {
            "environment": "Office",
            "tone": "Friendly",
            "nuances": ["Warm"],
            "culturalNotes": "Informal greeting",
            "reasoning": "Smiling while waving",
        },
    }


@pytest.fixture()
def sample_json(sample_payload) -> str:
    return json.dumps(sample_payload)


@pytest.fixture()
def transport(sample_json) -> AsyncMock:
    """A request transport that answers with the sample analysis."""
    return AsyncMock(return_value=sample_json)


@pytest.fixture()
def media_file(tmp_path):
    f = tmp_path / "clip.mp4"
    f.write_bytes(b"\x00\x00\x00\x18ftypmp42fake")
    return f
