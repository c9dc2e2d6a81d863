"""Tests for infrastructure tools."""

from __future__ import annotations

import pytest

import sign_context_mcp.tools.infra as infra_mod
from sign_context_mcp.credentials import REMEMBERED_KEY_NAME
from sign_context_mcp.dotenv import parse_dotenv
from tests.conftest import unwrap_tool

infra_configure = unwrap_tool(infra_mod.infra_configure)
infra_credential = unwrap_tool(infra_mod.infra_credential)


class TestInfraConfigure:
    async def test_no_args_reports_config(self):
        out = await infra_configure()
        assert out["active_variant"] == "fast"
        assert "gemini_api_key" not in out["current_config"]
        assert set(out["available_variants"]) == {"fast", "deep"}
        assert out["available_variants"]["deep"]["label"] == "Gemini 3 Pro"

    async def test_updates_runtime_config(self):
        out = await infra_configure(variant="deep", fast_model="gemini-x", confidence_threshold=0.3)
        cfg = out["current_config"]
        assert cfg["default_variant"] == "deep"
        assert cfg["fast_model"] == "gemini-x"
        assert cfg["confidence_threshold"] == 0.3
        assert out["available_variants"]["fast"]["label"] == "gemini-x"

    async def test_invalid_value_returns_error(self):
        out = await infra_configure(confidence_threshold=2.0)
        assert out["category"] == "INVALID_ARGUMENT"


class TestInfraCredential:
    async def test_status_from_environment(self, credential_store):
        out = await infra_credential()
        assert out["configured"] is True
        assert out["origin"] == "environment"
        assert out["key_suffix"] == "…real"
        assert out["remembered"] is False

    async def test_set_and_remember(self, credential_store, tmp_path):
        out = await infra_credential(action="set", api_key="AIza-secret-9876")
        assert out["origin"] == "override"
        assert out["key_suffix"] == "…9876"
        assert out["remembered"] is True
        assert "AIza-secret-9876" not in str(out)
        stored = parse_dotenv(tmp_path / "credentials.env")
        assert stored == {REMEMBERED_KEY_NAME: "AIza-secret-9876"}

    async def test_set_without_remember_drops_remembered(self, credential_store):
        await infra_credential(action="set", api_key="AIza-old-1111")
        out = await infra_credential(action="set", api_key="AIza-temp-2222", remember=False)
        assert out["key_suffix"] == "…2222"
        assert out["remembered"] is False

    async def test_set_without_remember(self, credential_store):
        out = await infra_credential(action="set", api_key="AIza-temp", remember=False)
        assert out["origin"] == "override"
        assert out["remembered"] is False

    async def test_set_requires_key(self, credential_store):
        out = await infra_credential(action="set")
        assert out["category"] == "INVALID_ARGUMENT"

    async def test_clear(self, credential_store):
        await infra_credential(action="set", api_key="AIza-secret")
        out = await infra_credential(action="clear")
        assert out["origin"] == "environment"
        assert out["remembered"] is False

    async def test_nothing_configured(self, credential_store, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "")
        out = await infra_credential()
        assert out["configured"] is False
        assert out["origin"] == "none"
        assert out["key_suffix"] == ""

    @pytest.mark.parametrize("action", ["rotate"])
    async def test_unknown_action(self, credential_store, action):
        out = await infra_credential(action=action)
        assert out["category"] == "INVALID_ARGUMENT"
