"""Tests for configuration parsing and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

import sign_context_mcp.config as cfg_mod
from sign_context_mcp.config import ServerConfig, get_config, update_config


class TestFromEnv:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SIGN_CONTEXT_VARIANT", raising=False)
        cfg = ServerConfig.from_env()
        assert cfg.fast_model == "gemini-2.5-flash"
        assert cfg.deep_model == "gemini-3-pro-preview"
        assert cfg.default_variant == "fast"
        assert cfg.confidence_threshold == 0.7
        assert cfg.allow_credential_override is True
        assert cfg.request_timeout_seconds == 0.0

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("SIGN_CONTEXT_VARIANT", "DEEP")
        monkeypatch.setenv("SIGN_CONTEXT_CONFIDENCE_THRESHOLD", "0.4")
        monkeypatch.setenv("SIGN_CONTEXT_ALLOW_OVERRIDE", "no")
        monkeypatch.setenv("SIGN_CONTEXT_MAX_SESSIONS", "3")
        cfg = ServerConfig.from_env()
        assert cfg.default_variant == "deep"
        assert cfg.confidence_threshold == 0.4
        assert cfg.allow_credential_override is False
        assert cfg.max_sessions == 3

    def test_invalid_variant(self, monkeypatch):
        monkeypatch.setenv("SIGN_CONTEXT_VARIANT", "turbo")
        with pytest.raises(ValidationError, match="Invalid model variant"):
            ServerConfig.from_env()

    @pytest.mark.parametrize("value", ["-0.1", "1.5"])
    def test_invalid_threshold(self, monkeypatch, value):
        monkeypatch.setenv("SIGN_CONTEXT_CONFIDENCE_THRESHOLD", value)
        with pytest.raises(ValidationError):
            ServerConfig.from_env()

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError):
            ServerConfig(request_timeout_seconds=-1)


class TestSingleton:
    def test_get_config_loads_dotenv(self, tmp_path, monkeypatch):
        env = tmp_path / "config.env"
        env.write_text("SIGN_CONTEXT_FAST_MODEL=gemini-from-file\n")
        monkeypatch.setenv("SIGN_CONTEXT_FAST_MODEL", "")
        monkeypatch.setattr("sign_context_mcp.dotenv.DEFAULT_ENV_PATH", env)
        assert get_config().fast_model == "gemini-from-file"

    def test_update_config(self):
        cfg = update_config(default_variant="deep", fast_model=None)
        assert cfg.default_variant == "deep"
        assert cfg.fast_model == "gemini-2.5-flash"
        assert get_config() is cfg
        assert cfg_mod._config is cfg

    def test_model_for(self):
        cfg = ServerConfig(fast_model="f", deep_model="d")
        assert cfg.model_for("fast") == "f"
        assert cfg.model_for("deep") == "d"
        with pytest.raises(ValueError):
            cfg.model_for("other")
