"""Server configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

VALID_VARIANTS = {"fast", "deep"}

MODEL_VARIANTS: dict[str, dict[str, str]] = {
    "fast": {
        "model": "gemini-2.5-flash",
        "label": "Gemini 2.5 Flash",
        "description": "Fast mode: lower latency, higher rate limits",
    },
    "deep": {
        "model": "gemini-3-pro-preview",
        "label": "Gemini 3 Pro",
        "description": "Deep logic: slower with stronger reasoning and a tight quota",
    },
}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes")


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    fast_model: str = Field(default=MODEL_VARIANTS["fast"]["model"])
    deep_model: str = Field(default=MODEL_VARIANTS["deep"]["model"])
    default_variant: str = Field(default="fast")
    confidence_threshold: float = Field(default=0.7)
    credential_file: str = Field(default="")
    allow_credential_override: bool = Field(default=True)
    max_sessions: int = Field(default=20)
    session_timeout_hours: int = Field(default=2)
    request_timeout_seconds: float = Field(default=0.0)
    retry_max_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    retry_max_delay: float = Field(default=60.0)

    @field_validator("default_variant")
    @classmethod
    def validate_variant(cls, value: str) -> str:
        variant = value.strip().lower()
        if variant not in VALID_VARIANTS:
            allowed = ", ".join(sorted(VALID_VARIANTS))
            raise ValueError(f"Invalid model variant '{value}'. Allowed: {allowed}")
        return variant

    @field_validator("confidence_threshold")
    @classmethod
    def validate_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("confidence_threshold must be within [0, 1]")
        return value

    @field_validator("max_sessions", "session_timeout_hours", "retry_max_attempts")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Configuration values must be >= 1")
        return value

    @field_validator("retry_base_delay", "retry_max_delay")
    @classmethod
    def validate_retry_delays(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Retry delay must be > 0")
        return value

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value < 0:
            raise ValueError("request_timeout_seconds must be >= 0 (0 disables it)")
        return value

    def model_for(self, variant: str) -> str:
        """Return the Gemini model ID configured for *variant*."""
        if variant == "fast":
            return self.fast_model
        if variant == "deep":
            return self.deep_model
        allowed = ", ".join(sorted(VALID_VARIANTS))
        raise ValueError(f"Invalid model variant '{variant}'. Allowed: {allowed}")

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        from pathlib import Path

        credential_default = str(
            Path.home() / ".config" / "sign-context-mcp" / "credentials.env"
        )
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            fast_model=os.getenv("SIGN_CONTEXT_FAST_MODEL", MODEL_VARIANTS["fast"]["model"]),
            deep_model=os.getenv("SIGN_CONTEXT_DEEP_MODEL", MODEL_VARIANTS["deep"]["model"]),
            default_variant=os.getenv("SIGN_CONTEXT_VARIANT", "fast"),
            confidence_threshold=float(os.getenv("SIGN_CONTEXT_CONFIDENCE_THRESHOLD", "0.7")),
            credential_file=os.getenv("SIGN_CONTEXT_CREDENTIAL_FILE", credential_default),
            allow_credential_override=_env_flag("SIGN_CONTEXT_ALLOW_OVERRIDE", True),
            max_sessions=int(os.getenv("SIGN_CONTEXT_MAX_SESSIONS", "20")),
            session_timeout_hours=int(os.getenv("SIGN_CONTEXT_SESSION_TIMEOUT_HOURS", "2")),
            request_timeout_seconds=float(os.getenv("SIGN_CONTEXT_REQUEST_TIMEOUT", "0")),
            retry_max_attempts=int(os.getenv("SIGN_CONTEXT_RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay=float(os.getenv("SIGN_CONTEXT_RETRY_BASE_DELAY", "1.0")),
            retry_max_delay=float(os.getenv("SIGN_CONTEXT_RETRY_MAX_DELAY", "60.0")),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/sign-context-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logging.getLogger(__name__).info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by the ``infra_configure`` tool)."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
