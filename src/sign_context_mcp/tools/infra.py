"""Infrastructure tools: model variant settings and the API key override."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..analysis import variant_label
from ..config import MODEL_VARIANTS, get_config, update_config
from ..credentials import credential_store, mask_key
from ..errors import MissingCredentialError, make_tool_error
from ..types import ConfidenceThreshold, CredentialAction, ModelVariant

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {"gemini_api_key"}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    return get_config().model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)


def _credential_status() -> dict:
    source = credential_store.source()
    try:
        effective = source.resolve()
    except MissingCredentialError:
        effective = ""
    return {
        "configured": bool(effective),
        "origin": source.origin,
        "key_suffix": mask_key(effective),
        "remembered": credential_store.remembered,
        "override_allowed": source.allow_override,
    }


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def infra_configure(
    variant: Annotated[ModelVariant | None, Field(
        description='Default model variant for new sessions: "fast" or "deep"',
    )] = None,
    fast_model: Annotated[str | None, Field(description="Gemini model ID used by the fast variant")] = None,
    deep_model: Annotated[str | None, Field(description="Gemini model ID used by the deep variant")] = None,
    confidence_threshold: ConfidenceThreshold | None = None,
) -> dict:
    """Reconfigure the server at runtime.

    Changes take effect immediately for all subsequent tool calls.

    Args:
        variant: Default variant for sessions opened afterwards.
        fast_model: Model ID behind "fast".
        deep_model: Model ID behind "deep".
        confidence_threshold: Default timeline threshold.

    Returns:
        Dict with current_config and the available variants.
    """
    try:
        overrides: dict[str, object] = {
            "default_variant": variant,
            "fast_model": fast_model,
            "deep_model": deep_model,
            "confidence_threshold": confidence_threshold,
        }
        if any(v is not None for v in overrides.values()):
            cfg = update_config(**overrides)
        else:
            cfg = get_config()

        return {
            "current_config": _redacted_config(),
            "active_variant": cfg.default_variant,
            "available_variants": {
                name: {"model": cfg.model_for(name), "label": variant_label(name),
                       "description": preset["description"]}
                for name, preset in MODEL_VARIANTS.items()
            },
        }
    except Exception as exc:
        return make_tool_error(exc)


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def infra_credential(
    action: CredentialAction = "status",
    api_key: Annotated[str | None, Field(description='Gemini API key, required for action="set"')] = None,
    remember: Annotated[bool, Field(description="Persist the key in the local credential file")] = True,
) -> dict:
    """Set, clear, or inspect the user-supplied Gemini API key.

    A user key takes precedence over GEMINI_API_KEY. The key itself is never
    returned, only its last four characters.

    Args:
        action: "status", "set" or "clear".
        api_key: The key to use when action is "set".
        remember: Whether "set" also writes the key to the credential file.

    Returns:
        Dict with configured, origin, key_suffix and remembered.
    """
    try:
        if action == "set":
            if not api_key:
                raise ValueError('api_key is required for action="set"')
            credential_store.set(api_key, remember=remember)
        elif action == "clear":
            credential_store.clear()
        elif action != "status":
            raise ValueError(f"Unknown action: {action}")
        return _credential_status()
    except Exception as exc:
        return make_tool_error(exc)
