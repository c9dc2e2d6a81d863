"""Minimal ``.env`` reader/writer.

Two files use this format:

- ``~/.config/sign-context-mcp/.env``: optional defaults (e.g.
  ``GEMINI_API_KEY``) injected into ``os.environ`` when unset.
- the credential file: holds the remembered user key under a single
  fixed name (see :mod:`sign_context_mcp.credentials`).
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "sign-context-mcp" / ".env"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a ``.env`` file into a dict of key-value pairs.

    Supports ``KEY=VALUE``, quoted values, ``export KEY=VALUE``, blank lines
    and ``#`` comments. No variable expansion. A missing file parses as empty.
    """
    result: dict[str, str] = {}
    if not path.is_file():
        return result

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        result[key] = _unquote(value.strip())
    return result


def write_dotenv_value(path: Path, key: str, value: str | None) -> None:
    """Set (or remove, when *value* is None) one key in a ``.env`` file.

    Other entries are preserved. The file is created with owner-only
    permissions because it may hold a secret.
    """
    entries = parse_dotenv(path)
    if value is None:
        entries.pop(key, None)
    else:
        entries[key] = value

    if not entries:
        path.unlink(missing_ok=True)
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    body = "".join(f"{k}={v}\n" for k, v in entries.items())
    path.write_text(body)
    os.chmod(path, 0o600)


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Load vars from *path* into ``os.environ`` when existing values are blank.

    Returns:
        Dict of vars that were actually injected.
    """
    if path is None:
        path = DEFAULT_ENV_PATH
    injected: dict[str, str] = {}
    for key, value in parse_dotenv(path).items():
        if not os.environ.get(key, "").strip():
            os.environ[key] = value
            injected[key] = value
    return injected
