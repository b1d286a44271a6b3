"""Configuration for the Frame wallet client.

Settings can be built in code or loaded from a YAML file; ``${VAR_NAME}``
placeholders in the file are expanded from the environment before
validation.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# Frame always listens here; only the host may vary.
FRAME_PORT = 1248
DEFAULT_HOST = "127.0.0.1"


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    If the variable is not set the placeholder is left as-is so that
    validation can catch it later.
    """

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class FrameConfig(BaseModel):
    """Connection and confirmation settings for a wallet session."""

    host: str = DEFAULT_HOST
    request_timeout: float = Field(default=30.0, gt=0)    # per HTTP round trip
    receipt_timeout: float = Field(default=120.0, gt=0)   # wait for a mined receipt
    receipt_poll_latency: float = Field(default=0.5, gt=0)
    # Also treat a JSON-RPC error body on a 2xx switch reply as a failure.
    check_rpc_error: bool = False


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config(path: Path) -> FrameConfig:
    """Load and validate a client configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = path.read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    return FrameConfig.model_validate(expanded)


def save_config(config: FrameConfig, path: Path) -> None:
    """Serialize a :class:`FrameConfig` to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
