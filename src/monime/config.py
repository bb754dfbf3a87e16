"""Client configuration.

:class:`ClientConfig` is immutable once built.  :func:`load_config`
resolves one using a three-tier precedence hierarchy, highest first:

1. Explicit keyword arguments.
2. Environment variables (``MONIME_SPACE_ID``, ``MONIME_ACCESS_TOKEN``,
   ``MONIME_BASE_URL``, ``MONIME_TIMEOUT``, ``MONIME_RETRIES``).
3. A YAML config file (``~/.monime/config.yaml`` unless a path is given).

Anything still unset falls back to the built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from monime.errors import MonimeValidationError

DEFAULT_BASE_URL = "https://api.monime.io"
DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_RETRIES = 2
DEFAULT_RETRY_DELAY = 1.0  # seconds
DEFAULT_RETRY_BACKOFF = 2.0

_ENV_VARS: Dict[str, str] = {
    "space_id": "MONIME_SPACE_ID",
    "access_token": "MONIME_ACCESS_TOKEN",
    "base_url": "MONIME_BASE_URL",
    "timeout": "MONIME_TIMEOUT",
    "retries": "MONIME_RETRIES",
}

_FILE_KEYS = (
    "space_id",
    "access_token",
    "base_url",
    "timeout",
    "retries",
    "retry_delay",
    "retry_backoff",
    "validate_inputs",
)


@dataclass(frozen=True)
class ClientConfig:
    space_id: str
    access_token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    validate_inputs: bool = True
    user_agent: str = "monime-python/0.1.0"

    def __post_init__(self) -> None:
        # HTTPS is required even when input validation is switched off.
        if not self.base_url.startswith("https://"):
            raise MonimeValidationError(
                "base_url must use HTTPS for security",
                "base_url",
                self.base_url,
            )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.validate_inputs:
            validate_config(self)

    def __repr__(self) -> str:
        return (
            f"ClientConfig(space_id={self.space_id!r}, base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, retries={self.retries!r}, "
            f"access_token='***')"
        )


def validate_config(config: ClientConfig) -> None:
    """Raise :class:`MonimeValidationError` for the first invalid field."""
    if not isinstance(config.space_id, str) or not config.space_id:
        raise MonimeValidationError("space_id is required", "space_id", config.space_id)
    if not config.space_id.startswith("spc-"):
        raise MonimeValidationError(
            "space_id must start with 'spc-'", "space_id", config.space_id
        )
    if not isinstance(config.access_token, str) or not config.access_token.strip():
        raise MonimeValidationError("access_token is required", "access_token")

    for name in ("timeout", "retry_delay", "retry_backoff"):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise MonimeValidationError(
                f"{name} must be a non-negative number", name, value
            )

    if isinstance(config.retries, bool) or not isinstance(config.retries, int) or config.retries < 0:
        raise MonimeValidationError(
            "retries must be a non-negative integer", "retries", config.retries
        )


def get_default_config_path() -> Path:
    """Return the default config file location (``~/.monime/config.yaml``)."""
    return Path.home() / ".monime" / "config.yaml"


def _load_config_file(config_path: Path) -> Dict[str, Any]:
    """Read a YAML config file, returning an empty dict on any failure."""
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (yaml.YAMLError, OSError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def load_config(
    space_id: Optional[str] = None,
    access_token: Optional[str] = None,
    *,
    config_path: Optional[str] = None,
    **overrides: Any,
) -> ClientConfig:
    """Resolve a :class:`ClientConfig` from arguments, environment and file.

    Extra keyword arguments (``base_url``, ``timeout``, ``retries``,
    ``retry_delay``, ``retry_backoff``, ``validate_inputs``) take the same
    top priority as *space_id* and *access_token*.

    Raises:
        MonimeValidationError: If the resolved values are invalid.
    """
    unknown = set(overrides) - set(_FILE_KEYS)
    if unknown:
        raise TypeError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}

    path = Path(config_path) if config_path else get_default_config_path()
    file_values = _load_config_file(path)
    for key in _FILE_KEYS:
        if file_values.get(key) is not None:
            values[key] = file_values[key]

    for key, env_name in _ENV_VARS.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[key] = env_value

    explicit = dict(overrides, space_id=space_id, access_token=access_token)
    for key, value in explicit.items():
        if value is not None:
            values[key] = value

    try:
        if "timeout" in values:
            values["timeout"] = float(values["timeout"])
        if "retries" in values:
            values["retries"] = int(values["retries"])
    except (TypeError, ValueError) as exc:
        raise MonimeValidationError(
            f"Invalid numeric config value: {exc}", "timeout/retries"
        ) from exc

    values.setdefault("space_id", "")
    values.setdefault("access_token", "")
    return ClientConfig(**values)


__all__ = [
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "get_default_config_path",
    "load_config",
    "validate_config",
]
