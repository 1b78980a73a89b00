"""Load client configuration from a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bitcoin_rpc.config.schema import ClientConfig
from bitcoin_rpc.core.errors import ConfigError

logger = logging.getLogger(__name__)


def load_json_file(path: Path) -> dict[str, Any]:
    """Load and parse a JSON object from a file.

    Args:
        path: Path to the JSON file to load.

    Returns:
        Parsed JSON as a dict. Returns empty dict if file is empty.

    Raises:
        ConfigError: If the file doesn't exist, can't be read, contains invalid
            JSON, or contains non-dict JSON (e.g., array or scalar).
    """
    resolved = path.expanduser().resolve()

    if not resolved.is_file():
        raise ConfigError(f"File not found: {path}")

    try:
        content = resolved.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Failed to read file {path}: {e}") from e

    content = content.strip()
    if not content:
        return {}

    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ConfigError(f"Expected object in {path}, got {type(result).__name__}")

    return result


def build_config(data: dict[str, Any], source: str = "") -> ClientConfig:
    """Validate raw options into a ClientConfig.

    Raises:
        ConfigError: If validation fails (unknown network, bad port, extra keys).
    """
    try:
        return ClientConfig.model_validate(data)
    except ValidationError as e:
        where = f" in {source}" if source else ""
        raise ConfigError(f"Invalid client configuration{where}: {e}") from e


def load_config(path: Path) -> ClientConfig:
    """Load a ClientConfig from a JSON file.

    A relative cookie path is resolved against the config file's directory.

    Raises:
        ConfigError: If the file is missing, not a JSON object, or invalid.
    """
    data = load_json_file(path)
    cookie = data.get("cookie")
    if isinstance(cookie, str) and cookie and not cookie.startswith("~"):
        cookie_path = Path(cookie)
        if not cookie_path.is_absolute():
            data["cookie"] = str(path.expanduser().resolve().parent / cookie_path)
    logger.debug("Loaded client config from %s", path)
    return build_config(data, source=str(path))
