"""
Local config credentials.

Starter applications ship a flat secrets file whose keys combine a prefix,
the service name and the credential field:

    watson_conversation_username: <username>
    watson_conversation_apikey: <apikey>
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml

from vcap_services.errors import ConfigurationError
from vcap_services.models import with_iam_apikey
from vcap_services.normalizer import normalize_name

logger = structlog.get_logger()

DEFAULT_PREFIX = "watson"


def get_credentials_from_local_config(
    service_name: Any,
    local_config: Any,
    prefix: str = DEFAULT_PREFIX,
) -> dict[str, Any]:
    """
    Collect the credentials of one service from a flat local config.

    Example:
        get_credentials_from_local_config(
            "conversation",
            {"watson_conversation_url": "<url>", "watson_conversation_apikey": "<key>"},
        ) → {"url": "<url>", "iam_apikey": "<key>"}

    Args:
        service_name: Service name, e.g. "conversation"
        local_config: Flat key/value mapping
        prefix: Key prefix token

    Returns:
        Credentials with the prefix and service name stripped from each key
    """
    service = normalize_name(service_name)
    if not service or not isinstance(local_config, Mapping):
        return {}

    key_prefix = f"{normalize_name(prefix)}_{service}_" if prefix else f"{service}_"
    credentials: dict[str, Any] = {}
    for key, value in local_config.items():
        if not isinstance(key, str) or not key.lower().startswith(key_prefix):
            continue
        field_name = key[len(key_prefix) :]
        if field_name:
            credentials[field_name] = value

    return with_iam_apikey(credentials)


def load_local_config(path: str | Path) -> dict[str, Any]:
    """
    Load a local config file (YAML or JSON).

    Raises:
        ConfigurationError: If the file is missing or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError("Local config file not found", {"path": str(path)})

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            "Failed to load local config", {"path": str(path), "error": type(e).__name__}
        ) from e

    if not isinstance(data, dict):
        logger.warning("local_config_not_a_mapping", path=str(path))
        return {}
    return data
