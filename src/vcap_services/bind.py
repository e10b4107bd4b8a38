"""Service bind credentials embedded in request parameters."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from vcap_services.models import with_iam_apikey

logger = structlog.get_logger()

DEFAULT_BIND_KEY = "__bx_creds"


def get_credentials_from_service_bind(
    params: Any,
    service_name: Any,
    alt_name: Any = None,
    bind_key: str = DEFAULT_BIND_KEY,
) -> dict[str, Any]:
    """
    Merge bound service credentials into a copy of the request parameters.

    Example:
        get_credentials_from_service_bind(
            {"text": "hello", "__bx_creds": {"conversation": {"username": "u"}}},
            "conversation",
        ) → {"text": "hello", "username": "u"}

    Args:
        params: Request parameters, possibly holding bind_key
        service_name: Service the credentials are bound under
        alt_name: Alternate bind alias, tried before service_name
        bind_key: Reserved parameter holding alias -> credentials

    Returns:
        New parameters without bind_key; params itself is left untouched
    """
    if not isinstance(params, Mapping):
        return {}

    result = {k: v for k, v in params.items() if k != bind_key}
    bound = params.get(bind_key)
    if not isinstance(bound, Mapping):
        return result

    for alias in (alt_name, service_name):
        if isinstance(alias, str) and alias and isinstance(bound.get(alias), Mapping):
            logger.debug("bind_credentials_found", alias=alias)
            result.update(with_iam_apikey(bound[alias]))
            return result

    logger.debug("bind_credentials_missing", service=service_name, alt_name=alt_name)
    return result
