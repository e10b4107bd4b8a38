"""
Configuration sources.

Turns raw process state into the immutable inputs the resolvers work on:
the parsed service catalog and the flat source of individual entries.
Malformed values never raise; they are logged and treated as absent.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from vcap_services.models import Instance, ServiceCatalog
from vcap_services.settings import Settings, get_settings

logger = structlog.get_logger()


def parse_json_object(value: Any, key: str | None = None) -> dict[str, Any] | None:
    """
    Parse a configuration value into a JSON object.

    Mappings are copied as-is. Text that is not JSON, or JSON that is not
    an object, gives None.

    Args:
        value: Raw value (JSON text or an already-parsed mapping)
        key: Entry name, used for logging only

    Returns:
        The parsed object or None
    """
    if isinstance(value, Mapping):
        return dict(value)
    if not isinstance(value, (str, bytes)) or not value:
        return None

    try:
        parsed = json.loads(value)
    except ValueError:
        logger.warning("malformed_config_value", key=key, reason="not_json")
        return None

    if not isinstance(parsed, dict):
        logger.warning("malformed_config_value", key=key, reason="not_an_object")
        return None
    return parsed


def parse_catalog(value: Any) -> ServiceCatalog:
    """
    Parse a service catalog blob.

    Services whose value is not a list, and instances that are not
    objects, are skipped.
    """
    if not value:
        return {}

    data = parse_json_object(value, key="catalog")
    if data is None:
        logger.warning("malformed_catalog")
        return {}

    catalog: ServiceCatalog = {}
    for service_name, instances in data.items():
        if not isinstance(instances, list):
            logger.debug("catalog_service_skipped", service=service_name)
            continue
        catalog[service_name] = [
            Instance.from_dict(item) for item in instances if isinstance(item, Mapping)
        ]
    return catalog


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Service catalog and flat entries captured at one point in time."""

    catalog: ServiceCatalog = field(default_factory=dict)

    # Raw key -> raw value, keys in lexicographic order
    entries: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        settings: Settings | None = None,
    ) -> EnvironmentSnapshot:
        """
        Capture a snapshot from environment variables.

        The catalog variable is parsed as the catalog and left out of the
        flat entries.

        Args:
            environ: Environment mapping (defaults to os.environ)
            settings: Settings naming the catalog variable
        """
        environ = os.environ if environ is None else environ
        settings = settings or get_settings()

        catalog = parse_catalog(environ.get(settings.catalog_env_var))
        entries = {
            key: environ[key] for key in sorted(environ) if key != settings.catalog_env_var
        }
        return cls(catalog=catalog, entries=entries)

    @classmethod
    def from_data(
        cls,
        catalog: Mapping[str, Any] | None = None,
        entries: Mapping[str, Any] | None = None,
    ) -> EnvironmentSnapshot:
        """Build a snapshot from already-loaded data (catalog as plain dicts)."""
        return cls(
            catalog=parse_catalog(dict(catalog)) if catalog else {},
            entries=dict(entries or {}),
        )
