"""
Credential resolver façade.

Combines the catalog resolver, the loose-name matcher, local config files
and bind parameters into the public lookup API.

Resolution order for get_credentials / find_credentials:
1. Service catalog
2. Flat entries (loose-name match on the instance name, else service name)

Resolution order for get_credentials_for_starter:
1. Local config, when given
2. Service catalog
3. Starter entry (service_watson_<service>)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from vcap_services.bind import get_credentials_from_service_bind as _extract_from_bind
from vcap_services.catalog import find_in_catalog, resolve_from_catalog
from vcap_services.local_config import (
    get_credentials_from_local_config as _extract_from_local_config,
)
from vcap_services.matcher import resolve_from_flat_source
from vcap_services.models import (
    CredentialFilter,
    ExactName,
    Resolution,
    as_name_pattern,
    is_absent_name,
    with_iam_apikey,
)
from vcap_services.settings import Settings, get_settings
from vcap_services.sources import EnvironmentSnapshot, parse_json_object

logger = structlog.get_logger()


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _unwrap(resolution: Resolution) -> Resolution:
    """Use the nested "credentials" object of a flat entry when it has one."""
    nested = resolution.credentials.get("credentials")
    if isinstance(nested, Mapping) and nested:
        resolution.credentials = dict(nested)
    return resolution


@dataclass
class CredentialResolver:
    """Resolves service credentials from one configuration snapshot."""

    snapshot: EnvironmentSnapshot = field(default_factory=EnvironmentSnapshot)
    settings: Settings = field(default_factory=get_settings)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        settings: Settings | None = None,
    ) -> CredentialResolver:
        settings = settings or get_settings()
        return cls(EnvironmentSnapshot.from_environ(environ, settings), settings)

    def _from_flat_source(self, target: str | None) -> Resolution:
        resolution = resolve_from_flat_source(
            self.snapshot.entries,
            target,
            max_suffix_tokens=self.settings.max_suffix_tokens,
        )
        return _unwrap(resolution) if resolution.found else resolution

    def resolve(
        self,
        service_name: Any = None,
        plan: Any = None,
        instance_name: Any = None,
        tag: Any = None,
    ) -> Resolution:
        """
        Resolve credentials with positional filters.

        Args:
            service_name: Service name (prefix allowed) or compiled regex
            plan: Required plan
            instance_name: Required instance name; also the flat entry target
            tag: Required tag

        Returns:
            Resolution from the catalog or from a flat entry
        """
        service = as_name_pattern(service_name)
        if service is None and not is_absent_name(service_name):
            return Resolution.not_found()
        plan, instance_name, tag = _text(plan), _text(instance_name), _text(tag)

        if service is None and not (instance_name or plan or tag):
            return Resolution.not_found()

        resolution = resolve_from_catalog(
            self.snapshot.catalog, service, plan=plan, instance_name=instance_name, tag=tag
        )
        if resolution.found:
            return resolution

        target = instance_name or (service.value if isinstance(service, ExactName) else None)
        if target is None:
            return resolution
        logger.debug("catalog_miss", target=target)
        return self._from_flat_source(target)

    def get_credentials(
        self,
        service_name: Any = None,
        plan: Any = None,
        instance_name: Any = None,
        tag: Any = None,
    ) -> dict[str, Any]:
        return dict(self.resolve(service_name, plan, instance_name, tag).credentials)

    def find(self, credential_filter: Any) -> Resolution:
        """
        Resolve credentials with a structured filter.

        Args:
            credential_filter: CredentialFilter or {"service": ..., "instance": {...}}

        Returns:
            Resolution from the catalog or from a flat entry
        """
        parsed = CredentialFilter.from_value(credential_filter)
        if parsed is None:
            return Resolution.not_found()

        resolution = find_in_catalog(self.snapshot.catalog, parsed.service, parsed.instance)
        if resolution.found or parsed.instance_name is None:
            return resolution
        return self._from_flat_source(parsed.instance_name)

    def find_credentials(self, credential_filter: Any) -> dict[str, Any]:
        return dict(self.find(credential_filter).credentials)

    def resolve_starter(self, service_name: Any, local_config: Any = None) -> Resolution:
        """
        Resolve credentials for a starter application.

        Args:
            service_name: Service name, e.g. "discovery"
            local_config: Flat local config mapping (see local_config.py)

        Returns:
            Resolution from the local config, the catalog or the starter entry
        """
        service_name = _text(service_name)
        if service_name is None:
            return Resolution.not_found()

        if local_config:
            credentials = _extract_from_local_config(
                service_name, local_config, prefix=self.settings.local_config_prefix
            )
            if credentials:
                return Resolution(
                    query=service_name, credentials=credentials, source="local_config"
                )

        resolution = resolve_from_catalog(self.snapshot.catalog, ExactName(service_name))
        if resolution.found:
            return resolution

        key = f"{self.settings.starter_key_prefix}{service_name}"
        if key in self.snapshot.entries:
            parsed = parse_json_object(self.snapshot.entries[key], key=key)
            resolution = (
                Resolution(query=key, credentials=parsed, source="environment", key=key)
                if parsed is not None
                else Resolution.not_found(key)
            )
        else:
            resolution = self._from_flat_source(key)

        if resolution.found:
            resolution.credentials = with_iam_apikey(resolution.credentials)
        return resolution

    def get_credentials_for_starter(
        self, service_name: Any, local_config: Any = None
    ) -> dict[str, Any]:
        return dict(self.resolve_starter(service_name, local_config).credentials)

    def get_credentials_from_local_config(
        self, service_name: Any, local_config: Any
    ) -> dict[str, Any]:
        return _extract_from_local_config(
            service_name, local_config, prefix=self.settings.local_config_prefix
        )

    def get_credentials_from_service_bind(
        self, params: Any, service_name: Any, alt_name: Any = None
    ) -> dict[str, Any]:
        return _extract_from_bind(
            params, service_name, alt_name, bind_key=self.settings.bind_key
        )


# Module-level API: a fresh snapshot of the process environment per call


def get_credentials(
    service_name: Any = None,
    plan: Any = None,
    instance_name: Any = None,
    tag: Any = None,
) -> dict[str, Any]:
    """Get credentials for a service from the process environment."""
    return CredentialResolver.from_environ().get_credentials(
        service_name, plan, instance_name, tag
    )


def find_credentials(credential_filter: Any) -> dict[str, Any]:
    """Find credentials matching a filter in the process environment."""
    return CredentialResolver.from_environ().find_credentials(credential_filter)


def get_credentials_for_starter(service_name: Any, local_config: Any = None) -> dict[str, Any]:
    """Get credentials for a starter application."""
    return CredentialResolver.from_environ().get_credentials_for_starter(
        service_name, local_config
    )


def get_credentials_from_local_config(service_name: Any, local_config: Any) -> dict[str, Any]:
    """Get credentials for a service from a flat local config mapping."""
    return _extract_from_local_config(
        service_name, local_config, prefix=get_settings().local_config_prefix
    )


def get_credentials_from_service_bind(
    params: Any, service_name: Any, alt_name: Any = None
) -> dict[str, Any]:
    """Merge bind credentials from request parameters into a copy of them."""
    return _extract_from_bind(params, service_name, alt_name, bind_key=get_settings().bind_key)
