"""
Catalog resolver.

Searches the structured service catalog (service name -> bound instances)
for the instance whose credentials should be used.

Two entry points with different tie-breaks:
1. resolve_from_catalog - positional filters, the last matching instance wins
   (the most recently bound instance)
2. find_in_catalog - structured filter, the first matching instance wins
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import structlog

from vcap_services.models import (
    ExactName,
    Instance,
    NamePattern,
    PatternName,
    Resolution,
    ServiceCatalog,
)
from vcap_services.normalizer import normalize_name

logger = structlog.get_logger()


def _selected_services(
    catalog: ServiceCatalog,
    service: NamePattern | None,
    allow_prefix: bool,
) -> Iterator[tuple[str, list[Instance]]]:
    """Yield (service name, instances) for services selected by the pattern."""
    wanted = normalize_name(service.value) if isinstance(service, ExactName) else ""

    for service_name, instances in catalog.items():
        if service is None:
            yield service_name, instances
        elif isinstance(service, PatternName):
            if service.matches(service_name):
                yield service_name, instances
        elif service_name == service.value:
            yield service_name, instances
        elif allow_prefix and wanted and normalize_name(service_name).startswith(wanted):
            yield service_name, instances


def _query_of(service: NamePattern | None) -> str | None:
    if isinstance(service, ExactName):
        return service.value
    if isinstance(service, PatternName):
        return service.pattern.pattern
    return None


def _found(query: str | None, service_name: str, instance: Instance) -> Resolution:
    return Resolution(
        query=query,
        credentials=dict(instance.credentials),
        source="catalog",
        service=service_name,
        instance=instance.name,
    )


def resolve_from_catalog(
    catalog: ServiceCatalog,
    service: NamePattern | None = None,
    plan: str | None = None,
    instance_name: str | None = None,
    tag: str | None = None,
) -> Resolution:
    """
    Resolve credentials from the catalog using positional filters.

    Every given filter must hold: plan equal, instance name equal ignoring
    case, tags containing tag. Instances without credentials never match.
    When several instances match, the last one in catalog order wins.

    Args:
        catalog: Parsed service catalog
        service: Service name or pattern; None scans all services
        plan: Required plan
        instance_name: Required instance name
        tag: Required tag

    Returns:
        Resolution with the winning instance's credentials, or not found
    """
    query = _query_of(service) or instance_name
    wanted_name = instance_name.casefold() if instance_name else None
    match: tuple[str, Instance] | None = None

    for service_name, instances in _selected_services(catalog, service, allow_prefix=True):
        for instance in instances:
            if not instance.has_credentials:
                continue
            if plan and instance.plan != plan:
                continue
            if wanted_name and (instance.name or "").casefold() != wanted_name:
                continue
            if tag and tag not in instance.tags:
                continue
            match = (service_name, instance)

    if match is None:
        return Resolution.not_found(query)

    service_name, instance = match
    logger.debug(
        "catalog_instance_selected",
        service=service_name,
        instance=instance.name,
        plan=instance.plan,
    )
    return _found(query, service_name, instance)


def _field_matches(actual: Any, expected: Any) -> bool:
    if isinstance(actual, list):
        if isinstance(expected, (list, tuple, set)):
            return all(item in actual for item in expected)
        return expected in actual
    return actual == expected


def instance_matches(instance: Instance, instance_filter: Mapping[str, Any] | None) -> bool:
    """
    Check an instance against a field filter.

    Each requested field must equal the instance field. List-valued instance
    fields (such as tags) must contain the requested value, or every item of
    a requested list.
    """
    if not instance_filter:
        return True
    return all(
        _field_matches(instance.get(field_name), expected)
        for field_name, expected in instance_filter.items()
    )


def find_in_catalog(
    catalog: ServiceCatalog,
    service: NamePattern | None = None,
    instance_filter: Mapping[str, Any] | None = None,
) -> Resolution:
    """
    Find the first credentialed instance matching a structured filter.

    Services are selected by exact name or pattern; with no service every
    service is scanned in catalog order.

    Args:
        catalog: Parsed service catalog
        service: Service name or pattern
        instance_filter: Field name -> expected value

    Returns:
        Resolution with the first matching instance's credentials, or not found
    """
    query = _query_of(service)
    if query is None and instance_filter:
        name = instance_filter.get("name")
        query = name if isinstance(name, str) else None

    for service_name, instances in _selected_services(catalog, service, allow_prefix=False):
        for instance in instances:
            if instance.has_credentials and instance_matches(instance, instance_filter):
                logger.debug(
                    "catalog_instance_found",
                    service=service_name,
                    instance=instance.name,
                )
                return _found(query, service_name, instance)

    return Resolution.not_found(query)
