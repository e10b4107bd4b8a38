"""
Credential resolution models.

Provides the catalog instance record, service name patterns, the
find filter and the tagged resolution result shared by all resolvers.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

MASK = "****"


@dataclass
class Instance:
    """One bound occurrence of a service in the catalog."""

    name: str | None = None
    label: str | None = None
    plan: str | None = None
    tags: list[str] = field(default_factory=list)
    credentials: dict[str, Any] = field(default_factory=dict)

    # Any other instance field (provider, syslog_drain_url, ...)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Instance:
        """Build an instance from a raw catalog entry."""
        tags = data.get("tags")
        credentials = data.get("credentials")
        return cls(
            name=data.get("name") if isinstance(data.get("name"), str) else None,
            label=data.get("label") if isinstance(data.get("label"), str) else None,
            plan=data.get("plan") if isinstance(data.get("plan"), str) else None,
            tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
            credentials=dict(credentials) if isinstance(credentials, Mapping) else {},
            extra={
                k: v
                for k, v in data.items()
                if k not in ("name", "label", "plan", "tags", "credentials")
            },
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.credentials)

    def get(self, field_name: str) -> Any:
        """Read a field by name: declared fields first, then extra fields."""
        if field_name in ("name", "label", "plan", "tags", "credentials"):
            return getattr(self, field_name)
        return self.extra.get(field_name)

    def to_dict(self, reveal: bool = False) -> dict[str, Any]:
        """Serialize to dictionary, masking credential values unless reveal."""
        return {
            "name": self.name,
            "label": self.label,
            "plan": self.plan,
            "tags": list(self.tags),
            "credentials": (
                dict(self.credentials) if reveal else {k: MASK for k in self.credentials}
            ),
            **self.extra,
        }


# Service name -> instances, in binding order
ServiceCatalog = dict[str, list[Instance]]


@dataclass(frozen=True)
class ExactName:
    """A service name given as plain text."""

    value: str


@dataclass(frozen=True)
class PatternName:
    """A service name given as a regular expression."""

    pattern: re.Pattern[str]

    def matches(self, service_name: str) -> bool:
        return self.pattern.search(service_name) is not None


NamePattern = Union[ExactName, PatternName]


def as_name_pattern(value: Any) -> NamePattern | None:
    """
    Convert a user supplied service name to a NamePattern.

    Strings become ExactName, compiled regexes become PatternName.
    None and empty strings mean "no service given"; any other value is not
    a usable name either, so callers check is_absent_name to tell them apart.
    """
    if isinstance(value, (ExactName, PatternName)):
        return value
    if isinstance(value, re.Pattern):
        return PatternName(value)
    if isinstance(value, str) and value:
        return ExactName(value)
    return None


def is_absent_name(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value)


@dataclass
class CredentialFilter:
    """Structured filter for find_credentials."""

    service: NamePattern | None = None
    instance: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> CredentialFilter | None:
        """
        Build a filter from a CredentialFilter or a plain mapping.

        Example:
            {"service": "object_storage", "instance": {"tags": "eu", "plan": "standard"}}

        Returns:
            The filter, or None when value is not usable as a filter (including a
            service that is neither a string nor a pattern)
        """
        if isinstance(value, CredentialFilter):
            return value
        if not isinstance(value, Mapping):
            return None
        service = as_name_pattern(value.get("service"))
        if service is None and not is_absent_name(value.get("service")):
            return None
        instance = value.get("instance")
        return cls(
            service=service,
            instance=dict(instance) if isinstance(instance, Mapping) else {},
        )

    @property
    def instance_name(self) -> str | None:
        name = self.instance.get("name")
        return name if isinstance(name, str) and name else None


@dataclass
class Resolution:
    """
    Result of a credential resolution attempt.

    A resolution is either found (source names where the credentials came
    from) or not found (source "none", empty credentials). A found result
    may still carry empty credentials when the matched entry itself is
    empty; the public functions return only the credentials, so callers
    see {} in both cases.
    """

    query: str | None  # Name or target that was resolved
    credentials: dict[str, Any] = field(default_factory=dict)

    source: str = "none"
    # "catalog", "environment", "local_config", "bind", "none"

    service: str | None = None  # Catalog service the instance belongs to
    instance: str | None = None  # Catalog instance name
    key: str | None = None  # Flat source key that matched

    @classmethod
    def not_found(cls, query: str | None = None) -> Resolution:
        return cls(query=query)

    @property
    def found(self) -> bool:
        """Whether a match was found."""
        return self.source != "none"

    def to_dict(self, reveal: bool = False) -> dict[str, Any]:
        """Serialize to dictionary, masking credential values unless reveal."""
        credentials = (
            dict(self.credentials) if reveal else {k: MASK for k in self.credentials}
        )
        return {
            "query": self.query,
            "found": self.found,
            "source": self.source,
            "service": self.service,
            "instance": self.instance,
            "key": self.key,
            "credentials": credentials,
        }


def with_iam_apikey(credentials: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of credentials with "apikey" renamed to "iam_apikey"."""
    renamed = dict(credentials)
    if "apikey" in renamed:
        renamed["iam_apikey"] = renamed.pop("apikey")
    return renamed
