"""
Loose-name matcher for flat configuration entries.

Platforms also expose services as individual entries named after the
instance, e.g. CLOUDANT_NOSQL_DB_X5 holding a JSON object. The matcher finds
the entry for a requested name without knowing the exact key.

Matching (in priority order):
1. Exact normalized match
2. Discriminator match - one normalized name extends the other by a short
   suffix of alphanumeric tokens (cloudant_nosql -> CLOUDANT_NOSQL_DB_X5)

Only upper-case (environment style) keys are considered.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from vcap_services.models import Resolution
from vcap_services.normalizer import normalize_name
from vcap_services.sources import parse_json_object

logger = structlog.get_logger()

DEFAULT_MAX_SUFFIX_TOKENS = 2


def is_environment_style(key: str) -> bool:
    """Whether a key is upper-case or symbols only (e.g. OBJECT_STORAGE_6J)."""
    return bool(key) and key == key.upper()


def _is_discriminator(remainder: str, max_suffix_tokens: int) -> bool:
    pattern = rf"[a-z0-9]+(?:_[a-z0-9]+){{0,{max(max_suffix_tokens - 1, 0)}}}"
    return re.fullmatch(pattern, remainder) is not None


def _extends(longer: str, shorter: str, max_suffix_tokens: int) -> bool:
    """Whether longer is shorter plus an underscore and a discriminator suffix."""
    if not shorter or not longer.startswith(shorter + "_"):
        return False
    return _is_discriminator(longer[len(shorter) + 1 :], max_suffix_tokens)


def select_key(
    keys: Iterable[str],
    target: str,
    max_suffix_tokens: int = DEFAULT_MAX_SUFFIX_TOKENS,
) -> str | None:
    """
    Pick the flat source key that best matches a target name.

    Examples (keys CLOUDANT_NOSQL_DB_X5, CLOUDANT_NOSQL_DB_X6):
        cloudant_nosql_db_x6 → CLOUDANT_NOSQL_DB_X6 (exact)
        cloudant_nosql       → CLOUDANT_NOSQL_DB_X5 (first discriminator match)
        cloudant_nosql_xx    → None

    A key extending the target (CLOUDANT_NOSQL_DB_X5 for cloudant_nosql) is
    preferred over a key the target extends (CLOUDANT for cloudant_nosql).

    Args:
        keys: Source keys in priority order
        target: Requested name in any casing or separator convention
        max_suffix_tokens: Longest discriminator suffix, in tokens

    Returns:
        The selected key or None
    """
    wanted = normalize_name(target)
    if not wanted:
        return None

    first_extending: str | None = None
    first_base: str | None = None
    for key in keys:
        if not is_environment_style(key):
            continue
        normalized = normalize_name(key)
        if normalized == wanted:
            return key
        if first_extending is None and _extends(normalized, wanted, max_suffix_tokens):
            first_extending = key
        elif first_base is None and _extends(wanted, normalized, max_suffix_tokens):
            first_base = key

    # Keys that extend the target outrank keys the target extends
    return first_extending or first_base


def resolve_from_flat_source(
    source: Mapping[str, Any],
    target: str | None,
    parse: Callable[..., dict[str, Any] | None] = parse_json_object,
    max_suffix_tokens: int = DEFAULT_MAX_SUFFIX_TOKENS,
) -> Resolution:
    """
    Resolve a target name against a flat source of configuration entries.

    The selected entry must parse to a JSON object. If it does not, the
    result is not found; other candidates are not tried.

    Args:
        source: Raw key -> raw value
        target: Requested name
        parse: Value parser, called as parse(value, key=key)
        max_suffix_tokens: Longest discriminator suffix, in tokens

    Returns:
        Resolution holding the parsed object as-is, or not found
    """
    if not isinstance(target, str) or not target:
        return Resolution.not_found()

    key = select_key(source.keys(), target, max_suffix_tokens)
    if key is None:
        return Resolution.not_found(target)

    parsed = parse(source[key], key=key)
    if parsed is None:
        logger.debug("flat_entry_unusable", key=key, target=target)
        return Resolution.not_found(target)

    logger.debug("flat_entry_selected", key=key, target=target)
    return Resolution(query=target, credentials=parsed, source="environment", key=key)
