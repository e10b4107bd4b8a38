"""
Name normalization for credential resolution.

Service, instance and environment entry names arrive in several conventions
("Compose for Redis-ov", "COMPOSE_FOR_REDIS_OV", "compose&for&redis-ov").
Normalizing them to one comparison key lets the resolvers ignore case and
word separators.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# Runs of space, hyphen, ampersand and underscore collapse to one underscore
SEPARATOR_PATTERN = re.compile(r"[ &_-]+")


def normalize_name(name: Any) -> str:
    """
    Normalize a service or entry name to its comparison key.

    Examples:
        Compose-for-Redis-ov → compose_for_redis_ov
        COMPOSE_FOR_REDIS_OV → compose_for_redis_ov
        Compose&for&redis-ov → compose_for_redis_ov

    Args:
        name: Raw name; anything that is not a string normalizes to ""

    Returns:
        Normalized name
    """
    if not isinstance(name, str) or not name:
        return ""
    return SEPARATOR_PATTERN.sub("_", name.lower())


@dataclass
class NormalizationStep:
    """A single step in the normalization process."""

    rule_name: str
    input_value: str
    output_value: str
    changed: bool


def normalize_with_steps(name: str) -> tuple[str, list[NormalizationStep]]:
    """Normalize a name and return all steps applied."""
    lowered = name.lower()
    result = SEPARATOR_PATTERN.sub("_", lowered)
    steps = [
        NormalizationStep(
            rule_name="Lowercase",
            input_value=name,
            output_value=lowered,
            changed=name != lowered,
        ),
        NormalizationStep(
            rule_name="Collapse separators",
            input_value=lowered,
            output_value=result,
            changed=lowered != result,
        ),
    ]
    return result, steps
