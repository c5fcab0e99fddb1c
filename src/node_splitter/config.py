"""Configuration for node splitting.

This module defines the SplitNodeConfiguration frozen dataclass and the
parser that builds it from the loosely typed mapping a caller supplies
(e.g. a Cypher map or a JSON document).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import re
from typing import Any

from .exceptions import ConfigurationError

START_INDEX = "startIndex"
INDEX_PROPERTY_NAME = "indexProperty"
RELATIONSHIP_TYPES = "relationshipTypes"
GREEDY_RELATIONSHIP_TYPES = "greedyRelationshipTypes"

# Optional sign and ASCII digits only, no whitespace or underscores.
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class SplitNodeConfiguration:
    """Immutable configuration for one split call.

    Attributes:
        start_index: First value of the index property.
        index_property_name: Property stamped with the running index on every
            created node. None disables stamping.
        relationship_types: Non-greedy relationship types, in processing order.
        greedy_relationship_types: Greedy relationship types, in processing order.
    """

    start_index: int = 0
    index_property_name: str | None = None
    relationship_types: tuple[str, ...] = ()
    greedy_relationship_types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration values."""
        overlap = set(self.relationship_types) & set(self.greedy_relationship_types)
        if overlap:
            msg = (
                f"Relationship types {sorted(overlap)} appear in both "
                f"{RELATIONSHIP_TYPES} and {GREEDY_RELATIONSHIP_TYPES}"
            )
            raise ConfigurationError(msg, key=GREEDY_RELATIONSHIP_TYPES)

    @classmethod
    def build(cls, configuration: Mapping[str, Any] | None) -> SplitNodeConfiguration:
        """Build a configuration from an untyped key/value mapping.

        Unrecognised keys are ignored; a key mapped to None counts as absent.

        Args:
            configuration: Mapping with any of ``startIndex``, ``indexProperty``,
                ``relationshipTypes`` and ``greedyRelationshipTypes``.

        Returns:
            The validated configuration.

        Raises:
            ConfigurationError: If a recognised key holds a malformed value.
        """
        configuration = configuration or {}

        index_property = configuration.get(INDEX_PROPERTY_NAME)

        return cls(
            start_index=_parse_start_index(configuration),
            index_property_name=None if index_property is None else str(index_property),
            relationship_types=_parse_relationship_types(configuration, RELATIONSHIP_TYPES),
            greedy_relationship_types=_parse_relationship_types(
                configuration, GREEDY_RELATIONSHIP_TYPES
            ),
        )

    @property
    def classified_types(self) -> frozenset[str]:
        """All relationship types that take part in splitting."""
        return frozenset(self.relationship_types) | frozenset(self.greedy_relationship_types)

    def is_classified(self, relationship_type: str) -> bool:
        """Whether relationships of this type are split rather than copied."""
        return relationship_type in self.classified_types


def _parse_start_index(configuration: Mapping[str, Any]) -> int:
    value = configuration.get(START_INDEX)
    if value is None:
        return 0
    text = str(value)
    if _INTEGER_PATTERN.fullmatch(text) is None:
        msg = f"Unable to parse {START_INDEX} value: {value!r}"
        raise ConfigurationError(msg, key=START_INDEX)
    return int(text)


def _parse_relationship_types(
    configuration: Mapping[str, Any],
    key: str,
) -> tuple[str, ...]:
    """Parse a sequence of type names, collapsing duplicates in first-seen order."""
    value = configuration.get(key)
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        msg = f"Unable to parse {key} value: expected a list of strings, got {type(value).__name__}"
        raise ConfigurationError(msg, key=key)

    for item in value:
        if not isinstance(item, str):
            msg = f"Unable to parse {key} value: {item!r} is not a string"
            raise ConfigurationError(msg, key=key)

    return tuple(dict.fromkeys(value))
