"""Graph element models shared by the splitter and the store adapters.

These are immutable snapshots: the store owns the lifetime of nodes and
relationships, the splitter only reads them and asks the store to mutate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    """Relationship direction relative to a reference node."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


class GraphNode(BaseModel):
    """Snapshot of a node as read from the store.

    Attributes:
        id: Stable store identifier.
        labels: Label set of the node.
        properties: Property name to value mapping.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Store identifier of the node")
    labels: frozenset[str] = Field(default_factory=frozenset, description="Node labels")
    properties: dict[str, Any] = Field(default_factory=dict, description="Node properties")


class GraphRelationship(BaseModel):
    """Snapshot of a directed relationship as read from the store.

    Attributes:
        id: Stable store identifier.
        type: Relationship type name.
        start_id: Identifier of the start node.
        end_id: Identifier of the end node.
        properties: Property name to value mapping.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Store identifier of the relationship")
    type: str = Field(description="Relationship type name")
    start_id: str = Field(description="Start node identifier")
    end_id: str = Field(description="End node identifier")
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Relationship properties"
    )

    def other_node_id(self, node_id: str) -> str:
        """Return the endpoint opposite to ``node_id``."""
        return self.end_id if self.start_id == node_id else self.start_id

    def far_endpoint(self, direction: Direction) -> str:
        """Return the endpoint that is not the reference node.

        For an incoming relationship that is the start node, for an
        outgoing relationship the end node.
        """
        return self.start_id if direction is Direction.INCOMING else self.end_id


@dataclass
class SplitGroup:
    """Nodes created while processing one relationship type."""

    relationship_type: str
    entry_nodes: list[GraphNode] = field(default_factory=list)
    exit_nodes: list[GraphNode] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        """Number of nodes created for this type."""
        return len(self.entry_nodes) + len(self.exit_nodes)


@dataclass(frozen=True)
class SplitNodeResult:
    """One record yielded by ``split_nodes``: a node created by a split."""

    node: GraphNode
