"""Store interface the splitter runs against.

The splitter never touches a database handle directly. Every operation
receives a GraphTransaction, obtained from a GraphStore, which carries the
lock and CRUD capabilities for one split.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from typing import Any, Protocol

from node_splitter.models import Direction, GraphNode, GraphRelationship


class GraphTransaction(Protocol):
    """Lock and mutation capabilities scoped to one store transaction.

    Every method raises StoreError when the store rejects the operation.
    """

    def lock_node(self, node_id: str) -> None:
        """Acquire an exclusive write lock on a node until the transaction ends."""
        ...

    def get_node(self, node_id: str) -> GraphNode | None:
        """Read a node, or None if it does not exist."""
        ...

    def relationships(self, node_id: str, direction: Direction) -> list[GraphRelationship]:
        """Read a node's relationships in one direction, in stable store order."""
        ...

    def create_node(
        self,
        labels: Iterable[str],
        properties: Mapping[str, Any],
    ) -> GraphNode:
        """Create a node."""
        ...

    def create_relationship(
        self,
        start_id: str,
        end_id: str,
        relationship_type: str,
        properties: Mapping[str, Any],
    ) -> GraphRelationship:
        """Create a relationship ``start -[type]-> end``."""
        ...

    def delete_relationship(self, relationship_id: str) -> None:
        """Delete a relationship."""
        ...

    def delete_node(self, node_id: str) -> None:
        """Delete a node that no longer has relationships."""
        ...


class GraphStore(Protocol):
    """Source of transactions."""

    def transaction(self, *, dry_run: bool = False) -> AbstractContextManager[GraphTransaction]:
        """Open a transaction.

        The transaction commits when the block exits normally and rolls back
        when an exception escapes or ``dry_run`` is set.
        """
        ...
