"""In-memory graph store.

An arena of nodes and relationships keyed by stable string identifiers.
Rewiring never mutates an element in place: new relationships are created
and the old ones linger until their node is detach-deleted, which matches
how real graph stores behave.

Transactions are serialised by a store-wide lock, so node locks are only
recorded (for inspection) rather than contended. Rollback restores the
arena snapshot taken when the transaction began.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import itertools
import threading
from typing import Any

import structlog

from node_splitter.exceptions import StoreError
from node_splitter.models import Direction, GraphNode, GraphRelationship

logger = structlog.get_logger(__name__)

NodeRef = GraphNode | str


def _node_id(node: NodeRef) -> str:
    return node.id if isinstance(node, GraphNode) else node


class MemoryTransaction:
    """GraphTransaction over a MemoryGraphStore."""

    def __init__(self, store: MemoryGraphStore) -> None:
        self._store = store
        self._closed = False
        self.locked_node_ids: list[str] = []

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise StoreError(operation, "transaction is closed")

    def _require_node(self, operation: str, node_id: str) -> GraphNode:
        node = self._store._nodes.get(node_id)
        if node is None:
            raise StoreError(operation, f"node {node_id} does not exist")
        return node

    def close(self) -> None:
        self._closed = True

    def lock_node(self, node_id: str) -> None:
        self._check_open("lock_node")
        self._require_node("lock_node", node_id)
        if node_id not in self.locked_node_ids:
            self.locked_node_ids.append(node_id)

    def get_node(self, node_id: str) -> GraphNode | None:
        self._check_open("get_node")
        return self._store._nodes.get(node_id)

    def relationships(self, node_id: str, direction: Direction) -> list[GraphRelationship]:
        self._check_open("relationships")
        self._require_node("relationships", node_id)
        return self._store._relationships_of(node_id, direction)

    def create_node(
        self,
        labels: Iterable[str],
        properties: Mapping[str, Any],
    ) -> GraphNode:
        self._check_open("create_node")
        node = GraphNode(
            id=self._store._next_id("n"),
            labels=frozenset(labels),
            properties=dict(properties),
        )
        self._store._nodes[node.id] = node
        return node

    def create_relationship(
        self,
        start_id: str,
        end_id: str,
        relationship_type: str,
        properties: Mapping[str, Any],
    ) -> GraphRelationship:
        self._check_open("create_relationship")
        self._require_node("create_relationship", start_id)
        self._require_node("create_relationship", end_id)
        if not relationship_type:
            raise StoreError("create_relationship", "relationship type must not be empty")
        relationship = GraphRelationship(
            id=self._store._next_id("r"),
            type=relationship_type,
            start_id=start_id,
            end_id=end_id,
            properties=dict(properties),
        )
        self._store._relationships[relationship.id] = relationship
        return relationship

    def delete_relationship(self, relationship_id: str) -> None:
        self._check_open("delete_relationship")
        if self._store._relationships.pop(relationship_id, None) is None:
            raise StoreError(
                "delete_relationship", f"relationship {relationship_id} does not exist"
            )

    def delete_node(self, node_id: str) -> None:
        self._check_open("delete_node")
        self._require_node("delete_node", node_id)
        attached = self._store._relationships_of(node_id, None)
        if attached:
            msg = f"node {node_id} still has {len(attached)} relationships"
            raise StoreError("delete_node", msg)
        del self._store._nodes[node_id]


class MemoryGraphStore:
    """GraphStore keeping the whole graph in process memory.

    Example:
        >>> store = MemoryGraphStore()
        >>> a = store.add_node("A", name="a")
        >>> b = store.add_node("B")
        >>> store.add_relationship(a, b, "LINKS", weight=1)
        >>> with store.transaction() as tx:
        ...     tx.relationships(a.id, Direction.OUTGOING)
    """

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._relationships: dict[str, GraphRelationship] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.lock_history: list[list[str]] = []

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def _relationships_of(
        self,
        node_id: str,
        direction: Direction | None,
    ) -> list[GraphRelationship]:
        result = []
        for relationship in self._relationships.values():
            if direction is Direction.INCOMING:
                matches = relationship.end_id == node_id
            elif direction is Direction.OUTGOING:
                matches = relationship.start_id == node_id
            else:
                matches = node_id in (relationship.start_id, relationship.end_id)
            if matches:
                result.append(relationship)
        return result

    @contextmanager
    def transaction(self, *, dry_run: bool = False) -> Iterator[MemoryTransaction]:
        """Open a transaction; see GraphStore.transaction."""
        with self._lock:
            nodes_before = dict(self._nodes)
            relationships_before = dict(self._relationships)
            tx = MemoryTransaction(self)
            try:
                yield tx
            except BaseException:
                self._nodes = nodes_before
                self._relationships = relationships_before
                logger.debug("Rolled back transaction", locks=len(tx.locked_node_ids))
                raise
            else:
                if dry_run:
                    self._nodes = nodes_before
                    self._relationships = relationships_before
                    logger.debug("Rolled back dry-run transaction")
                else:
                    logger.debug("Committed transaction", locks=len(tx.locked_node_ids))
            finally:
                tx.close()
                self.lock_history.append(list(tx.locked_node_ids))

    # -------------------------------------------------------------------------
    # Fixture helpers
    # -------------------------------------------------------------------------

    def add_node(self, *labels: str, **properties: Any) -> GraphNode:
        """Create a node in its own transaction."""
        with self.transaction() as tx:
            return tx.create_node(labels, properties)

    def add_relationship(
        self,
        start: NodeRef,
        end: NodeRef,
        relationship_type: str,
        **properties: Any,
    ) -> GraphRelationship:
        """Create a relationship in its own transaction."""
        with self.transaction() as tx:
            return tx.create_relationship(
                _node_id(start), _node_id(end), relationship_type, properties
            )

    # -------------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------------

    def get_node(self, node_id: str) -> GraphNode | None:
        return self._nodes.get(node_id)

    def nodes(self, label: str | None = None) -> list[GraphNode]:
        """All nodes, optionally restricted to one label, in creation order."""
        return [n for n in self._nodes.values() if label is None or label in n.labels]

    def find_nodes(self, label: str | None = None, **properties: Any) -> list[GraphNode]:
        """Nodes carrying ``label`` whose properties include ``properties``."""
        return [
            n
            for n in self.nodes(label)
            if all(n.properties.get(k) == v for k, v in properties.items())
        ]

    def relationships(self, relationship_type: str | None = None) -> list[GraphRelationship]:
        """All relationships, optionally restricted to one type, in creation order."""
        return [
            r
            for r in self._relationships.values()
            if relationship_type is None or r.type == relationship_type
        ]

    def relationships_of(
        self,
        node: NodeRef,
        direction: Direction | None = None,
    ) -> list[GraphRelationship]:
        """Relationships attached to a node; both directions when ``direction`` is None."""
        return self._relationships_of(_node_id(node), direction)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def relationship_count(self) -> int:
        return len(self._relationships)
