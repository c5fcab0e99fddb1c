"""Re-attachment of ignored relationships onto split nodes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from node_splitter.models import Direction, GraphNode, GraphRelationship

if TYPE_CHECKING:
    from collections.abc import Sequence

    from node_splitter.store.base import GraphTransaction


class RelationshipRepairer:
    """Copies every ignored relationship onto every created node.

    Ignored relationships are those whose type is in neither configured
    sequence. Each one ends up once per created node.
    """

    def __init__(self, tx: GraphTransaction) -> None:
        self.tx = tx

    def repair(
        self,
        entry_nodes: Sequence[GraphNode],
        exit_nodes: Sequence[GraphNode],
        ignored_incoming: Sequence[GraphRelationship],
        ignored_outgoing: Sequence[GraphRelationship],
    ) -> int:
        """Attach ignored relationships to all entry and exit nodes.

        Returns:
            Number of relationships created.
        """
        created = 0
        for nodes in (entry_nodes, exit_nodes):
            for node in nodes:
                created += self._attach(node, ignored_incoming, Direction.INCOMING)
            for node in nodes:
                created += self._attach(node, ignored_outgoing, Direction.OUTGOING)
        return created

    def _attach(
        self,
        node: GraphNode,
        relationships: Sequence[GraphRelationship],
        direction: Direction,
    ) -> int:
        for relationship in relationships:
            other_id = relationship.far_endpoint(direction)
            if direction is Direction.INCOMING:
                self.tx.create_relationship(
                    other_id, node.id, relationship.type, relationship.properties
                )
            else:
                self.tx.create_relationship(
                    node.id, other_id, relationship.type, relationship.properties
                )
        return len(relationships)
