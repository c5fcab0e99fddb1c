"""Removal of the source node once it has been replaced."""

from __future__ import annotations

from typing import TYPE_CHECKING

from node_splitter.models import Direction

if TYPE_CHECKING:
    from node_splitter.store.base import GraphTransaction


class NodeRetirer:
    """Detach-deletes a source node."""

    def __init__(self, tx: GraphTransaction) -> None:
        self.tx = tx

    def retire(self, node_id: str) -> int:
        """Delete every relationship still on the node, then the node itself.

        Returns:
            Number of relationships deleted.
        """
        # A self-loop shows up in both directions.
        remaining = {}
        for direction in (Direction.INCOMING, Direction.OUTGOING):
            for relationship in self.tx.relationships(node_id, direction):
                remaining[relationship.id] = relationship

        for relationship_id in remaining:
            self.tx.delete_relationship(relationship_id)
        self.tx.delete_node(node_id)

        return len(remaining)
