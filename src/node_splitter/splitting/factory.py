"""Creation of split nodes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from node_splitter.models import Direction, GraphNode, GraphRelationship

if TYPE_CHECKING:
    from node_splitter.store.base import GraphTransaction


class SplitNodeFactory:
    """Creates copies of a source node, each taking over one relationship.

    Every copy gets the source's labels and the property snapshot taken when
    the split began. The index property is stamped before the source
    properties are copied, so a source property of the same name wins.
    """

    def __init__(
        self,
        tx: GraphTransaction,
        source: GraphNode,
        index_property_name: str | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            tx: Open store transaction.
            source: Snapshot of the node being split.
            index_property_name: Property to stamp with the running index.
        """
        self.tx = tx
        self.source = source
        self.index_property_name = index_property_name

    def create(
        self,
        relationship: GraphRelationship,
        direction: Direction,
        index: int,
    ) -> tuple[GraphNode, GraphRelationship]:
        """Create one split node and rewire ``relationship`` onto it.

        The original relationship is left in place; it goes away when the
        source node is detach-deleted.

        Args:
            relationship: Original relationship of the source node.
            direction: Direction of ``relationship`` relative to the source.
            index: Index value for the new node.

        Returns:
            The new node and the rewired relationship.
        """
        properties = {}
        if self.index_property_name is not None:
            properties[self.index_property_name] = index
        properties.update(self.source.properties)

        node = self.tx.create_node(self.source.labels, properties)

        other_id = relationship.far_endpoint(direction)
        if direction is Direction.INCOMING:
            start_id, end_id = other_id, node.id
        else:
            start_id, end_id = node.id, other_id

        rewired = self.tx.create_relationship(
            start_id, end_id, relationship.type, relationship.properties
        )
        return node, rewired

    def create_all(
        self,
        relationships: list[GraphRelationship],
        direction: Direction,
        start_index: int,
    ) -> list[tuple[GraphNode, GraphRelationship]]:
        """Create one split node per relationship, indexing from ``start_index``."""
        return [
            self.create(relationship, direction, start_index + offset)
            for offset, relationship in enumerate(relationships)
        ]
