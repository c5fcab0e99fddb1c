"""Per-type group processing.

For one relationship type, a group turns every incoming relationship into
an entry node and every outgoing relationship into an exit node, then
wires each entry node to each exit node. Greedy groups also wire their
entry nodes to the exit nodes carried over from non-greedy groups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from node_splitter.models import Direction, GraphNode, GraphRelationship, SplitGroup

if TYPE_CHECKING:
    from collections.abc import Sequence

    from node_splitter.splitting.factory import SplitNodeFactory
    from node_splitter.store.base import GraphTransaction

logger = structlog.get_logger(__name__)


class GreedyCarryLinker:
    """Accumulates non-greedy exit nodes for greedy groups to link to."""

    def __init__(self) -> None:
        self._targets: list[GraphNode] = []

    def carry(self, group: SplitGroup) -> None:
        """Add a non-greedy group's exit nodes to the carry-over set."""
        self._targets.extend(group.exit_nodes)

    @property
    def targets(self) -> tuple[GraphNode, ...]:
        """Carry-over nodes, in the order their groups were processed."""
        return tuple(self._targets)


class TypeGroupProcessor:
    """Creates and wires the entry and exit nodes of one relationship type.

    Example:
        >>> processor = TypeGroupProcessor(tx, factory)
        >>> group = processor.process("Rel", incoming, outgoing, index=0)
        >>> index += group.created_count
    """

    def __init__(self, tx: GraphTransaction, factory: SplitNodeFactory) -> None:
        """Initialize the processor.

        Args:
            tx: Open store transaction.
            factory: Factory bound to the source node being split.
        """
        self.tx = tx
        self.factory = factory

    def process(
        self,
        relationship_type: str,
        incoming: Sequence[GraphRelationship],
        outgoing: Sequence[GraphRelationship],
        index: int,
        carry_targets: Sequence[GraphNode] = (),
    ) -> SplitGroup:
        """Split the source node along one relationship type.

        The group is skipped when there is nothing to enter from, or nothing
        to exit to (neither outgoing relationships nor carry-over nodes), so
        no orphan entry node is ever created.

        Args:
            relationship_type: Type being processed.
            incoming: Incoming relationships of this type, snapshotted.
            outgoing: Outgoing relationships of this type, snapshotted.
            index: Index value for the first node created.
            carry_targets: Extra link targets for entry nodes (greedy types).

        Returns:
            The group's created nodes; empty when skipped.
        """
        group = SplitGroup(relationship_type=relationship_type)

        if not incoming or (not outgoing and not carry_targets):
            logger.debug(
                "Skipped relationship group",
                relationship_type=relationship_type,
                incoming=len(incoming),
                outgoing=len(outgoing),
                carry_targets=len(carry_targets),
            )
            return group

        entries = self.factory.create_all(list(incoming), Direction.INCOMING, index)
        exits = self.factory.create_all(list(outgoing), Direction.OUTGOING, index + len(entries))

        group.entry_nodes = [node for node, _ in entries]
        group.exit_nodes = [node for node, _ in exits]

        links = 0
        for entry_node, template in entries:
            for target in [*group.exit_nodes, *carry_targets]:
                self.tx.create_relationship(
                    entry_node.id, target.id, template.type, template.properties
                )
                links += 1

        logger.debug(
            "Processed relationship group",
            relationship_type=relationship_type,
            entry_nodes=len(group.entry_nodes),
            exit_nodes=len(group.exit_nodes),
            carry_targets=len(carry_targets),
            links=links,
        )

        return group
