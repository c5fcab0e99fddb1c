"""Relationship classification for a source node.

Locks the source node and its neighbourhood in identifier order, snapshots
the node's relationships, and partitions them per direction into:
- ignored: type in neither configured sequence, copied onto every split node
- non-greedy: type listed in ``relationship_types``
- greedy: type listed in ``greedy_relationship_types``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from node_splitter.exceptions import StoreError
from node_splitter.models import Direction, GraphNode, GraphRelationship

if TYPE_CHECKING:
    from node_splitter.config import SplitNodeConfiguration
    from node_splitter.store.base import GraphTransaction

logger = structlog.get_logger(__name__)


@dataclass
class RelationshipClassification:
    """Snapshot of a source node's relationships, partitioned for splitting.

    Attributes:
        source: The source node as read after locking.
        incoming: All incoming relationships, in store order.
        outgoing: All outgoing relationships, in store order.
        ignored_incoming: Incoming relationships of unconfigured types.
        ignored_outgoing: Outgoing relationships of unconfigured types.
        non_greedy_types: Configured non-greedy types.
        greedy_types: Configured greedy types.
    """

    source: GraphNode
    incoming: list[GraphRelationship] = field(default_factory=list)
    outgoing: list[GraphRelationship] = field(default_factory=list)
    ignored_incoming: list[GraphRelationship] = field(default_factory=list)
    ignored_outgoing: list[GraphRelationship] = field(default_factory=list)
    non_greedy_types: tuple[str, ...] = ()
    greedy_types: tuple[str, ...] = ()

    @property
    def has_relationships(self) -> bool:
        return bool(self.incoming or self.outgoing)

    def of_type(self, direction: Direction, relationship_type: str) -> list[GraphRelationship]:
        """Relationships of one type in one direction, in snapshot order."""
        relationships = self.incoming if direction is Direction.INCOMING else self.outgoing
        return [r for r in relationships if r.type == relationship_type]

    @property
    def non_greedy(self) -> dict[str, tuple[list[GraphRelationship], list[GraphRelationship]]]:
        """Non-greedy type -> (incoming, outgoing), in configuration order."""
        return {t: self._bucket(t) for t in self.non_greedy_types}

    @property
    def greedy(self) -> dict[str, tuple[list[GraphRelationship], list[GraphRelationship]]]:
        """Greedy type -> (incoming, outgoing), in configuration order."""
        return {t: self._bucket(t) for t in self.greedy_types}

    def _bucket(
        self, relationship_type: str
    ) -> tuple[list[GraphRelationship], list[GraphRelationship]]:
        return (
            self.of_type(Direction.INCOMING, relationship_type),
            self.of_type(Direction.OUTGOING, relationship_type),
        )


def _neighbour_ids(tx: GraphTransaction, node_id: str) -> set[str]:
    relationships = [
        *tx.relationships(node_id, Direction.INCOMING),
        *tx.relationships(node_id, Direction.OUTGOING),
    ]
    return {r.other_node_id(node_id) for r in relationships}


class RelationshipClassifier:
    """Classifies a node's relationships according to a split configuration.

    Example:
        >>> classifier = RelationshipClassifier(config)
        >>> classification = classifier.classify(tx, node_id)
        >>> incoming, outgoing = classification.non_greedy["Rel"]
    """

    def __init__(self, configuration: SplitNodeConfiguration) -> None:
        self.configuration = configuration

    def classify(self, tx: GraphTransaction, node_id: str) -> RelationshipClassification:
        """Lock, snapshot and classify the relationships of one node.

        A first unlocked read finds the neighbourhood. The source node and
        its neighbours are then locked together in ascending identifier
        order, so concurrent splits over overlapping neighbourhoods take
        locks in the same order. The relationships used for classification
        are read again under those locks.

        Args:
            tx: Open store transaction.
            node_id: Identifier of the source node.

        Returns:
            The classification snapshot.

        Raises:
            StoreError: If the node no longer exists, a lock is refused, or
                a relationship to an unlocked node appeared while locking
                (transient, the split can be retried).
        """
        locked = {node_id} | _neighbour_ids(tx, node_id)
        for lock_id in sorted(locked):
            tx.lock_node(lock_id)

        source = tx.get_node(node_id)
        if source is None:
            raise StoreError("get_node", f"node {node_id} does not exist")

        incoming = tx.relationships(node_id, Direction.INCOMING)
        outgoing = tx.relationships(node_id, Direction.OUTGOING)

        neighbours = {r.other_node_id(node_id) for r in [*incoming, *outgoing]}
        unlocked = neighbours - locked
        if unlocked:
            msg = f"node {node_id} gained neighbours while locking: {sorted(unlocked)}"
            raise StoreError("lock_node", msg, transient=True)
        neighbours.discard(node_id)

        config = self.configuration
        classification = RelationshipClassification(
            source=source,
            incoming=incoming,
            outgoing=outgoing,
            ignored_incoming=[r for r in incoming if not config.is_classified(r.type)],
            ignored_outgoing=[r for r in outgoing if not config.is_classified(r.type)],
            non_greedy_types=config.relationship_types,
            greedy_types=config.greedy_relationship_types,
        )

        logger.debug(
            "Classified relationships",
            node_id=node_id,
            incoming=len(incoming),
            outgoing=len(outgoing),
            ignored_incoming=len(classification.ignored_incoming),
            ignored_outgoing=len(classification.ignored_outgoing),
            locked_neighbours=len(neighbours),
        )

        return classification
