"""Top-level node splitting.

Replaces a node by one new node per directional occurrence of a configured
relationship type:

1. Lock and classify the node's relationships
2. Process non-greedy types in configuration order, carrying their exit nodes
3. Process greedy types in configuration order, linking to the carried nodes
4. Copy ignored relationships onto every created node
5. Detach-delete the original node

Each source node is split inside its own store transaction, so a failure
leaves that node and its neighbourhood exactly as they were.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from node_splitter.config import SplitNodeConfiguration
from node_splitter.models import GraphNode, SplitGroup, SplitNodeResult
from node_splitter.splitting.classifier import RelationshipClassifier
from node_splitter.splitting.factory import SplitNodeFactory
from node_splitter.splitting.groups import GreedyCarryLinker, TypeGroupProcessor
from node_splitter.splitting.repair import RelationshipRepairer
from node_splitter.splitting.retire import NodeRetirer

if TYPE_CHECKING:
    from node_splitter.store.base import GraphStore, GraphTransaction

logger = structlog.get_logger(__name__)

NodeInput = GraphNode | str | None
ConfigurationInput = SplitNodeConfiguration | Mapping[str, Any] | None


class SplitOrchestrator:
    """Runs the split algorithm for one source node at a time.

    Example:
        >>> orchestrator = SplitOrchestrator(config)
        >>> with store.transaction() as tx:
        ...     created = orchestrator.split(tx, node_id)
    """

    def __init__(self, configuration: SplitNodeConfiguration) -> None:
        """Initialize the orchestrator.

        Args:
            configuration: Validated split configuration.
        """
        self.configuration = configuration
        self.classifier = RelationshipClassifier(configuration)

    def split(self, tx: GraphTransaction, node_id: str) -> list[GraphNode]:
        """Split one node inside an open transaction.

        Args:
            tx: Open store transaction.
            node_id: Identifier of the source node.

        Returns:
            Created entry nodes followed by created exit nodes; empty when
            the node was left untouched.

        Raises:
            StoreError: If the store rejects any step.
        """
        config = self.configuration
        classification = self.classifier.classify(tx, node_id)

        if not classification.has_relationships:
            logger.info("Node has no relationships, left unchanged", node_id=node_id)
            return []

        factory = SplitNodeFactory(tx, classification.source, config.index_property_name)
        processor = TypeGroupProcessor(tx, factory)
        linker = GreedyCarryLinker()

        index = config.start_index
        groups: list[SplitGroup] = []

        for relationship_type, (incoming, outgoing) in classification.non_greedy.items():
            group = processor.process(relationship_type, incoming, outgoing, index)
            linker.carry(group)
            index += group.created_count
            groups.append(group)

        for relationship_type, (incoming, outgoing) in classification.greedy.items():
            group = processor.process(
                relationship_type, incoming, outgoing, index, carry_targets=linker.targets
            )
            index += group.created_count
            groups.append(group)

        entry_nodes = [node for group in groups for node in group.entry_nodes]
        exit_nodes = [node for group in groups for node in group.exit_nodes]

        if not entry_nodes and not exit_nodes:
            logger.info("No split nodes created, node left unchanged", node_id=node_id)
            return []

        repaired = RelationshipRepairer(tx).repair(
            entry_nodes,
            exit_nodes,
            classification.ignored_incoming,
            classification.ignored_outgoing,
        )
        detached = NodeRetirer(tx).retire(node_id)

        logger.info(
            "Split node",
            node_id=node_id,
            entry_nodes=len(entry_nodes),
            exit_nodes=len(exit_nodes),
            repaired_relationships=repaired,
            detached_relationships=detached,
        )

        return [*entry_nodes, *exit_nodes]


def _as_configuration(configuration: ConfigurationInput) -> SplitNodeConfiguration:
    if isinstance(configuration, SplitNodeConfiguration):
        return configuration
    return SplitNodeConfiguration.build(configuration)


def _node_id(node: GraphNode | str) -> str:
    return node.id if isinstance(node, GraphNode) else node


def split_node(
    store: GraphStore,
    node: NodeInput,
    configuration: ConfigurationInput,
    *,
    dry_run: bool = False,
) -> list[GraphNode]:
    """Split a single node in its own transaction.

    Args:
        store: Graph store to run against.
        node: Node snapshot or identifier; None is a no-op.
        configuration: Raw configuration mapping or a built configuration.
        dry_run: Roll the transaction back instead of committing.

    Returns:
        Created entry nodes followed by created exit nodes.

    Raises:
        ConfigurationError: If the configuration is malformed.
        StoreError: If the store rejects any step; nothing is changed.
    """
    config = _as_configuration(configuration)
    if node is None:
        return []

    orchestrator = SplitOrchestrator(config)
    with store.transaction(dry_run=dry_run) as tx:
        return orchestrator.split(tx, _node_id(node))


def split_nodes(
    store: GraphStore,
    nodes: Iterable[NodeInput],
    configuration: ConfigurationInput,
    *,
    dry_run: bool = False,
) -> Iterator[SplitNodeResult]:
    """Split every node in ``nodes``, yielding one record per created node.

    The configuration is parsed immediately, so a malformed configuration
    fails before any node is touched. Nodes are then split lazily, one
    transaction per node, in input order. A store failure rolls back the
    current node and stops the iteration.

    Example:
        >>> for result in split_nodes(store, [node], {"relationshipTypes": ["Rel"]}):
        ...     print(result.node.id)

    Args:
        store: Graph store to run against.
        nodes: Node snapshots or identifiers; None entries are skipped.
        configuration: Raw configuration mapping or a built configuration.
        dry_run: Roll each transaction back instead of committing.

    Returns:
        Lazy iterator of SplitNodeResult records.

    Raises:
        ConfigurationError: If the configuration is malformed.
    """
    config = _as_configuration(configuration)
    return _iter_split(store, nodes, config, dry_run)


def _iter_split(
    store: GraphStore,
    nodes: Iterable[NodeInput],
    config: SplitNodeConfiguration,
    dry_run: bool,
) -> Iterator[SplitNodeResult]:
    orchestrator = SplitOrchestrator(config)
    for node in nodes:
        if node is None:
            continue
        with store.transaction(dry_run=dry_run) as tx:
            created = orchestrator.split(tx, _node_id(node))
        for created_node in created:
            yield SplitNodeResult(node=created_node)
