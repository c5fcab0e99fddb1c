"""Node splitting components.

This package provides:
- Relationship classification for a source node
- Split node creation and per-type group processing
- Repair of ignored relationships and retirement of the source node
- The orchestrator and the ``split_nodes`` entry point
"""

from node_splitter.splitting.classifier import (
    RelationshipClassification,
    RelationshipClassifier,
)
from node_splitter.splitting.factory import SplitNodeFactory
from node_splitter.splitting.groups import GreedyCarryLinker, TypeGroupProcessor
from node_splitter.splitting.orchestrator import (
    SplitOrchestrator,
    split_node,
    split_nodes,
)
from node_splitter.splitting.repair import RelationshipRepairer
from node_splitter.splitting.retire import NodeRetirer

__all__ = [
    # Classification
    "RelationshipClassification",
    "RelationshipClassifier",
    # Creation
    "SplitNodeFactory",
    "GreedyCarryLinker",
    "TypeGroupProcessor",
    # Cleanup
    "RelationshipRepairer",
    "NodeRetirer",
    # Entry points
    "SplitOrchestrator",
    "split_node",
    "split_nodes",
]
