"""Node splitter for property graphs.

Replaces a node with one new node per directional occurrence of a
configured relationship type, re-routing or copying every relationship the
original held, then removes the original.

Usage:
    from node_splitter import MemoryGraphStore, split_node, split_nodes

    store = MemoryGraphStore()
    ...
    for result in split_nodes(store, [node], {"relationshipTypes": ["Rel"]}):
        print(result.node.id)

    # Against Neo4j
    from neo4j import GraphDatabase
    from node_splitter import Neo4jGraphStore

    driver = GraphDatabase.driver(uri, auth=(username, password))
    store = Neo4jGraphStore(driver)
    created = split_node(store, element_id, {"relationshipTypes": ["Rel"]})
"""

# =============================================================================
# CONFIGURATION AND MODELS
# =============================================================================
from .config import SplitNodeConfiguration

# =============================================================================
# EXCEPTIONS
# =============================================================================
from .exceptions import ConfigurationError, SplitterError, StoreError
from .models import (
    Direction,
    GraphNode,
    GraphRelationship,
    SplitGroup,
    SplitNodeResult,
)

# =============================================================================
# SPLITTING
# =============================================================================
from .splitting import (
    GreedyCarryLinker,
    NodeRetirer,
    RelationshipClassification,
    RelationshipClassifier,
    RelationshipRepairer,
    SplitNodeFactory,
    SplitOrchestrator,
    TypeGroupProcessor,
    split_node,
    split_nodes,
)

# =============================================================================
# STORES
# =============================================================================
from .store import (
    GraphStore,
    GraphTransaction,
    MemoryGraphStore,
    Neo4jGraphStore,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration and models
    "SplitNodeConfiguration",
    "Direction",
    "GraphNode",
    "GraphRelationship",
    "SplitGroup",
    "SplitNodeResult",
    # Exceptions
    "SplitterError",
    "ConfigurationError",
    "StoreError",
    # Splitting
    "RelationshipClassification",
    "RelationshipClassifier",
    "SplitNodeFactory",
    "TypeGroupProcessor",
    "GreedyCarryLinker",
    "RelationshipRepairer",
    "NodeRetirer",
    "SplitOrchestrator",
    "split_node",
    "split_nodes",
    # Stores
    "GraphStore",
    "GraphTransaction",
    "MemoryGraphStore",
    "Neo4jGraphStore",
]
