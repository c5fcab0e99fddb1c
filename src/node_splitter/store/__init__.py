"""Graph store adapters.

This package provides:
- The GraphStore / GraphTransaction protocols the splitter runs against
- An in-memory arena store
- A Neo4j store over the official driver
"""

from node_splitter.store.base import GraphStore, GraphTransaction
from node_splitter.store.memory import MemoryGraphStore, MemoryTransaction
from node_splitter.store.neo4j_store import (
    Neo4jGraphStore,
    Neo4jTransaction,
    quote_identifier,
)

__all__ = [
    # Protocols
    "GraphStore",
    "GraphTransaction",
    # In-memory
    "MemoryGraphStore",
    "MemoryTransaction",
    # Neo4j
    "Neo4jGraphStore",
    "Neo4jTransaction",
    "quote_identifier",
]
