"""Test suite for node-splitter.

This package contains tests for all modules:
- test_config: Split configuration parsing
- test_memory_store: In-memory store transactions and operations
- test_neo4j_store: Cypher issued by the Neo4j adapter (mocked driver)
- test_components: Classifier, factory, group processing, repair and retirement
- test_splitter: End-to-end splits, invariants and the lazy batch interface
- test_retry: Transient store error retries
- test_cli: Command-line parsing, configuration merging and exit codes
"""
