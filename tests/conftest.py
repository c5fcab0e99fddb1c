"""Pytest configuration and shared test fixtures.

This module provides in-memory graphs for the split scenarios, a store
that injects failures, and Neo4j driver stand-ins.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any
from unittest.mock import MagicMock

import pytest

from node_splitter.exceptions import StoreError
from node_splitter.models import GraphNode
from node_splitter.store.memory import MemoryGraphStore, MemoryTransaction

# =============================================================================
# GRAPH FIXTURES
# =============================================================================


@dataclass
class SplitScenario:
    """A graph plus handles on the nodes a test cares about."""

    store: MemoryGraphStore
    source: GraphNode
    nodes: dict[str, GraphNode]


@pytest.fixture
def store() -> MemoryGraphStore:
    """Provide an empty in-memory store."""
    return MemoryGraphStore()


@pytest.fixture
def fan_scenario(store: MemoryGraphStore) -> SplitScenario:
    """Source with two incoming and two outgoing Rel plus one OtherRel.

    Graph:
        n2 -Rel{101}-> n1, n3 -Rel{102}-> n1
        n1 -Rel{201}-> n2, n1 -Rel{202}-> n3
        n1 -OtherRel{301}-> b
    """
    n1 = store.add_node("A", TestId=1)
    n2 = store.add_node("A", TestId=2)
    n3 = store.add_node("A", TestId=3)
    m = store.add_node("B")
    b = store.add_node("B")
    store.add_relationship(n2, n1, "Rel", TestId=101)
    store.add_relationship(n3, n1, "Rel", TestId=102)
    store.add_relationship(n1, n2, "Rel", TestId=201)
    store.add_relationship(n1, n3, "Rel", TestId=202)
    store.add_relationship(n1, b, "OtherRel", TestId=301)
    return SplitScenario(store, n1, {"n1": n1, "n2": n2, "n3": n3, "m": m, "b": b})


@pytest.fixture
def two_type_scenario(store: MemoryGraphStore) -> SplitScenario:
    """Source n2 with Rel and OtherRel in both directions.

    Graph:
        n1 -Rel{102}-> n2, n2 -Rel{203}-> n3, n2 -Rel{204}-> n4, n4 -Rel{402}-> n2
        n2 -OtherRel{201}-> n1, n3 -OtherRel{302}-> n2
    """
    n1 = store.add_node("C", TestId=1)
    n2 = store.add_node("C", TestId=2)
    n3 = store.add_node("C", TestId=3)
    n4 = store.add_node("C", TestId=4)
    store.add_relationship(n1, n2, "Rel", TestId=102)
    store.add_relationship(n2, n3, "Rel", TestId=203)
    store.add_relationship(n2, n4, "Rel", TestId=204)
    store.add_relationship(n4, n2, "Rel", TestId=402)
    store.add_relationship(n2, n1, "OtherRel", TestId=201)
    store.add_relationship(n3, n2, "OtherRel", TestId=302)
    return SplitScenario(store, n2, {"n1": n1, "n2": n2, "n3": n3, "n4": n4})


@pytest.fixture
def carry_only_scenario(store: MemoryGraphStore) -> SplitScenario:
    """Source n2 whose greedy type has an incoming relationship only.

    Graph:
        n1 -Rel-> n2, n2 -Rel-> n1, n2 -Rel-> n3, n3 -OtherRel-> n2
    """
    n1 = store.add_node("E", TestId=1)
    n2 = store.add_node("E", TestId=2)
    n3 = store.add_node("E", TestId=3)
    store.add_relationship(n1, n2, "Rel", TestId=102)
    store.add_relationship(n2, n1, "Rel", TestId=203)
    store.add_relationship(n2, n3, "Rel", TestId=204)
    store.add_relationship(n3, n2, "OtherRel", TestId=201)
    return SplitScenario(store, n2, {"n1": n1, "n2": n2, "n3": n3})


def graph_state(store: MemoryGraphStore) -> tuple[list[GraphNode], list[Any]]:
    """Capture every node and relationship for before/after comparison."""
    return store.nodes(), store.relationships()


# =============================================================================
# FAILURE INJECTION
# =============================================================================


class FailingTransaction:
    """Transaction wrapper that fails after a number of relationship creations."""

    def __init__(self, tx: MemoryTransaction, fail_after: int) -> None:
        self._tx = tx
        self._fail_after = fail_after
        self.calls = 0

    def __getattr__(self, name: str) -> Any:
        return getattr(self._tx, name)

    def create_relationship(self, *args: Any, **kwargs: Any) -> Any:
        self.calls += 1
        if self.calls > self._fail_after:
            raise StoreError("create_relationship", "injected failure")
        return self._tx.create_relationship(*args, **kwargs)


class FailingStore(MemoryGraphStore):
    """MemoryGraphStore whose transactions fail once armed."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_after: int | None = None

    @contextmanager
    def transaction(self, *, dry_run: bool = False) -> Iterator[Any]:
        with super().transaction(dry_run=dry_run) as tx:
            if self.fail_after is None:
                yield tx
            else:
                yield FailingTransaction(tx, self.fail_after)


@pytest.fixture
def failing_store() -> FailingStore:
    """Provide a store that can be armed to fail mid-split."""
    return FailingStore()


# =============================================================================
# NEO4J MOCK FIXTURES
# =============================================================================


@pytest.fixture
def neo4j_tx() -> MagicMock:
    """Provide a mock Neo4j transaction whose run() returns no records."""
    tx = MagicMock()
    tx.run.return_value = []
    return tx


@pytest.fixture
def neo4j_driver(neo4j_tx: MagicMock) -> MagicMock:
    """Provide a mock synchronous Neo4j driver handing out ``neo4j_tx``."""
    session = MagicMock()
    session.__enter__.return_value = session
    session.__exit__.return_value = False
    session.begin_transaction.return_value = neo4j_tx

    driver = MagicMock()
    driver.session.return_value = session
    return driver
