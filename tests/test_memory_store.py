"""Tests for the in-memory graph store."""

from __future__ import annotations

import pytest

from node_splitter.exceptions import StoreError
from node_splitter.models import Direction
from node_splitter.store.memory import MemoryGraphStore


class TestMemoryTransactions:
    """Tests for commit, rollback and dry-run behavior."""

    def test_commit_on_normal_exit(self, store: MemoryGraphStore) -> None:
        with store.transaction() as tx:
            node = tx.create_node(["A"], {"name": "a"})

        assert store.get_node(node.id) == node
        assert store.node_count == 1

    def test_rollback_on_exception(self, store: MemoryGraphStore) -> None:
        """Test that an escaping exception discards every change."""
        existing = store.add_node("A")

        with pytest.raises(RuntimeError), store.transaction() as tx:
            created = tx.create_node(["B"], {})
            tx.create_relationship(existing.id, created.id, "LINKS", {})
            raise RuntimeError("boom")

        assert store.nodes() == [existing]
        assert store.relationship_count == 0

    def test_dry_run_rolls_back(self, store: MemoryGraphStore) -> None:
        with store.transaction(dry_run=True) as tx:
            tx.create_node(["A"], {})

        assert store.node_count == 0

    def test_closed_transaction_rejects_operations(self, store: MemoryGraphStore) -> None:
        with store.transaction() as tx:
            pass

        with pytest.raises(StoreError, match="closed"):
            tx.create_node(["A"], {})

    def test_lock_history_records_order(self, store: MemoryGraphStore) -> None:
        a = store.add_node("A")
        b = store.add_node("B")

        with store.transaction() as tx:
            tx.lock_node(b.id)
            tx.lock_node(a.id)
            tx.lock_node(b.id)

        assert store.lock_history[-1] == [b.id, a.id]


class TestMemoryOperations:
    """Tests for individual store operations."""

    def test_relationships_by_direction(self, store: MemoryGraphStore) -> None:
        a = store.add_node("A")
        b = store.add_node("B")
        ab = store.add_relationship(a, b, "LINKS", weight=1)
        ba = store.add_relationship(b, a, "BACK")

        with store.transaction() as tx:
            assert tx.relationships(a.id, Direction.OUTGOING) == [ab]
            assert tx.relationships(a.id, Direction.INCOMING) == [ba]

        assert ab.properties == {"weight": 1}
        assert store.relationships_of(a) == [ab, ba]

    def test_created_properties_are_copied(self, store: MemoryGraphStore) -> None:
        """Test that mutating the input mapping does not leak into the store."""
        properties = {"name": "a"}
        with store.transaction() as tx:
            node = tx.create_node(["A"], properties)
        properties["name"] = "changed"

        assert store.get_node(node.id).properties == {"name": "a"}

    def test_missing_endpoint_rejected(self, store: MemoryGraphStore) -> None:
        a = store.add_node("A")
        with pytest.raises(StoreError, match="does not exist"):
            store.add_relationship(a, "n999", "LINKS")

    def test_lock_missing_node_rejected(self, store: MemoryGraphStore) -> None:
        with pytest.raises(StoreError) as exc_info, store.transaction() as tx:
            tx.lock_node("n999")
        assert exc_info.value.operation == "lock_node"

    def test_delete_attached_node_rejected(self, store: MemoryGraphStore) -> None:
        """Test that a node with relationships cannot be deleted."""
        a = store.add_node("A")
        b = store.add_node("B")
        store.add_relationship(a, b, "LINKS")

        with pytest.raises(StoreError, match="still has 1 relationships"), store.transaction() as tx:
            tx.delete_node(a.id)

        assert store.node_count == 2

    def test_delete_relationship_then_node(self, store: MemoryGraphStore) -> None:
        a = store.add_node("A")
        b = store.add_node("B")
        rel = store.add_relationship(a, b, "LINKS")

        with store.transaction() as tx:
            tx.delete_relationship(rel.id)
            tx.delete_node(a.id)

        assert store.nodes() == [b]
        assert store.relationship_count == 0

    def test_find_nodes(self, store: MemoryGraphStore) -> None:
        store.add_node("A", TestId=1)
        match = store.add_node("A", TestId=2)
        store.add_node("B", TestId=2)

        assert store.find_nodes("A", TestId=2) == [match]
