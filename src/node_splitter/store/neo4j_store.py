"""Neo4j-backed graph store.

Runs every split in one explicit transaction on a synchronous
``neo4j.Driver``. Elements are addressed by ``elementId``; labels and
relationship types cannot be query parameters, so they are inlined as
backtick-quoted identifiers.

Driver failures are wrapped in StoreError. TransientError (deadlocks, lock
timeouts) marks the StoreError as transient so a host can retry the split.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from neo4j.exceptions import DriverError, Neo4jError, TransientError
import structlog

from node_splitter.exceptions import StoreError
from node_splitter.models import Direction, GraphNode, GraphRelationship

if TYPE_CHECKING:
    from neo4j import Driver, Transaction

logger = structlog.get_logger(__name__)

# Property touched to take a write lock; it never survives the statement.
LOCK_PROPERTY = "_node_splitter_lock"

NODE_RETURN = "elementId(n) AS id, labels(n) AS labels, properties(n) AS properties"
RELATIONSHIP_RETURN = (
    "elementId(r) AS id, type(r) AS type, "
    "elementId(startNode(r)) AS start_id, elementId(endNode(r)) AS end_id, "
    "properties(r) AS properties"
)


def quote_identifier(name: str) -> str:
    """Quote a label or relationship type for inlining into Cypher.

    Example:
        >>> quote_identifier("HAS`PART")
        '`HAS``PART`'
    """
    return "`" + name.replace("`", "``") + "`"


def _node_from_record(record: Any) -> GraphNode:
    return GraphNode(
        id=record["id"],
        labels=frozenset(record["labels"]),
        properties=dict(record["properties"]),
    )


def _relationship_from_record(record: Any) -> GraphRelationship:
    return GraphRelationship(
        id=record["id"],
        type=record["type"],
        start_id=record["start_id"],
        end_id=record["end_id"],
        properties=dict(record["properties"]),
    )


class Neo4jTransaction:
    """GraphTransaction over an explicit Neo4j transaction."""

    def __init__(self, tx: Transaction) -> None:
        """Initialize the transaction wrapper.

        Args:
            tx: Open Neo4j transaction.
        """
        self._tx = tx

    def _run(self, operation: str, query: str, **params: Any) -> list[Any]:
        try:
            return list(self._tx.run(query, **params))
        except (Neo4jError, DriverError) as e:
            raise StoreError(
                operation,
                str(e),
                transient=isinstance(e, TransientError),
            ) from e

    def _single(self, operation: str, query: str, missing: str, **params: Any) -> Any:
        records = self._run(operation, query, **params)
        if not records:
            raise StoreError(operation, missing)
        return records[0]

    def lock_node(self, node_id: str) -> None:
        query = f"""
        MATCH (n) WHERE elementId(n) = $node_id
        SET n.{LOCK_PROPERTY} = true
        REMOVE n.{LOCK_PROPERTY}
        RETURN elementId(n) AS id
        """
        self._single("lock_node", query, f"node {node_id} does not exist", node_id=node_id)

    def get_node(self, node_id: str) -> GraphNode | None:
        query = f"""
        MATCH (n) WHERE elementId(n) = $node_id
        RETURN {NODE_RETURN}
        """
        records = self._run("get_node", query, node_id=node_id)
        return _node_from_record(records[0]) if records else None

    def relationships(self, node_id: str, direction: Direction) -> list[GraphRelationship]:
        pattern = "()-[r]->(n)" if direction is Direction.INCOMING else "(n)-[r]->()"
        query = f"""
        MATCH (n) WHERE elementId(n) = $node_id
        MATCH {pattern}
        RETURN {RELATIONSHIP_RETURN}
        ORDER BY elementId(r)
        """
        records = self._run("relationships", query, node_id=node_id)
        return [_relationship_from_record(record) for record in records]

    def create_node(
        self,
        labels: Iterable[str],
        properties: Mapping[str, Any],
    ) -> GraphNode:
        label_clause = "".join(f":{quote_identifier(label)}" for label in sorted(labels))
        query = f"""
        CREATE (n{label_clause})
        SET n = $properties
        RETURN {NODE_RETURN}
        """
        record = self._single(
            "create_node", query, "no node returned", properties=dict(properties)
        )
        return _node_from_record(record)

    def create_relationship(
        self,
        start_id: str,
        end_id: str,
        relationship_type: str,
        properties: Mapping[str, Any],
    ) -> GraphRelationship:
        query = f"""
        MATCH (a) WHERE elementId(a) = $start_id
        MATCH (b) WHERE elementId(b) = $end_id
        CREATE (a)-[r:{quote_identifier(relationship_type)}]->(b)
        SET r = $properties
        RETURN {RELATIONSHIP_RETURN}
        """
        record = self._single(
            "create_relationship",
            query,
            f"endpoint {start_id} or {end_id} does not exist",
            start_id=start_id,
            end_id=end_id,
            properties=dict(properties),
        )
        return _relationship_from_record(record)

    def delete_relationship(self, relationship_id: str) -> None:
        query = """
        MATCH ()-[r]->() WHERE elementId(r) = $relationship_id
        DELETE r
        RETURN count(*) AS deleted
        """
        record = self._single(
            "delete_relationship", query, "no result", relationship_id=relationship_id
        )
        if record["deleted"] == 0:
            msg = f"relationship {relationship_id} does not exist"
            raise StoreError("delete_relationship", msg)

    def delete_node(self, node_id: str) -> None:
        query = """
        MATCH (n) WHERE elementId(n) = $node_id
        DELETE n
        RETURN count(*) AS deleted
        """
        record = self._single("delete_node", query, "no result", node_id=node_id)
        if record["deleted"] == 0:
            raise StoreError("delete_node", f"node {node_id} does not exist")


class Neo4jGraphStore:
    """GraphStore backed by a Neo4j database.

    Example:
        >>> driver = GraphDatabase.driver(uri, auth=(username, password))
        >>> store = Neo4jGraphStore(driver, database="neo4j")
        >>> results = list(split_nodes(store, [element_id], {"relationshipTypes": ["Rel"]}))
        >>> driver.close()
    """

    def __init__(self, driver: Driver, database: str = "neo4j") -> None:
        """Initialize the store.

        Args:
            driver: Synchronous Neo4j driver instance.
            database: Database name.
        """
        self.driver = driver
        self.database = database

    def verify_connectivity(self) -> None:
        """Check the database is reachable.

        Raises:
            StoreError: If the driver cannot connect.
        """
        try:
            self.driver.verify_connectivity()
        except (Neo4jError, DriverError) as e:
            raise StoreError("verify_connectivity", str(e)) from e

    @contextmanager
    def transaction(self, *, dry_run: bool = False) -> Iterator[Neo4jTransaction]:
        """Open a transaction; see GraphStore.transaction."""
        try:
            with self.driver.session(database=self.database) as session:
                tx = session.begin_transaction()
                try:
                    yield Neo4jTransaction(tx)
                except BaseException:
                    # The error from the block surfaces, not a failed rollback.
                    try:
                        tx.rollback()
                    except (Neo4jError, DriverError) as rollback_error:
                        logger.warning(
                            "Rollback failed",
                            database=self.database,
                            error=str(rollback_error),
                        )
                    else:
                        logger.debug("Rolled back transaction", database=self.database)
                    raise
                if dry_run:
                    tx.rollback()
                    logger.debug("Rolled back dry-run transaction", database=self.database)
                else:
                    tx.commit()
                    logger.debug("Committed transaction", database=self.database)
        except (Neo4jError, DriverError) as e:
            raise StoreError(
                "transaction",
                str(e),
                transient=isinstance(e, TransientError),
            ) from e
