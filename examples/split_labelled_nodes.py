"""Split every node carrying a label along the given relationship types.

Looks up the elementIds of all nodes with the label, then splits them one
transaction at a time. A node that fails (for example a stale reference)
stops the run; nodes already split stay split.

Usage:
    uv run python examples/split_labelled_nodes.py Junction --relationship-type ROAD
    uv run python examples/split_labelled_nodes.py Junction -r ROAD -g RAIL --dry-run

Requires: NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD in .env or environment.
"""

from __future__ import annotations

import argparse
import os
import sys

from dotenv import load_dotenv
from neo4j import GraphDatabase

from node_splitter import Neo4jGraphStore, StoreError, split_nodes
from node_splitter.store import quote_identifier


def main() -> None:
    """Split all nodes with the given label."""
    parser = argparse.ArgumentParser(description="Split all nodes carrying a label")
    parser.add_argument("label", help="Label of the nodes to split")
    parser.add_argument("-r", "--relationship-type", action="append", default=[])
    parser.add_argument("-g", "--greedy-type", action="append", default=[])
    parser.add_argument("--index-property", help="Property to stamp with a running index")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Split and roll back, counting the nodes that would be created",
    )
    args = parser.parse_args()

    load_dotenv()
    neo4j_uri = os.getenv("NEO4J_URI", "bolt://localhost:7687")
    neo4j_username = os.getenv("NEO4J_USERNAME", "neo4j")
    neo4j_password = os.getenv("NEO4J_PASSWORD", "")
    neo4j_database = os.getenv("NEO4J_DATABASE", "neo4j")

    if not neo4j_password:
        print("ERROR: NEO4J_PASSWORD environment variable required")
        sys.exit(1)

    configuration = {
        "relationshipTypes": args.relationship_type,
        "greedyRelationshipTypes": args.greedy_type,
        "indexProperty": args.index_property,
    }

    with GraphDatabase.driver(neo4j_uri, auth=(neo4j_username, neo4j_password)) as driver:
        records, _, _ = driver.execute_query(
            f"MATCH (n:{quote_identifier(args.label)}) RETURN elementId(n) AS id ORDER BY id",
            database_=neo4j_database,
        )
        node_ids = [record["id"] for record in records]
        print(f"Found {len(node_ids)} :{args.label} nodes")

        store = Neo4jGraphStore(driver, neo4j_database)
        created = 0
        try:
            for _ in split_nodes(store, node_ids, configuration, dry_run=args.dry_run):
                created += 1
        except StoreError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

    verb = "Would create" if args.dry_run else "Created"
    print(f"{verb} {created} nodes")


if __name__ == "__main__":
    main()
