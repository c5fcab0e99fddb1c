"""Command-line interface for the node splitter.

`node-splitter split` splits Neo4j nodes, addressed by elementId:
- Builds the split configuration from a JSON file and/or flags
- Splits each node in its own transaction, retrying transient store errors
- Prints the nodes created (or, with --dry-run, the nodes that would be)
"""

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import structlog

from .config import (
    GREEDY_RELATIONSHIP_TYPES,
    INDEX_PROPERTY_NAME,
    RELATIONSHIP_TYPES,
    START_INDEX,
    SplitNodeConfiguration,
)
from .exceptions import ConfigurationError, StoreError
from .models import GraphNode
from .splitting import split_node
from .store import GraphStore, Neo4jGraphStore
from .utils.retry import transient_retry

console = Console()


def _create_split_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the split subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    split_parser = subparsers.add_parser(
        "split",
        help="Split nodes along configured relationship types",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Replace each node with one node per directional occurrence of a configured
relationship type. Relationships of other types are copied onto every new node.

Examples:
  # Split along Rel, stamping SplitId from 0
  node-splitter split 4:abc:12 --relationship-type Rel --index-property SplitId

  # Greedy types also link to the exit nodes of non-greedy types
  node-splitter split 4:abc:12 -r Rel -g OtherRel

  # Configuration from a file, preview only
  node-splitter split 4:abc:12 --config split.json --dry-run
        """,
    )

    split_parser.add_argument(
        "node_ids",
        nargs="+",
        metavar="NODE_ID",
        help="elementId of a node to split",
    )

    split_parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="JSON file with startIndex, indexProperty, relationshipTypes, greedyRelationshipTypes",
    )

    split_parser.add_argument(
        "-r",
        "--relationship-type",
        action="append",
        dest="relationship_types",
        help="Non-greedy relationship type (repeatable, order matters)",
    )

    split_parser.add_argument(
        "-g",
        "--greedy-type",
        action="append",
        dest="greedy_relationship_types",
        help="Greedy relationship type (repeatable, order matters)",
    )

    split_parser.add_argument(
        "--index-property",
        help="Property to stamp with a running index on each new node",
    )

    split_parser.add_argument(
        "--start-index",
        help="First index value (default: 0)",
    )

    split_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run each split and roll it back, showing what would be created",
    )

    split_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def _load_configuration(args: argparse.Namespace) -> dict[str, Any]:
    """Merge the JSON configuration file with command-line flags.

    Flags override values from the file.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Raw configuration mapping.

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object.
    """
    configuration: dict[str, Any] = {}

    if args.config:
        try:
            loaded = json.loads(args.config.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Unable to read configuration file {args.config}: {e}"
            raise ConfigurationError(msg) from e
        if not isinstance(loaded, dict):
            msg = f"Configuration file {args.config} must contain a JSON object"
            raise ConfigurationError(msg)
        configuration.update(loaded)

    overrides = {
        START_INDEX: args.start_index,
        INDEX_PROPERTY_NAME: args.index_property,
        RELATIONSHIP_TYPES: args.relationship_types,
        GREEDY_RELATIONSHIP_TYPES: args.greedy_relationship_types,
    }
    configuration.update({k: v for k, v in overrides.items() if v is not None})

    return configuration


@transient_retry
def _split_with_retry(
    store: GraphStore,
    node_id: str,
    configuration: SplitNodeConfiguration,
    dry_run: bool,
) -> list[GraphNode]:
    return split_node(store, node_id, configuration, dry_run=dry_run)


def _render_results(
    results: dict[str, list[GraphNode]],
    configuration: SplitNodeConfiguration,
    dry_run: bool,
) -> Table:
    """Build a table of created nodes per source node."""
    title = "Nodes that would be created" if dry_run else "Nodes created"
    table = Table(title=title)
    table.add_column("Source node")
    table.add_column("New node")
    table.add_column("Labels")
    if configuration.index_property_name:
        table.add_column(configuration.index_property_name, justify="right")

    for source_id, created in results.items():
        if not created:
            row = [source_id, "[dim]unchanged[/]", ""]
            if configuration.index_property_name:
                row.append("")
            table.add_row(*row)
            continue
        for node in created:
            row = [source_id, node.id, ":".join(sorted(node.labels))]
            if configuration.index_property_name:
                row.append(str(node.properties.get(configuration.index_property_name, "")))
            table.add_row(*row)

    return table


def _run_split_command(args: argparse.Namespace) -> None:
    """Run the split subcommand.

    Args:
        args: Parsed command-line arguments.
    """
    from neo4j import GraphDatabase

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if args.verbose else logging.INFO
        ),
    )

    configuration = SplitNodeConfiguration.build(_load_configuration(args))

    # Get Neo4j connection from environment
    neo4j_uri = os.getenv("NEO4J_URI", "bolt://localhost:7687")
    neo4j_username = os.getenv("NEO4J_USERNAME", "neo4j")
    neo4j_password = os.getenv("NEO4J_PASSWORD", "")
    neo4j_database = os.getenv("NEO4J_DATABASE", "neo4j")

    if not neo4j_password:
        console.print("[red]Error: NEO4J_PASSWORD environment variable required[/]")
        raise SystemExit(1)

    console.print("[bold cyan]Node Splitter[/]")
    console.print(f"Database: {neo4j_uri}")
    if args.dry_run:
        console.print("[yellow]Dry run mode - no changes will be made[/]")
    console.print()

    driver = GraphDatabase.driver(neo4j_uri, auth=(neo4j_username, neo4j_password))

    try:
        store = Neo4jGraphStore(driver, neo4j_database)
        store.verify_connectivity()

        results: dict[str, list[GraphNode]] = {}
        for node_id in args.node_ids:
            results[node_id] = _split_with_retry(store, node_id, configuration, args.dry_run)

        console.print(_render_results(results, configuration, args.dry_run))
        created = sum(len(nodes) for nodes in results.values())
        console.print()
        console.print(f"[green]{created} nodes created from {len(results)} source nodes[/]")
    finally:
        driver.close()


def create_parser() -> argparse.ArgumentParser:
    """Create the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="node-splitter",
        description="Split graph nodes along relationship types",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Required environment variables:
  NEO4J_URI          - Database URI (e.g., bolt://localhost:7687)
  NEO4J_USERNAME     - Database username (default: neo4j)
  NEO4J_PASSWORD     - Database password
  NEO4J_DATABASE     - Database name (default: neo4j)
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    _create_split_parser(subparsers)

    return parser


def main() -> None:
    """Run the node splitter CLI."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        raise SystemExit(1)

    try:
        _run_split_command(args)
    except ConfigurationError as e:
        console.print(f"\n[red]Configuration error: {e}[/]")
        raise SystemExit(1) from None
    except StoreError as e:
        console.print(f"\n[red]Store error: {e}[/]")
        console.print("No changes were made to the node being split.")
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        console.print("\n[yellow]Split interrupted by user[/]")
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
