#!/usr/bin/env python3
"""
contentsearch CLI - Command-line interface for indexing content exports.

A content export is a JSON file with node type definitions and nodes:

    {
        "nodeTypes": {"Acme:Page": {...}},
        "nodes": [{"identifier": "...", "path": "/sites/acme", "nodeType": "Acme:Page", "properties": {...}}]
    }

Usage:
    python -m contentsearch.cli index <content.json> [options]
    python -m contentsearch.cli nodetypes <content.json> [name]
    python -m contentsearch.cli prefixes <path>
    python -m contentsearch.cli html <file|->

Examples:
    # Print index documents of all nodes
    python -m contentsearch.cli index examples/content.json

    # Use custom settings and write the result to a file
    python -m contentsearch.cli index examples/content.json --settings settings.json -o out.json

    # Show the flattened supertype hierarchy of a node type
    python -m contentsearch.cli nodetypes examples/content.json Acme:Page
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Setup logging before imports
logging.basicConfig(
    level=os.getenv("CONTENTSEARCH_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def _load_content(path: str):
    """Read a content export and return (registry, nodes)."""
    from .repository import NodeTypeRegistry
    from .utils import read_json

    content_path = Path(path)
    content = read_json(content_path)

    registry = NodeTypeRegistry()
    registry.load_node_types(content.get("nodeTypes") or {})
    nodes = registry.load_nodes(content.get("nodes") or [], base_dir=content_path.parent)
    return registry, nodes


def cmd_index(args: argparse.Namespace) -> int:
    """Index all nodes of a content export."""
    from .indexer import InMemoryNodeIndexer, log_unindexed_property
    from .settings import load_settings
    from .utils import ContentSearchError, write_json

    try:
        settings = load_settings(args.settings)
        registry, nodes = _load_content(args.content)
        indexer = InMemoryNodeIndexer(
            settings=settings,
            unindexed_property_handler=log_unindexed_property if args.strict else None,
        )

        logger.info(f"Indexing {len(nodes)} nodes from: {args.content}")
        for node in nodes:
            indexer.index_node(node, args.workspace)
        indexer.flush()
    except (ContentSearchError, OSError, json.JSONDecodeError) as e:
        print(f"\n❌ Indexing failed!")
        print(f"   Error: {e}")
        return 1

    result = {
        document.identifier: {
            "properties": document.properties,
            "fulltext": document.fulltext,
        }
        for document in indexer.documents.values()
    }

    if args.output:
        output_path = write_json(result, args.output)
        print(f"\n✅ Indexed {len(result)} nodes")
        print(f"   Path: {output_path}")
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    return 0


def cmd_nodetypes(args: argparse.Namespace) -> int:
    """List node types with their flattened supertype hierarchy."""
    from .eel.indexing_helper import extract_node_type_names_and_supertypes
    from .utils import ContentSearchError

    try:
        registry, _ = _load_content(args.content)
        if args.name:
            node_types = [registry.get(args.name)]
        else:
            node_types = registry.list_node_types()

        print("\n📋 Node Types:")
        print("-" * 50)
        for node_type in node_types:
            hierarchy = extract_node_type_names_and_supertypes(node_type)
            fulltext = " (fulltext)" if node_type.get_configuration("search.fulltext.enable") is True else ""
            print(f"  {node_type.name}{fulltext}")
            print(f"      {' > '.join(hierarchy)}")
    except (ContentSearchError, OSError, json.JSONDecodeError) as e:
        print(f"❌ Error reading node types: {e}")
        return 1

    return 0


def cmd_prefixes(args: argparse.Namespace) -> int:
    """Print all prefixes of a path."""
    from .eel.indexing_helper import build_all_path_prefixes

    for prefix in build_all_path_prefixes(args.path):
        print(prefix)
    return 0


def cmd_html(args: argparse.Namespace) -> int:
    """Split an HTML document into fulltext buckets."""
    from .eel.indexing_helper import extract_html_tags

    if args.file == "-":
        html = sys.stdin.read()
    else:
        html_path = Path(args.file)
        if not html_path.exists():
            print(f"❌ File not found: {html_path}")
            return 1
        html = html_path.read_text(encoding="utf-8")

    print(json.dumps(extract_html_tags(html), indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="contentsearch",
        description="Extract search index documents from content exports",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Index command
    index_parser = subparsers.add_parser(
        "index",
        help="Index all nodes of a content export",
    )
    index_parser.add_argument(
        "content",
        help="Path to the content export (JSON)",
    )
    index_parser.add_argument(
        "-s", "--settings",
        default=None,
        help="Settings file (JSON, default: $CONTENTSEARCH_SETTINGS or built-in defaults)",
    )
    index_parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the documents to this file instead of stdout",
    )
    index_parser.add_argument(
        "-w", "--workspace",
        default=None,
        help="Target workspace (default: live)",
    )
    index_parser.add_argument(
        "--strict",
        action="store_true",
        help="Warn about every property without indexing configuration",
    )
    index_parser.set_defaults(func=cmd_index)

    # Node types command
    nodetypes_parser = subparsers.add_parser(
        "nodetypes",
        help="Show node types and their supertypes",
    )
    nodetypes_parser.add_argument(
        "content",
        help="Path to the content export (JSON)",
    )
    nodetypes_parser.add_argument(
        "name",
        nargs="?",
        default=None,
        help="Only show this node type",
    )
    nodetypes_parser.set_defaults(func=cmd_nodetypes)

    # Prefixes command
    prefixes_parser = subparsers.add_parser(
        "prefixes",
        help="Print all prefixes of a node path",
    )
    prefixes_parser.add_argument(
        "path",
        help="Node path, e.g. /sites/acme/news",
    )
    prefixes_parser.set_defaults(func=cmd_prefixes)

    # HTML command
    html_parser = subparsers.add_parser(
        "html",
        help="Split HTML into heading and text fulltext buckets",
    )
    html_parser.add_argument(
        "file",
        help="HTML file, or - for stdin",
    )
    html_parser.set_defaults(func=cmd_html)

    # Parse args
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Run command
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
