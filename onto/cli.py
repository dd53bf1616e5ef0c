"""Command-line interface for managing persona and project ontologies."""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any

from onto.graph import Graph
from onto.index import reindex_if_ontology_path, write_index
from onto.mcp import SERVER_VERSION, run_server
from onto.node import Node, NodeMeta
from onto.recall import recall
from onto.search import SearchBy, search
from onto.store import Store, StoreError

PERSONA_ENV = "ONTO_PERSONA_DIR"
PROJECT_ENV = "ONTO_PROJECT_DIR"


class _CliError(Exception):
    """A problem with the command line itself, reported before any work."""


def parse_csv(text: str) -> list[str]:
    """Split a comma-separated list, trimming items and dropping empty ones."""
    return [item for item in (part.strip() for part in text.split(",")) if item]


def _default_persona_dir() -> Path:
    return Path(os.environ.get("HOME", "/tmp")) / ".claude/personas"


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _node_to_json(node: Node) -> dict[str, Any]:
    meta: dict[str, Any] = {
        "name": node.meta.name,
        "category": node.meta.category,
        "tags": list(node.meta.tags),
        "refs": list(node.meta.refs),
    }
    if node.meta.created is not None:
        meta["created"] = node.meta.created.isoformat()
    if node.meta.updated is not None:
        meta["updated"] = node.meta.updated.isoformat()
    data: dict[str, Any] = {"meta": meta, "body": node.body}
    if node.path is not None:
        data["path"] = str(node.path)
    return data


def _summary(node: Node) -> str:
    return f"{node.meta.name} ({node.meta.category}) [{', '.join(node.meta.tags)}]"


def _add_scope(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-s", "--scope", default="project", help="persona or project")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="onto", description="Ontology manager")
    parser.add_argument("--version", action="version", version=f"onto {SERVER_VERSION}")
    parser.add_argument(
        "--persona-dir",
        default=os.environ.get(PERSONA_ENV),
        help=f"persona ontology directory [env: {PERSONA_ENV}]",
    )
    parser.add_argument(
        "--project-dir",
        default=os.environ.get(PROJECT_ENV),
        help=f"project ontology directory [env: {PROJECT_ENV}]",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="run as a JSON-RPC stdio server")

    node = commands.add_parser("node", help="node operations")
    actions = node.add_subparsers(dest="action", required=True)

    upsert = actions.add_parser("upsert", help="create or update a node")
    _add_scope(upsert)
    upsert.add_argument("--name", required=True)
    upsert.add_argument("--category", required=True)
    upsert.add_argument("--tags", default="", help="comma-separated tags")
    upsert.add_argument("--refs", default="", help="comma-separated refs")
    upsert.add_argument("--body", required=True)

    delete = actions.add_parser("delete", help="delete a node")
    _add_scope(delete)
    delete.add_argument("name")

    get = actions.add_parser("get", help="get a node by name")
    _add_scope(get)
    get.add_argument("name")

    listing = actions.add_parser("list", help="list nodes")
    _add_scope(listing)
    listing.add_argument("--category")
    listing.add_argument("--tags", help="comma-separated tags")

    search_cmd = commands.add_parser("search", help="search nodes")
    _add_scope(search_cmd)
    search_cmd.add_argument("query")
    search_cmd.add_argument("-b", "--by", default="all", help="tag, ref, content or all")

    recall_cmd = commands.add_parser("recall", help="associative recall")
    _add_scope(recall_cmd)
    recall_cmd.add_argument("context")
    recall_cmd.add_argument("-m", "--max", type=int, default=5)

    reindex = commands.add_parser("reindex", help="regenerate _index.md")
    _add_scope(reindex)

    validate = commands.add_parser("validate", help="validate references")
    _add_scope(validate)

    graph = commands.add_parser("graph", help="show the graph around a node")
    _add_scope(graph)
    graph.add_argument("node")
    graph.add_argument("-d", "--depth", type=int, default=2)

    reindex_path = commands.add_parser(
        "reindex-if-path", help="reindex if the path is inside an ontology"
    )
    reindex_path.add_argument("path")
    return parser


def _get_store(scope: str, persona_dir: Path, project_dir: Path | None) -> Store:
    if scope == "persona":
        return Store(persona_dir)
    if scope == "project":
        if project_dir is None:
            raise _CliError(f"--project-dir or {PROJECT_ENV} required")
        return Store(project_dir)
    raise _CliError(f"invalid scope: {scope}, use 'persona' or 'project'")


def _run_node(args: argparse.Namespace, store: Store) -> None:
    if args.action == "upsert":
        node = Node(
            meta=NodeMeta(
                name=args.name,
                category=args.category,
                tags=parse_csv(args.tags),
                refs=parse_csv(args.refs),
                updated=date.today(),
            ),
            body=args.body,
        )
        path = store.upsert(node)
        try:
            write_index(store)
        except StoreError:
            pass
        print(f"Saved: {path}")
    elif args.action == "delete":
        dangling = store.delete(args.name)
        try:
            write_index(store)
        except StoreError:
            pass
        print(f"Deleted: {args.name}")
        if dangling:
            print(f"Dangling refs in: {', '.join(dangling)}")
    elif args.action == "get":
        print(_pretty(_node_to_json(store.get(args.name))))
    elif args.action == "list":
        tags = parse_csv(args.tags) if args.tags is not None else None
        nodes = store.list(args.category, tags)
        for node in nodes:
            print(_summary(node))
        if not nodes:
            print("No nodes found.")


def _run(args: argparse.Namespace, persona_dir: Path, project_dir: Path | None) -> None:
    command = args.command
    if command == "serve":
        run_server(persona_dir, project_dir)
        return
    if command == "reindex-if-path":
        if reindex_if_ontology_path(args.path, persona_dir, project_dir):
            print("reindexed")
        return

    store = _get_store(args.scope, persona_dir, project_dir)
    if command == "node":
        _run_node(args, store)
    elif command == "search":
        results = search(store, args.query, SearchBy.parse(args.by))
        print(_pretty([asdict(r) for r in results]))
    elif command == "recall":
        print(_pretty(asdict(recall(store, args.context, args.max))))
    elif command == "reindex":
        write_index(store)
        print(f"{args.scope} ontology reindexed.")
    elif command == "validate":
        broken = Graph.build(store.load_all()).broken_refs()
        if not broken:
            print("No broken references.")
        for source, target in broken:
            print(f"{source} → {target} (missing)")
    elif command == "graph":
        neighbors = Graph.build(store.load_all()).neighbors(args.node, args.depth)
        for node, distance in neighbors:
            print(f"[d={distance}] {_summary(node)}")
        if not neighbors:
            print(f"No neighbors found for '{args.node}'")


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    args = _build_parser().parse_args(argv)
    persona_dir = Path(args.persona_dir) if args.persona_dir else _default_persona_dir()
    project_dir = Path(args.project_dir) if args.project_dir else None
    try:
        _run(args, persona_dir, project_dir)
    except _CliError as exc:
        print(exc, file=sys.stderr)
        return 1
    except StoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())