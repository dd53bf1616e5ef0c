"""A JSON-RPC tool server over line-delimited standard streams."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict
from datetime import date
from typing import Any, Callable, TextIO

from onto.graph import Graph
from onto.index import write_index
from onto.node import Node, NodeMeta
from onto.recall import recall
from onto.search import SearchBy, search
from onto.store import Store, StoreError

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "onto"
SERVER_VERSION = "0.1.0"
INTERNAL_ERROR = -32603

_SCOPE_SCHEMA = {"type": "string", "enum": ["persona", "project"]}


class ToolError(Exception):
    """A request could not be served; the message goes back to the client."""


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _text_content(text: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def _get(args: Any, key: str) -> Any:
    return args.get(key) if isinstance(args, dict) else None


def _opt_str(args: Any, key: str) -> str | None:
    value = _get(args, key)
    return value if isinstance(value, str) else None


def _req_str(args: Any, key: str) -> str:
    value = _opt_str(args, key)
    if value is None:
        raise ToolError(f"missing {key}")
    return value


def _opt_uint(args: Any, key: str, default: int) -> int:
    value = _get(args, key)
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return default


def _opt_str_list(args: Any, key: str) -> list[str] | None:
    value = _get(args, key)
    if not isinstance(value, list):
        return None
    return [v for v in value if isinstance(v, str)]


class McpServer:
    """Serves ontology tools for a persona store and an optional project store."""

    def __init__(
        self,
        persona_dir: str | os.PathLike[str],
        project_dir: str | os.PathLike[str] | None = None,
    ) -> None:
        self.persona_store = Store(persona_dir)
        self.project_store = Store(project_dir) if project_dir is not None else None
        self._tools: dict[str, Callable[[Any], dict[str, Any]]] = {
            "recall": self._tool_recall,
            "upsert": self._tool_upsert,
            "delete": self._tool_delete,
            "search": self._tool_search,
            "list": self._tool_list,
            "graph": self._tool_graph,
            "reindex": self._tool_reindex,
            "validate": self._tool_validate,
        }

    def get_store(self, scope: str) -> Store:
        """The store for 'persona' or 'project'."""
        if scope == "persona":
            return self.persona_store
        if scope == "project":
            if self.project_store is None:
                raise ToolError("no project ontology configured")
            return self.project_store
        raise ToolError(f"invalid scope: {scope}, use 'persona' or 'project'")

    def handle_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Answer one JSON-RPC request with a response object."""
        request_id = request.get("id")
        method = request.get("method")
        response: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id}

        if method == "notifications/initialized":
            response["result"] = None
            return response

        try:
            if method == "initialize":
                result = {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {"listChanged": False}},
                    "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                }
            elif method == "tools/list":
                result = self.tools_list()
            elif method == "tools/call":
                result = self.tools_call(request.get("params"))
            else:
                raise ToolError(f"unknown method: {method}")
        except (ToolError, StoreError) as exc:
            response["error"] = {"code": INTERNAL_ERROR, "message": str(exc)}
        else:
            response["result"] = result
        return response

    def tools_list(self) -> dict[str, Any]:
        """Descriptions and input schemas of the available tools."""
        return {
            "tools": [
                {
                    "name": "recall",
                    "description": "Associative recall: find ontology nodes relevant to a context. Returns scored results with connection reasons.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "scope": {**_SCOPE_SCHEMA, "description": "Which ontology to search"},
                            "context": {"type": "string", "description": "Context string to find relevant nodes for"},
                            "max_nodes": {"type": "integer", "default": 5, "description": "Maximum nodes to return"},
                        },
                        "required": ["scope", "context"],
                    },
                },
                {
                    "name": "upsert",
                    "description": "Create or update an ontology node. Auto-reindexes after change.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "scope": dict(_SCOPE_SCHEMA),
                            "name": {"type": "string", "description": "Node name (unique identifier)"},
                            "category": {"type": "string", "description": "Category directory (e.g., domain, identity, style)"},
                            "tags": {"type": "array", "items": {"type": "string"}, "default": []},
                            "refs": {"type": "array", "items": {"type": "string"}, "default": [], "description": "References to other node names"},
                            "body": {"type": "string", "description": "Node content (markdown). Use [[name]] for inline refs."},
                        },
                        "required": ["scope", "name", "category", "body"],
                    },
                },
                {
                    "name": "delete",
                    "description": "Delete an ontology node. Returns list of nodes with dangling references.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "scope": dict(_SCOPE_SCHEMA),
                            "name": {"type": "string", "description": "Node name to delete"},
                        },
                        "required": ["scope", "name"],
                    },
                },
                {
                    "name": "search",
                    "description": "Search ontology nodes by tag, ref, content, or all.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "scope": dict(_SCOPE_SCHEMA),
                            "query": {"type": "string"},
                            "by": {"type": "string", "enum": ["tag", "ref", "content", "all"], "default": "all"},
                        },
                        "required": ["scope", "query"],
                    },
                },
                {
                    "name": "list",
                    "description": "List ontology nodes, optionally filtered by category and/or tags.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "scope": dict(_SCOPE_SCHEMA),
                            "category": {"type": "string", "description": "Filter by category"},
                            "tags": {"type": "array", "items": {"type": "string"}, "description": "Filter by tags (OR)"},
                        },
                        "required": ["scope"],
                    },
                },
                {
                    "name": "graph",
                    "description": "Get the connection graph around a node (neighbors up to N hops).",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "scope": dict(_SCOPE_SCHEMA),
                            "node": {"type": "string", "description": "Center node name"},
                            "depth": {"type": "integer", "default": 2, "description": "Max hops"},
                        },
                        "required": ["scope", "node"],
                    },
                },
                {
                    "name": "reindex",
                    "description": "Regenerate _index.md for the specified ontology.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {"scope": dict(_SCOPE_SCHEMA)},
                        "required": ["scope"],
                    },
                },
                {
                    "name": "validate",
                    "description": "Find broken references in the ontology.",
                    "inputSchema": {
                        "type": "object",
                        "properties": {"scope": dict(_SCOPE_SCHEMA)},
                        "required": ["scope"],
                    },
                },
            ]
        }

    def tools_call(self, params: Any) -> dict[str, Any]:
        """Run the tool named in `params` with its arguments."""
        tool_name = _opt_str(params, "name")
        if tool_name is None:
            raise ToolError("missing tool name")
        tool = self._tools.get(tool_name)
        if tool is None:
            raise ToolError(f"unknown tool: {tool_name}")
        return tool(_get(params, "arguments"))

    def _scoped_store(self, args: Any) -> tuple[str, Store]:
        scope = _req_str(args, "scope")
        return scope, self.get_store(scope)

    def _tool_recall(self, args: Any) -> dict[str, Any]:
        scope = _req_str(args, "scope")
        context = _req_str(args, "context")
        max_nodes = _opt_uint(args, "max_nodes", 5)
        store = self.get_store(scope)
        result = recall(store, context, max_nodes)
        return _text_content(_pretty(asdict(result)))

    def _tool_upsert(self, args: Any) -> dict[str, Any]:
        _, store = self._scoped_store(args)
        meta = NodeMeta(
            name=_req_str(args, "name"),
            category=_opt_str(args, "category") or "",
            tags=_opt_str_list(args, "tags") or [],
            refs=_opt_str_list(args, "refs") or [],
            updated=date.today(),
        )
        node = Node(meta=meta, body=_req_str(args, "body"))
        path = store.upsert(node)
        write_index(store)
        return _text_content(f"Node '{meta.name}' saved to {path}")

    def _tool_delete(self, args: Any) -> dict[str, Any]:
        scope = _req_str(args, "scope")
        name = _req_str(args, "name")
        store = self.get_store(scope)
        dangling = store.delete(name)
        write_index(store)
        if dangling:
            text = f"Node '{name}' deleted. Dangling refs in: {', '.join(dangling)}"
        else:
            text = f"Node '{name}' deleted. No dangling references."
        return _text_content(text)

    def _tool_search(self, args: Any) -> dict[str, Any]:
        scope = _req_str(args, "scope")
        query = _req_str(args, "query")
        by = _opt_str(args, "by") or "all"
        store = self.get_store(scope)
        results = search(store, query, SearchBy.parse(by))
        return _text_content(_pretty([asdict(r) for r in results]))

    def _tool_list(self, args: Any) -> dict[str, Any]:
        scope = _req_str(args, "scope")
        category = _opt_str(args, "category")
        tags = _opt_str_list(args, "tags")
        store = self.get_store(scope)
        summaries = [
            {
                "name": n.meta.name,
                "category": n.meta.category,
                "tags": n.meta.tags,
                "refs": n.all_refs(),
            }
            for n in store.list(category, tags)
        ]
        return _text_content(_pretty(summaries))

    def _tool_graph(self, args: Any) -> dict[str, Any]:
        scope = _req_str(args, "scope")
        node_name = _req_str(args, "node")
        depth = _opt_uint(args, "depth", 2)
        store = self.get_store(scope)
        graph = Graph.build(store.load_all())
        result = [
            {
                "name": n.meta.name,
                "category": n.meta.category,
                "distance": d,
                "tags": n.meta.tags,
            }
            for n, d in graph.neighbors(node_name, depth)
        ]
        return _text_content(_pretty(result))

    def _tool_reindex(self, args: Any) -> dict[str, Any]:
        scope, store = self._scoped_store(args)
        write_index(store)
        return _text_content(f"{scope} ontology reindexed.")

    def _tool_validate(self, args: Any) -> dict[str, Any]:
        _, store = self._scoped_store(args)
        broken = Graph.build(store.load_all()).broken_refs()
        if not broken:
            return _text_content("No broken references found.")
        items = "\n".join(f"{source} → {target} (missing)" for source, target in broken)
        return _text_content(f"Broken references:\n{items}")


def _parse_request(line: str) -> dict[str, Any]:
    request = json.loads(line)
    if not isinstance(request, dict):
        raise ValueError("request is not an object")
    for key in ("jsonrpc", "method"):
        if key not in request:
            raise ValueError(f"missing field `{key}`")
        if not isinstance(request[key], str):
            raise ValueError(f"field `{key}` is not a string")
    return request


def run_server(
    persona_dir: str | os.PathLike[str],
    project_dir: str | os.PathLike[str] | None = None,
    instream: TextIO | None = None,
    outstream: TextIO | None = None,
) -> None:
    """Serve one JSON-RPC request per input line until the input ends."""
    instream = sys.stdin if instream is None else instream
    outstream = sys.stdout if outstream is None else outstream
    server = McpServer(persona_dir, project_dir)

    for raw in instream:
        line = raw.strip()
        if not line:
            continue
        try:
            request = _parse_request(line)
        except ValueError as exc:
            print(f"JSON parse error: {exc}", file=sys.stderr)
            continue
        response = server.handle_request(request)
        outstream.write(json.dumps(response, ensure_ascii=False, separators=(",", ":")) + "\n")
        outstream.flush()