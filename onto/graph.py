"""The reference graph between the nodes of an ontology."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from onto.node import Node


class EdgeType(Enum):
    """How two nodes are connected."""

    REF = "Ref"
    WIKILINK = "Wikilink"
    TAG = "Tag"


@dataclass(frozen=True)
class GraphEdge:
    """A connection from one node to another."""

    source: str
    target: str
    edge_type: EdgeType


def _ordered_pair(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a < b else (b, a)


@dataclass
class Graph:
    """Nodes by name, undirected reference adjacency, and a tag index."""

    nodes: dict[str, Node] = field(default_factory=dict)
    adjacency: dict[str, set[str]] = field(default_factory=dict)
    tag_index: dict[str, set[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, nodes: Iterable[Node]) -> Graph:
        """Build the graph from a collection of nodes."""
        nodes = list(nodes)
        graph = cls()
        for node in nodes:
            name = node.meta.name
            graph.nodes[name] = node
            graph.adjacency.setdefault(name, set())
            for tag in node.meta.tags:
                graph.tag_index.setdefault(tag, set()).add(name)

        for node in nodes:
            name = node.meta.name
            for ref in node.all_refs():
                if ref in graph.nodes:
                    graph.adjacency.setdefault(name, set()).add(ref)
                    graph.adjacency.setdefault(ref, set()).add(name)
        return graph

    def neighbors(self, name: str, depth: int) -> list[tuple[Node, int]]:
        """Nodes reachable from `name` within `depth` hops, nearest first."""
        visited: set[str] = set()
        result: list[tuple[Node, int]] = []
        frontier: list[tuple[str, int]] = [(name, 0)]

        while frontier:
            current, d = frontier.pop()
            if current in visited or d > depth:
                continue
            visited.add(current)
            if d > 0 and current in self.nodes:
                result.append((self.nodes[current], d))
            if d < depth:
                frontier.extend(
                    (neighbor, d + 1)
                    for neighbor in self.adjacency.get(current, ())
                    if neighbor not in visited
                )

        result.sort(key=lambda item: item[1])
        return result

    def by_tag(self, tag: str) -> list[Node]:
        """Nodes carrying the tag."""
        return [
            self.nodes[name]
            for name in self.tag_index.get(tag, ())
            if name in self.nodes
        ]

    def edges(self) -> list[GraphEdge]:
        """Each connected pair once, explicit refs before wikilinks."""
        edges: list[GraphEdge] = []
        seen: set[tuple[str, str]] = set()

        def add(source: str, target: str, kind: EdgeType) -> None:
            key = _ordered_pair(source, target)
            if key not in seen:
                seen.add(key)
                edges.append(GraphEdge(source, target, kind))

        for node in self.nodes.values():
            name = node.meta.name
            for ref in node.meta.refs:
                if ref in self.nodes:
                    add(name, ref, EdgeType.REF)
            for ref in node.inline_refs():
                if ref in self.nodes and ref not in node.meta.refs:
                    add(name, ref, EdgeType.WIKILINK)
        return edges

    def broken_refs(self) -> list[tuple[str, str]]:
        """(node, ref) pairs whose ref names no existing node."""
        return [
            (node.meta.name, ref)
            for node in self.nodes.values()
            for ref in node.all_refs()
            if ref not in self.nodes
        ]