from onto.graph import EdgeType, Graph, GraphEdge
from onto.node import Node, NodeMeta


def make_node(name, tags=(), refs=(), body=""):
    return Node(
        meta=NodeMeta(name=name, category="test", tags=list(tags), refs=list(refs)),
        body=body,
    )


def test_graph_build():
    g = Graph.build(
        [
            make_node("a", ["x"], ["b"]),
            make_node("b", ["x", "y"], [], "see [[c]]"),
            make_node("c", ["y"]),
        ]
    )
    assert g.adjacency["a"] == {"b"}
    assert g.adjacency["b"] == {"a", "c"}
    assert g.adjacency["c"] == {"b"}
    assert g.tag_index["x"] == {"a", "b"}


def test_neighbors():
    g = Graph.build(
        [
            make_node("a", refs=["b"]),
            make_node("b", refs=["c"]),
            make_node("c"),
        ]
    )
    n1 = g.neighbors("a", 1)
    assert len(n1) == 1
    assert n1[0][0].meta.name == "b"

    n2 = g.neighbors("a", 2)
    assert [(n.meta.name, d) for n, d in n2] == [("b", 1), ("c", 2)]


def test_neighbors_unknown_node():
    g = Graph.build([make_node("a")])
    assert g.neighbors("missing", 3) == []


def test_broken_refs():
    g = Graph.build([make_node("a", refs=["nonexistent"], body="see [[also-missing]]")])
    assert sorted(g.broken_refs()) == [("a", "also-missing"), ("a", "nonexistent")]


def test_by_tag():
    g = Graph.build(
        [
            make_node("a", ["shared"]),
            make_node("b", ["shared", "extra"]),
            make_node("c", ["other"]),
        ]
    )
    assert len(g.by_tag("shared")) == 2
    assert len(g.by_tag("other")) == 1
    assert len(g.by_tag("nope")) == 0


def test_edges_deduplicate_pairs():
    g = Graph.build(
        [
            make_node("a", refs=["b"], body="and [[c]]"),
            make_node("b", refs=["a"]),
            make_node("c", body="[[missing]]"),
        ]
    )
    edges = g.edges()
    pairs = {tuple(sorted((e.source, e.target))) for e in edges}
    assert pairs == {("a", "b"), ("a", "c")}
    assert len(edges) == 2
    assert GraphEdge("a", "c", EdgeType.WIKILINK) in edges
    assert all(
        e.edge_type is EdgeType.REF for e in edges if {e.source, e.target} == {"a", "b"}
    )