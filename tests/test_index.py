from pathlib import Path

import pytest

from onto.index import generate_index, reindex_if_ontology_path, write_index
from onto.node import Node, NodeMeta
from onto.store import Store, StoreError


def make_node(name, category="domain", tags=(), refs=(), body=""):
    return Node(
        meta=NodeMeta(name=name, category=category, tags=list(tags), refs=list(refs)),
        body=body,
    )


def test_generate_index(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("test-concept", "domain", ["core"], body="A test concept."))
    index = generate_index(store)
    assert "test-concept" in index
    assert "domain/" in index
    assert "`core`" in index


def test_write_index(tmp_path):
    store = Store(tmp_path)
    write_index(store)
    assert (tmp_path / "_index.md").exists()


def test_header_counts_nodes(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("a"))
    store.upsert(make_node("b"))
    index = generate_index(store)
    assert index.startswith('---\nname: "Index"\n')
    assert 'description: "Auto-generated ontology index (2 nodes)"' in index
    assert "# Ontology Index\n\n" in index


def test_node_lines_with_tags_and_refs(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("a", tags=["x", "y"], refs=["b"], body="see [[c]]"))
    store.upsert(make_node("b"))
    index = generate_index(store)
    assert "- **a** [x, y] → [[b]], [[c]]\n" in index
    assert "- **b**\n" in index


def test_categories_sorted_and_uncategorized(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("w", "workflow"))
    store.upsert(make_node("d", "domain"))
    store.upsert(make_node("loose", ""))
    index = generate_index(store)
    assert index.index("## domain/") < index.index("## uncategorized/") < index.index(
        "## workflow/"
    )


def test_broken_references_section(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("a", refs=["ghost"]))
    index = generate_index(store)
    assert "## ⚠ Broken References\n\n- a → ghost (not found)\n" in index


def test_no_broken_section_when_all_resolve(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("a", refs=["b"]))
    store.upsert(make_node("b"))
    assert "Broken References" not in generate_index(store)


def test_tags_ordered_by_count(tmp_path):
    store = Store(tmp_path)
    store.upsert(make_node("a", tags=["rare", "common"]))
    store.upsert(make_node("b", tags=["common"]))
    index = generate_index(store)
    assert "- `common` (2)\n" in index
    assert "- `rare` (1)\n" in index
    assert index.index("`common`") < index.index("`rare`")


def test_write_index_missing_root_raises(tmp_path):
    store = Store(tmp_path / "missing")
    with pytest.raises(StoreError):
        write_index(store)


def test_reindex_persona_path(tmp_path):
    persona = tmp_path / "persona"
    persona.mkdir()
    assert reindex_if_ontology_path(str(persona / "domain" / "x.md"), persona, None) is True
    assert (persona / "_index.md").exists()


def test_reindex_project_path(tmp_path):
    persona = tmp_path / "persona"
    project = tmp_path / "project"
    persona.mkdir()
    project.mkdir()
    result = reindex_if_ontology_path(str(project / "a.md"), persona, project)
    assert result is True
    assert (project / "_index.md").exists()
    assert not (persona / "_index.md").exists()


def test_reindex_outside_path(tmp_path):
    persona = tmp_path / "persona"
    persona.mkdir()
    assert reindex_if_ontology_path(str(tmp_path / "elsewhere.md"), persona, None) is False
    assert not (persona / "_index.md").exists()


def test_reindex_prefix_is_component_wise(tmp_path):
    persona = tmp_path / "persona"
    persona.mkdir()
    other = str(Path(str(persona) + "-other") / "a.md")
    assert reindex_if_ontology_path(other, persona, None) is False