"""Generation of the `_index.md` overview for a store."""

from __future__ import annotations

import os
from collections import defaultdict
from datetime import datetime
from pathlib import Path

from onto.graph import Graph
from onto.node import Node
from onto.store import Store, StoreError

INDEX_FILE = "_index.md"


def _node_line(node: Node) -> str:
    tags = f" [{', '.join(node.meta.tags)}]" if node.meta.tags else ""
    refs = node.all_refs()
    ref_text = " → " + ", ".join(f"[[{r}]]" for r in refs) if refs else ""
    return f"- **{node.meta.name}**{tags}{ref_text}\n"


def generate_index(store: Store) -> str:
    """Render the index document for the store's current contents."""
    nodes = store.load_all()
    graph = Graph.build(nodes)

    parts = [
        "---\n",
        'name: "Index"\n',
        f'description: "Auto-generated ontology index ({len(nodes)} nodes)"\n',
        f'updated: "{datetime.now().strftime("%Y-%m-%d")}"\n',
        "---\n\n",
        "# Ontology Index\n\n",
    ]

    categories: dict[str, list[Node]] = defaultdict(list)
    for node in nodes:
        categories[node.meta.category or "uncategorized"].append(node)

    for category in sorted(categories):
        parts.append(f"## {category}/\n\n")
        parts.extend(_node_line(node) for node in categories[category])
        parts.append("\n")

    broken = graph.broken_refs()
    if broken:
        parts.append("## ⚠ Broken References\n\n")
        parts.extend(f"- {source} → {target} (not found)\n" for source, target in broken)
        parts.append("\n")

    if graph.tag_index:
        parts.append("## Tags\n\n")
        ranked = sorted(graph.tag_index.items(), key=lambda item: (-len(item[1]), item[0]))
        parts.extend(f"- `{tag}` ({len(names)})\n" for tag, names in ranked)

    return "".join(parts)


def write_index(store: Store) -> None:
    """Write `_index.md` at the store root."""
    content = generate_index(store)
    try:
        (store.root / INDEX_FILE).write_text(content, encoding="utf-8")
    except OSError as exc:
        raise StoreError(f"io error: {exc}") from exc


def reindex_if_ontology_path(
    path: str | os.PathLike[str],
    persona_root: str | os.PathLike[str],
    project_root: str | os.PathLike[str] | None = None,
) -> bool:
    """Reindex the ontology containing `path`; return whether one did."""
    target = Path(path)
    for root in (persona_root, project_root):
        if root is not None and target.is_relative_to(Path(root)):
            write_index(Store(root))
            return True
    return False