"""A directory of node files, one markdown file per node."""

from __future__ import annotations

import os
from pathlib import Path

from onto.node import Node, NodeError

_INDEX_FILE = "_index.md"


class StoreError(Exception):
    """An operation on the store failed."""


class NodeNotFoundError(StoreError, LookupError):
    """No node with the requested name exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"node not found: {name}")
        self.name = name


def slug(name: str) -> str:
    """File name stem for a node name."""
    return "".join(c if c.isalnum() or c == "-" else "-" for c in name).lower()


class Store:
    """Nodes stored as markdown files under a root directory."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"Store({str(self.root)!r})"

    def _node_files(self):
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename.endswith(".md") and filename != _INDEX_FILE:
                    yield Path(dirpath) / filename

    def load_all(self) -> list[Node]:
        """Load every node; markdown files that are not nodes are skipped."""
        if not self.root.exists():
            return []
        nodes = []
        for path in self._node_files():
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise StoreError(f"io error: {exc}") from exc
            try:
                node = Node.parse(content)
            except NodeError:
                continue
            node.path = path.relative_to(self.root)
            nodes.append(node)
        return nodes

    def get(self, name: str) -> Node:
        """Return the node with the given name."""
        for node in self.load_all():
            if node.meta.name == name:
                return node
        raise NodeNotFoundError(name)

    def upsert(self, node: Node) -> Path:
        """Write a node, replacing any earlier file for the same name."""
        directory = self.root / (node.meta.category or ".")
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"io error: {exc}") from exc

        try:
            existing = self.get(node.meta.name)
        except StoreError:
            existing = None
        try:
            if existing is not None and existing.path is not None:
                old = self.root / existing.path
                if old.exists():
                    old.unlink()
            path = directory / f"{slug(node.meta.name)}.md"
            path.write_text(node.render(), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"io error: {exc}") from exc
        return path

    def delete(self, name: str) -> list[str]:
        """Delete a node; return the names of nodes that still refer to it."""
        node = self.get(name)
        if node.path is not None:
            full = self.root / node.path
            try:
                if full.exists():
                    full.unlink()
            except OSError as exc:
                raise StoreError(f"io error: {exc}") from exc
        return [n.meta.name for n in self.load_all() if name in n.all_refs()]

    def list(
        self, category: str | None = None, tags: list[str] | None = None
    ) -> list[Node]:
        """Nodes in the category (if given) carrying any of the tags (if given)."""
        return [
            node
            for node in self.load_all()
            if (category is None or node.meta.category == category)
            and (tags is None or any(t in node.meta.tags for t in tags))
        ]