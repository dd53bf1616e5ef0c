"""Substring search over the nodes of a store."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from onto.node import Node
from onto.store import Store

_SNIPPET_CONTEXT = 40
_SNIPPET_FALLBACK = 80


class SearchBy(Enum):
    """Which part of a node a search looks at."""

    TAG = "tag"
    REF = "ref"
    CONTENT = "content"
    ALL = "all"

    @classmethod
    def parse(cls, text: str) -> SearchBy:
        """The mode named by `text`; anything unknown means ALL."""
        try:
            return cls(text)
        except ValueError:
            return cls.ALL


@dataclass
class SearchResult:
    """A node matching a search, with where it matched and a body excerpt."""

    name: str
    category: str
    tags: list[str] = field(default_factory=list)
    snippet: str = ""
    match_type: str = ""


# Match labels tried for each mode, in order of precedence.
_LABELS_BY_MODE: dict[SearchBy, tuple[str, ...]] = {
    SearchBy.TAG: ("tag",),
    SearchBy.REF: ("ref",),
    SearchBy.CONTENT: ("content",),
    SearchBy.ALL: ("tag", "ref", "content", "name"),
}


def _texts_for(node: Node, label: str) -> list[str]:
    """The texts of `node` that a match of kind `label` looks at."""
    if label == "tag":
        return list(node.meta.tags)
    if label == "ref":
        return node.all_refs()
    if label == "content":
        return [node.body]
    return [node.meta.name]


def _match(node: Node, query: str, by: SearchBy) -> str | None:
    """The first kind of match `query` has in `node`, or None."""
    for label in _LABELS_BY_MODE[by]:
        for text in _texts_for(node, label):
            if query in text.lower():
                return label
    return None


def make_snippet(body: str, query: str) -> str:
    """An excerpt of `body` around the first match of the lower-case `query`."""
    pos = body.lower().find(query)
    if pos < 0:
        return body[:_SNIPPET_FALLBACK]
    start = max(pos - _SNIPPET_CONTEXT, 0)
    end = min(pos + len(query) + _SNIPPET_CONTEXT, len(body))
    snippet = body[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(body):
        snippet += "..."
    return snippet


def search(store: Store, query: str, by: SearchBy | str = SearchBy.ALL) -> list[SearchResult]:
    """Case-insensitive search of the store's nodes."""
    if isinstance(by, str):
        by = SearchBy.parse(by)
    query_lower = query.lower()
    results = []
    for node in store.load_all():
        match_type = _match(node, query_lower, by)
        if match_type is not None:
            results.append(
                SearchResult(
                    name=node.meta.name,
                    category=node.meta.category,
                    tags=list(node.meta.tags),
                    snippet=make_snippet(node.body, query_lower),
                    match_type=match_type,
                )
            )
    return results