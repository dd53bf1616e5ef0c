"""Associative recall: rank nodes by relevance to a free-text context."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby

from onto.graph import Graph
from onto.store import Store

NAME_WEIGHT = 5.0
TAG_WEIGHT = 3.0
BODY_WEIGHT = 2.0
PROXIMITY_WEIGHT = 1.5
HIGH_SCORE = 3.0
PROXIMITY_DEPTH = 2

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "is", "are", "was", "were", "be", "been", "being", "have",
        "has", "had", "do", "does", "did", "will", "would", "could", "should", "may",
        "might", "can", "shall", "to", "of", "in", "for", "on", "with", "at", "by",
        "from", "as", "into", "about", "and", "or", "not", "this", "that", "it", "its",
        "의", "에", "를", "을", "이", "가", "은", "는", "로", "으로", "와", "과", "도",
        "에서", "까지", "부터",
    }
)


@dataclass
class RecalledNode:
    """A recalled node with its score and the reasons behind it."""

    name: str
    category: str
    tags: list[str]
    body: str
    score: float
    reason: str


@dataclass
class RecallResult:
    """The top nodes and the number of nodes that were considered."""

    nodes: list[RecalledNode] = field(default_factory=list)
    total_candidates: int = 0


def _is_word_char(c: str) -> bool:
    return c.isalnum() or c in "-_"


def tokenize(text: str) -> list[str]:
    """Lower-case keywords of `text`, without stop words and very short words."""
    words = ("".join(chars) for is_word, chars in groupby(text.lower(), _is_word_char) if is_word)
    return [w for w in words if len(w.encode("utf-8")) >= 2 and w not in STOP_WORDS]


def recall(store: Store, context: str, max_nodes: int = 5) -> RecallResult:
    """The `max_nodes` nodes most relevant to `context`, best first."""
    nodes = store.load_all()
    graph = Graph.build(nodes)
    keywords = tokenize(context)

    if not keywords or not nodes:
        return RecallResult(nodes=[], total_candidates=len(nodes))

    scores: dict[str, list] = {}
    for node in nodes:
        score = 0.0
        reasons: list[str] = []

        name_lower = node.meta.name.lower()
        name_hits = sum(1 for kw in keywords if kw in name_lower)
        if name_hits:
            score += NAME_WEIGHT * name_hits
            reasons.append(f"name({name_hits})")

        tag_hits = sum(
            1 for tag in node.meta.tags if any(kw in tag.lower() for kw in keywords)
        )
        if tag_hits:
            score += TAG_WEIGHT * tag_hits
            reasons.append(f"tag({tag_hits})")

        body_lower = node.body.lower()
        body_hits = sum(1 for kw in keywords if kw in body_lower)
        if body_hits:
            score += BODY_WEIGHT * body_hits / len(keywords)
            reasons.append(f"body({body_hits}/{len(keywords)})")

        if score > 0.0:
            scores[node.meta.name] = [score, reasons]

    high_scorers = [name for name, (score, _) in scores.items() if score >= HIGH_SCORE]
    for name in high_scorers:
        for neighbor, depth in graph.neighbors(name, PROXIMITY_DEPTH):
            entry = scores.setdefault(neighbor.meta.name, [0.0, []])
            entry[0] += PROXIMITY_WEIGHT / depth
            entry[1].append(f"proximity({name}→{neighbor.meta.name},d={depth})")

    ranked = sorted(scores.items(), key=lambda item: item[1][0], reverse=True)[:max_nodes]

    recalled = [
        RecalledNode(
            name=node.meta.name,
            category=node.meta.category,
            tags=list(node.meta.tags),
            body=node.body,
            score=score,
            reason=", ".join(reasons),
        )
        for name, (score, reasons) in ranked
        if (node := graph.nodes.get(name)) is not None
    ]
    return RecallResult(nodes=recalled, total_candidates=len(nodes))