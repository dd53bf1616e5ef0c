"""Ontology nodes: markdown documents with a YAML frontmatter header."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

_WIKILINK = re.compile(r"\[\[([^\]]+)\]\]")


class NodeError(Exception):
    """A document could not be read as an ontology node."""


class MissingFrontmatterError(NodeError):
    """The document lacks the opening or closing '---' delimiter."""

    def __init__(self) -> None:
        super().__init__("missing frontmatter delimiters")


def _as_date(key: str, value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise NodeError(f"yaml parse error: {key}: {exc}") from exc
    raise NodeError(f"yaml parse error: {key}: expected a date, got {value!r}")


def _as_str_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise NodeError(f"yaml parse error: {key}: expected a list of strings")
    return list(value)


@dataclass
class NodeMeta:
    """The frontmatter fields of a node."""

    name: str
    category: str = ""
    tags: list[str] = field(default_factory=list)
    refs: list[str] = field(default_factory=list)
    created: date | None = None
    updated: date | None = None

    @classmethod
    def _from_mapping(cls, data: Any) -> NodeMeta:
        if not isinstance(data, dict):
            raise NodeError("yaml parse error: frontmatter is not a mapping")
        if "name" not in data:
            raise NodeError("yaml parse error: missing field `name`")
        name = data["name"]
        if not isinstance(name, str):
            raise NodeError("yaml parse error: name: expected a string")
        category = data.get("category", "")
        if not isinstance(category, str):
            raise NodeError("yaml parse error: category: expected a string")
        return cls(
            name=name,
            category=category,
            tags=_as_str_list("tags", data["tags"]) if "tags" in data else [],
            refs=_as_str_list("refs", data["refs"]) if "refs" in data else [],
            created=_as_date("created", data.get("created")),
            updated=_as_date("updated", data.get("updated")),
        )

    def _to_mapping(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "category": self.category,
            "tags": list(self.tags),
            "refs": list(self.refs),
        }
        if self.created is not None:
            data["created"] = self.created.isoformat()
        if self.updated is not None:
            data["updated"] = self.updated.isoformat()
        return data


@dataclass
class Node:
    """A node: its metadata, markdown body and path relative to the store root."""

    meta: NodeMeta
    body: str = ""
    path: Path | None = None

    @classmethod
    def parse(cls, content: str) -> Node:
        """Parse a markdown document with YAML frontmatter."""
        frontmatter, body = split_frontmatter(content)
        try:
            data = yaml.safe_load(frontmatter)
        except yaml.YAMLError as exc:
            raise NodeError(f"yaml parse error: {exc}") from exc
        return cls(meta=NodeMeta._from_mapping(data), body=body.strip())

    def render(self) -> str:
        """Render the node back to a markdown document."""
        header = yaml.safe_dump(
            self.meta._to_mapping(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return f"---\n{header}---\n\n{self.body}\n"

    def inline_refs(self) -> list[str]:
        """Names referenced inline in the body as [[wikilinks]]."""
        return _WIKILINK.findall(self.body)

    def all_refs(self) -> list[str]:
        """Explicit refs followed by inline refs not already listed."""
        refs = list(self.meta.refs)
        for ref in self.inline_refs():
            if ref not in refs:
                refs.append(ref)
        return refs


def split_frontmatter(content: str) -> tuple[str, str]:
    """Split a document into its frontmatter text and its body text."""
    trimmed = content.lstrip()
    if not trimmed.startswith("---"):
        raise MissingFrontmatterError()
    after_first = trimmed[3:]
    end = after_first.find("\n---")
    if end < 0:
        raise MissingFrontmatterError()
    return after_first[:end].strip(), after_first[end + 4 :]