"""Ontology management for Markdown nodes with YAML frontmatter: storage, graph, search, recall, index, CLI and tool server."""

__version__ = "0.1.0"