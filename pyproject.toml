[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "onto"
version = "0.1.0"
description = "Ontology management CLI and MCP stdio server for Markdown knowledge nodes"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["ontology", "markdown", "frontmatter", "wikilink", "knowledge-graph", "mcp", "json-rpc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
onto = "onto.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["onto"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
