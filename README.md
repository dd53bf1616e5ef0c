# onto

`onto` manages a small ontology that is kept as Markdown files with YAML
frontmatter. Each node is one `.md` file stored in a category directory.
Nodes link to each other in two ways: through a `refs` list in the
frontmatter, or through inline `[[wikilinks]]` in the body.

The tool can:

- keep a generated `_index.md` up to date;
- search nodes;
- report references that point to nodes that do not exist;
- walk the link graph;
- do "associative recall", which ranks nodes by how relevant they are to a
  free-text context.

You can use it from the command line. You can also run it as a JSON-RPC tool
server over standard input and output (MCP style), which reads one request per
line.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install .[test]
```

## Node format

```markdown
---
name: "auth-flow"
category: "domain"
tags: ["auth", "security"]
refs: ["user-model"]
---

JWT-based authentication flow. See also [[session-store]].
```

Only `name` is required.

- `category` defaults to an empty string.
- `tags` and `refs` default to empty lists.
- `created` and `updated` are optional ISO dates.

When a store is loaded, Markdown files that do not parse as nodes are skipped.

A node is saved to `<root>/<category>/<slug>.md`. When the category is empty,
it is saved to `<root>/<slug>.md`. To form the slug, the name is lower-cased
and every character that is not alphanumeric or `-` becomes `-`. If you
upsert a node whose name already exists, the old file is replaced. This holds
even when the old file is in a different category.

## Ontology locations

There are two scopes:

- `persona` comes from `--persona-dir` or `ONTO_PERSONA_DIR`. It defaults to
  `$HOME/.claude/personas`.
- `project` comes from `--project-dir` or `ONTO_PROJECT_DIR`. Any command run
  in the project scope fails if this is not set.

Most commands take `-s/--scope persona|project`. The default is `project`.

## Command line

```
onto --project-dir ./ontology node upsert --name auth-flow --category domain \
     --tags auth,security --refs user-model --body "JWT-based authentication flow."
onto --project-dir ./ontology node get auth-flow
onto --project-dir ./ontology node list --category domain --tags auth
onto --project-dir ./ontology node delete auth-flow

onto --project-dir ./ontology search auth --by tag        # tag, ref, content or all
onto --project-dir ./ontology recall "login token security" --max 5
onto --project-dir ./ontology graph auth-flow --depth 2
onto --project-dir ./ontology validate
onto --project-dir ./ontology reindex
onto --project-dir ./ontology reindex-if-path ./ontology/domain/auth-flow.md
onto serve
onto --version
```

What the commands do:

- `node upsert` and `node delete` both regenerate `_index.md` afterwards.
  `node upsert` sets `updated` to today's date.
- `node delete` lists any nodes that still refer to the deleted node.
- `node list --tags` matches nodes that carry any of the given tags.
- `node get`, `search` and `recall` print JSON.
- `reindex-if-path` is meant to be called from editor hooks. It regenerates
  the index of the ontology that contains the path. It prints `reindexed` only
  when the path lies inside one of the ontology directories.

On an error, the command writes a message to standard error and exits with
status 1. Errors include an unknown node, an invalid scope, or a missing
project directory.

### Search

Search matches a case-insensitive substring. The `--by` option controls what
is searched:

- `tag` looks at tags.
- `ref` looks at references, both explicit refs and wikilinks.
- `content` looks at the body.
- `all` tries tag, then ref, then content, then name. It reports the first
  kind of match it finds.

Every result includes a snippet of the body around the match.

### Recall

The context is split into lower-cased keywords. English stop words, Korean
particles and one-letter words are dropped. Each node is scored as follows:

- 5 points for each keyword found in its name.
- 3 points for each tag that contains a keyword.
- Up to 2 points for the share of keywords found in its body.

Any node that scores 3 or more boosts its neighbours within two hops. The
boost is 1.5 divided by the distance. The best `--max` nodes are returned,
each with a `reason` that explains its score.

### Index

`_index.md` lists the nodes by category. Each entry shows the node's tags and
references. After the list come any broken references. Last is a tag list,
ordered by how many nodes use each tag.

## Tool server

`onto serve` reads JSON-RPC requests from standard input and writes one
compact JSON response per line. It handles these methods:

- `initialize`
- `notifications/initialized`
- `tools/list`
- `tools/call`

The available tools are `recall`, `upsert`, `delete`, `search`, `list`,
`graph`, `reindex` and `validate`. Each tool takes a `scope` argument.

When a request fails, the response carries error code `-32603` and a message.
Lines that are not valid JSON-RPC are reported on standard error and skipped.

## Library use

```python
from onto.store import Store
from onto.node import Node, NodeMeta
from onto.graph import Graph
from onto.recall import recall
from onto.search import search, SearchBy
from onto.index import write_index

store = Store("ontology")
store.upsert(Node(meta=NodeMeta(name="user-model", category="domain"), body="User entity."))
graph = Graph.build(store.load_all())
print(graph.broken_refs())
print(graph.neighbors("user-model", 2))
print(recall(store, "user roles", 5))
print(search(store, "user", SearchBy.parse("all")))
write_index(store)
```

To run the server from your own code, use `onto.mcp.McpServer`. It has
`handle_request` for request dictionaries and `run_server` for any pair of
text streams.

Exceptions:

- `Store.get` and `Store.delete` raise `onto.store.NodeNotFoundError` for an
  unknown name.
- File-system problems raise `onto.store.StoreError`.
- `Node.parse` raises `onto.node.NodeError`, or its subclass
  `MissingFrontmatterError`.