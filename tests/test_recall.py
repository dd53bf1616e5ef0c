import pytest

from onto.node import Node, NodeMeta
from onto.recall import recall, tokenize
from onto.store import Store


@pytest.fixture
def store(tmp_path):
    store = Store(tmp_path)
    nodes = [
        Node(
            meta=NodeMeta(
                name="auth-flow",
                category="domain",
                tags=["auth", "security"],
                refs=["user-model"],
            ),
            body="JWT-based authentication flow. Handles login, logout, token refresh.",
        ),
        Node(
            meta=NodeMeta(name="user-model", category="domain", tags=["model", "core"]),
            body="User entity with email, roles, permissions. Central to auth system.",
        ),
        Node(
            meta=NodeMeta(
                name="deploy-pipeline", category="workflow", tags=["ci", "deploy"]
            ),
            body="GitHub Actions pipeline. Build, test, deploy to staging then production.",
        ),
    ]
    for node in nodes:
        store.upsert(node)
    return store


def test_recall_auth_context(store):
    result = recall(store, "authentication login security", 5)
    assert result.nodes
    assert result.nodes[0].name == "auth-flow"


def test_recall_proximity_boost(store):
    result = recall(store, "auth token", 5)
    names = [n.name for n in result.nodes]
    assert "auth-flow" in names
    assert "user-model" in names


def test_recall_empty_context(store):
    result = recall(store, "", 5)
    assert result.nodes == []
    assert result.total_candidates == 3


def test_tokenize():
    tokens = tokenize("JWT authentication for the user login")
    assert "jwt" in tokens
    assert "authentication" in tokens
    assert "user" in tokens
    assert "login" in tokens
    assert "the" not in tokens
    assert "for" not in tokens


def test_recall_scores_and_reasons(store):
    result = recall(store, "auth token", 5)
    assert result.total_candidates == 3
    assert [n.name for n in result.nodes] == ["auth-flow", "user-model"]
    top, second = result.nodes
    assert top.score == pytest.approx(10.0)
    assert top.reason == "name(1), tag(1), body(2/2)"
    assert second.score == pytest.approx(2.5)
    assert second.reason == "body(1/2), proximity(auth-flow→user-model,d=1)"
    assert second.category == "domain"
    assert second.tags == ["model", "core"]


def test_recall_truncates(store):
    result = recall(store, "auth token", 1)
    assert [n.name for n in result.nodes] == ["auth-flow"]


def test_recall_empty_store(tmp_path):
    result = recall(Store(tmp_path), "anything", 5)
    assert result.nodes == []
    assert result.total_candidates == 0


def test_recall_only_stop_words(store):
    result = recall(store, "the and of", 5)
    assert result.nodes == []
    assert result.total_candidates == 3


def test_tokenize_keeps_hyphen_and_underscore():
    assert tokenize("user-model snake_case, x") == ["user-model", "snake_case"]


def test_tokenize_korean():
    assert tokenize("인증 의 한") == ["인증", "한"]


def test_tokenize_keeps_duplicates():
    assert tokenize("Auth auth") == ["auth", "auth"]