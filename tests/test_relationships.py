from types import SimpleNamespace
from typing import Optional

import pytest
import nodeattr_server

from nodeattr_server import relationships as rel
from nodeattr_server.errors import DeferredMergeError, MethodNotAllowedError
from nodeattr_server.permissions import ToManyAction, ToOneAction
from nodeattr_server.relationships import MergeResult, to_many, to_one

NODES = to_many("nodes", "nodes", tuple(ToManyAction), requires="cluster")
CLUSTER = to_one("cluster", "clusters", tuple(ToOneAction))


class _FakeGroup:
    _s_type = "groups"

    def __init__(self, nodes: Optional[list] = None, cluster: Optional[object] = None) -> None:
        self.nodes = nodes if nodes is not None else []
        self.cluster = cluster
        self.saved = 0

    def save(self):
        self.saved += 1
        return self


def _node(name):
    return SimpleNamespace(name=name)


@pytest.fixture(autouse=True)
def _quiet_log(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        nodeattr_server,
        "log",
        SimpleNamespace(debug=lambda *a, **k: None, info=lambda *a, **k: None, warning=lambda *a, **k: None, error=lambda *a, **k: None),
        raising=False,
    )


def test_merge_is_deferred_without_cluster() -> None:
    n1 = _node("n1")
    group = _FakeGroup(nodes=[n1])

    result = rel.merge(group, NODES, [_node("n2")])

    assert result is MergeResult.DEFERRED
    assert group.nodes == [n1]
    assert group.saved == 0


def test_deferred_merge_is_reported() -> None:
    group = _FakeGroup()
    with pytest.raises(DeferredMergeError) as exc_info:
        rel.raise_if_deferred(MergeResult.DEFERRED, group, NODES)
    assert exc_info.value.status_code == 409
    assert "cluster" in exc_info.value.message


def test_merge_twice_yields_the_union() -> None:
    n1, n2, n3 = _node("n1"), _node("n2"), _node("n3")
    group = _FakeGroup(cluster=object())

    assert rel.merge(group, NODES, [n1, n2]) is MergeResult.APPLIED
    assert rel.merge(group, NODES, [n2, n3, n3]) is MergeResult.APPLIED

    assert rel.fetch(group, NODES) == [n1, n2, n3]
    assert group.saved == 2


def test_replace_sets_exactly_the_targets() -> None:
    n1, n2, n3 = _node("n1"), _node("n2"), _node("n3")
    group = _FakeGroup(nodes=[n1, n2], cluster=object())

    rel.replace(group, NODES, [n3, n2])

    assert rel.fetch(group, NODES) == [n3, n2]


def test_subtract_ignores_non_members() -> None:
    n1, n2 = _node("n1"), _node("n2")
    group = _FakeGroup(nodes=[n1, n2])

    rel.subtract(group, NODES, [_node("n9")])
    assert rel.fetch(group, NODES) == [n1, n2]

    rel.subtract(group, NODES, [n1])
    assert rel.fetch(group, NODES) == [n2]


def test_clear_then_fetch_is_empty() -> None:
    group = _FakeGroup(nodes=[_node("n1"), _node("n2")])

    rel.clear(group, NODES)

    assert rel.fetch(group, NODES) == []
    assert group.saved == 1


def test_to_one_verbs() -> None:
    c1, c2 = SimpleNamespace(name="c1"), SimpleNamespace(name="c2")
    group = _FakeGroup(cluster=c1)

    assert rel.pluck(group, CLUSTER) is c1
    rel.graft(group, CLUSTER, c2)
    assert rel.pluck(group, CLUSTER) is c2
    rel.prune(group, CLUSTER)
    assert rel.pluck(group, CLUSTER) is None
    assert group.saved == 2


def test_write_verbs_can_skip_saving() -> None:
    group = _FakeGroup(cluster=object())

    rel.merge(group, NODES, [_node("n1")], save=False)
    rel.graft(group, CLUSTER, object(), save=False)

    assert group.saved == 0


def test_undeclared_verb_is_not_allowed() -> None:
    fetch_only = to_many("groups", "groups")
    fetch_only.ensure(ToManyAction.FETCH)
    with pytest.raises(MethodNotAllowedError):
        fetch_only.ensure(ToManyAction.MERGE)


def test_model_attr_defaults_to_the_relationship_name() -> None:
    assert NODES.model_attr == "nodes"
    assert to_many("cascades", None, attr="cascade_models").model_attr == "cascade_models"
    assert CLUSTER.is_to_one and not NODES.is_to_one
