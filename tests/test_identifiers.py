import pytest

from nodeattr_server import Cluster, Group, Node
from nodeattr_server.errors import AmbiguousIdentifierError, ConflictError, NotFoundError
from nodeattr_server.identifiers import Identifier, parse_identifier, resolve_identifier


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("n1", Identifier(name="n1")),
        ("ABC123", Identifier(name="ABC123")),
        ("c1.n1", Identifier(name="n1", scope="c1")),
        ("rack-1.node-01", Identifier(name="node-01", scope="rack-1")),
    ],
)
def test_parse_identifier(raw, expected):
    assert parse_identifier(raw) == expected
    assert parse_identifier(raw).is_compound == (expected.scope is not None)


@pytest.mark.parametrize("raw", ["", "n-1", "a.b.c", ".n1", "c1.", "n1 ", "n_1", None, 12])
def test_parse_identifier_rejects_other_shapes(raw):
    with pytest.raises(NotFoundError):
        parse_identifier(raw)


def test_plain_identifier_resolves_by_name(inventory):
    assert resolve_identifier(Cluster, "c1") is inventory["c1"]
    assert resolve_identifier(Group, "g2") is inventory["g2"]
    assert resolve_identifier(Node, "n2") is inventory["n2"]


def test_plain_identifier_without_match(inventory):
    with pytest.raises(NotFoundError):
        resolve_identifier(Node, "n99")


def test_plain_identifier_matching_twice_is_ambiguous(inventory):
    # n1 exists in c1 and c2
    with pytest.raises(AmbiguousIdentifierError) as exc_info:
        resolve_identifier(Node, "n1")
    assert isinstance(exc_info.value, ConflictError)


def test_compound_identifier_resolves_within_the_cluster(inventory):
    assert resolve_identifier(Node, "c1.n1") is inventory["n1"]
    assert resolve_identifier(Node, "c2.n1") is inventory["c2_n1"]
    assert resolve_identifier(Group, "c1.g1") is inventory["g1"]


@pytest.mark.parametrize("raw", ["c3.n1", "c2.n2", "c2.g1"])
def test_compound_identifier_requires_both_parts(inventory, raw):
    model = Group if raw.endswith("g1") else Node
    with pytest.raises(NotFoundError):
        resolve_identifier(model, raw)


def test_clusters_have_no_compound_identifiers(inventory):
    with pytest.raises(NotFoundError):
        resolve_identifier(Cluster, "c1.c1")
