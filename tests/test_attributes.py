import pytest

from nodeattr_server.attributes import BASE_FIELDS, GROUP_FIELDS, NODE_FIELDS, undasherize, whitelist
from nodeattr_server.errors import BadRequestError


def test_group_fields_extend_the_node_fields():
    assert NODE_FIELDS == BASE_FIELDS == ("name", "level_params")
    assert GROUP_FIELDS == ("name", "level_params", "priority")


def test_whitelist_keeps_only_mutable_fields():
    attributes = {"name": "n1", "level_params": {"ip": "10.0.0.1"}, "priority": 4, "id": "x", "cluster_id": 7}

    assert whitelist(NODE_FIELDS, attributes) == {"name": "n1", "level_params": {"ip": "10.0.0.1"}}
    assert whitelist(GROUP_FIELDS, attributes) == {"name": "n1", "level_params": {"ip": "10.0.0.1"}, "priority": 4}


def test_whitelist_preserves_values():
    level_params = {"nested": {"a": [1, 2]}}
    result = whitelist(NODE_FIELDS, {"level_params": level_params, "name": None})
    assert result["level_params"] is level_params
    assert result["name"] is None


@pytest.mark.parametrize("fields", [NODE_FIELDS, GROUP_FIELDS])
def test_params_can_not_be_set(fields):
    with pytest.raises(BadRequestError) as exc_info:
        whitelist(fields, {"name": "n1", "params": {"ip": "10.0.0.1"}})
    assert exc_info.value.status_code == 400
    assert "'params'" in exc_info.value.message
    assert "'level-params'" in exc_info.value.message


def test_undasherize():
    assert undasherize({"level-params": {}, "name": "a"}) == {"level_params": {}, "name": "a"}
