"""
Attribute whitelisting for create and update requests
"""
from typing import Any, Dict, Iterable
from .errors import BadRequestError

# fields that are computed by the models and can never be written by clients
DERIVED_FIELDS = {"params": "level-params"}

BASE_FIELDS = ("name", "level_params")
CLUSTER_FIELDS = BASE_FIELDS
NODE_FIELDS = BASE_FIELDS
GROUP_FIELDS = NODE_FIELDS + ("priority",)


def undasherize(attributes: Dict[str, Any]) -> Dict[str, Any]:
    """
    json:api member names use dashes, the models use underscores
    """
    return {key.replace("-", "_"): value for key, value in attributes.items()}


def whitelist(fields: Iterable[str], attributes: Dict[str, Any]) -> Dict[str, Any]:
    """
    :param fields: the mutable fields of the resource type
    :param attributes: attribute payload, keys with underscores
    :return: the subset of `attributes` listed in `fields`
    :raises BadRequestError: a derived field was supplied
    """
    for derived, surrogate in DERIVED_FIELDS.items():
        if derived in attributes:
            raise BadRequestError(f"The '{derived}' attribute can not be set directly. Please set the '{surrogate}' instead!")
    return {key: attributes[key] for key in fields if key in attributes}
