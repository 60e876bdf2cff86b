"""
Resolution of path identifiers into model instances

Two identifier shapes are supported:
- plain: "n1", matched against the `name` column of the model
- compound: "c1.n1", the name of the scoping cluster followed by the name of the model

The shape selects the lookup, there is no fallback from one shape to the other.
"""
import re
from typing import NamedTuple, Optional
from .errors import AmbiguousIdentifierError, NotFoundError

PLAIN_ID_REGEX = re.compile(r"\A([A-Za-z0-9]+)\Z")
COMPOUND_ID_REGEX = re.compile(r"\A([A-Za-z0-9-]+)\.([A-Za-z0-9-]+)\Z")


class Identifier(NamedTuple):
    name: str
    scope: Optional[str] = None

    @property
    def is_compound(self) -> bool:
        return self.scope is not None


def parse_identifier(identifier) -> Identifier:
    """
    :param identifier: raw identifier string from the url or a resource identifier object
    :return: Identifier
    :raises NotFoundError: the identifier matches neither grammar
    """
    if not isinstance(identifier, str):
        raise NotFoundError(f'Invalid identifier "{identifier}"')
    match = COMPOUND_ID_REGEX.match(identifier)
    if match:
        return Identifier(name=match.group(2), scope=match.group(1))
    match = PLAIN_ID_REGEX.match(identifier)
    if match:
        return Identifier(name=match.group(1))
    raise NotFoundError(f'Invalid identifier "{identifier}"')


def resolve_identifier(model, identifier):
    """
    :param model: Cluster, Group or Node
    :param identifier: raw identifier string
    :return: the unique model instance matching the identifier
    """
    parsed = parse_identifier(identifier)
    if parsed.is_compound:
        if model._s_scope is None:
            raise NotFoundError(f'"{model._s_type}" can not be resolved by compound identifier "{identifier}"')
        scope_rel = getattr(model, model._s_scope)
        scope_model = scope_rel.property.mapper.class_
        query = model.query.join(scope_rel).filter(scope_model.name == parsed.scope, model.name == parsed.name)
    else:
        query = model.query.filter(model.name == parsed.name)

    matches = query.limit(2).all()
    if not matches:
        raise NotFoundError(f'Invalid "{model.__name__}" ID "{identifier}"')
    if len(matches) > 1:
        raise AmbiguousIdentifierError(f'"{identifier}" matches more than one {model.__name__}, use a <cluster>.<name> identifier')
    return matches[0]
