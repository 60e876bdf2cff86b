"""
The exposed resource types: clusters, groups and nodes

Each resource type is a record of its model, its writable fields, its relationships and
its role overrides. The operations below are shared, resource specific behaviour is
data on the record (fields, required relationships, merge preconditions, index filters).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
import nodeattr_server
from . import relationships as rel
from .attributes import CLUSTER_FIELDS, GROUP_FIELDS, NODE_FIELDS, whitelist
from .context import RequestContext
from .errors import BadRequestError, ConflictError, FieldError, NotFoundError, ValidationError
from .identifiers import resolve_identifier
from .models import Cluster, Group, Node
from .permissions import ToManyAction, ToOneAction
from .relationships import RelationshipSpec, to_many, to_one
from .translator import translate_errors


@dataclass(frozen=True)
class ResourceType:
    name: str
    model: type
    fields: Tuple[str, ...]
    relationships: Mapping[str, RelationshipSpec]
    role_overrides: Mapping[Any, Any] = field(default_factory=dict)
    # relationships that have to be supplied with a create request
    required_relationships: Tuple[str, ...] = ()
    # filter[<key>] query arguments of the index action => model column
    index_filters: Mapping[str, str] = field(default_factory=dict)

    def resolve(self, identifier: str):
        return resolve_identifier(self.model, identifier)

    def whitelist(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        return whitelist(self.fields, attributes)

    def relationship(self, name: str) -> RelationshipSpec:
        try:
            return self.relationships[name]
        except KeyError:
            raise NotFoundError(f'{self.name} has no relationship "{name}"')

    def load(self, ctx: RequestContext):
        if ctx.instance is None:
            ctx.instance = self.resolve(ctx.identifier)
        return ctx.instance

    #
    # primary actions
    #
    def index(self, ctx: RequestContext) -> list:
        query = self.model.query
        for key, value in ctx.filters.items():
            column = self.index_filters.get(key)
            if column is None:
                nodeattr_server.log.warning(f"Ignoring unsupported filter[{key}] on {self.name}")
                continue
            query = query.filter(getattr(self.model, column) == value)
        return query.order_by(self.model.id).all()

    def show(self, ctx: RequestContext):
        return self.load(ctx)

    def create(self, ctx: RequestContext):
        attributes = self.whitelist(ctx.attributes)
        sideloads = self.sideloads(ctx)
        instance = self.model(**attributes)
        ctx.instance = instance
        with translate_errors():
            supplied = {spec.name for spec, targets in sideloads if targets is not None}
            if any(name not in supplied for name in self.required_relationships):
                # let validation report the missing relationship
                instance.check()
            for spec, targets in sideloads:
                if targets is None:
                    continue
                if spec.is_to_one:
                    rel.graft(instance, spec, targets, save=False)
                else:
                    result = rel.merge(instance, spec, targets, save=False)
                    rel.raise_if_deferred(result, instance, spec)
            instance.save()
        nodeattr_server.log.info(f"Created {instance}")
        return instance

    def update(self, ctx: RequestContext):
        attributes = self.whitelist(ctx.attributes)
        instance = self.load(ctx)
        if ctx.relationships:
            nodeattr_server.log.warning(f"Ignoring relationships in update of {instance}, use the relationship endpoints")
        with translate_errors():
            for key, value in attributes.items():
                setattr(instance, key, value)
            instance.save()
        return instance

    def destroy(self, ctx: RequestContext) -> None:
        instance = self.load(ctx)
        with translate_errors():
            instance.destroy()
        nodeattr_server.log.info(f"Destroyed {instance}")

    #
    # relationship actions
    #
    def sideloads(self, ctx: RequestContext) -> List[Tuple[RelationshipSpec, Any]]:
        """
        Resolve the relationships supplied with a create request, to-one relationships come first
        so merge preconditions (e.g. a cluster) are met before to-many members are added
        """
        sideloads = []
        for name, document in (ctx.relationships or {}).items():
            try:
                spec = self.relationships[name]
            except KeyError:
                raise BadRequestError(f'{self.name} has no relationship "{name}"')
            if spec.sideload is None:
                raise BadRequestError(f"The '{name}' relationship can not be set when creating {self.name}")
            if ctx.permissions is not None:
                ctx.permissions.check(self.name, spec.sideload, ctx.role)
            if not isinstance(document, dict) or "data" not in document:
                raise BadRequestError(f"The '{name}' relationship object must contain data")
            sideloads.append((spec, resolve_targets(spec, document["data"])))
        return sorted(sideloads, key=lambda item: not item[0].is_to_one)

    def relate(self, ctx: RequestContext):
        """
        Apply the relationship verb `ctx.action` to `ctx.relationship`
        :return: the related instance(s) for the read verbs, None otherwise
        """
        spec = ctx.relationship
        spec.ensure(ctx.action)
        owner = self.load(ctx)

        if ctx.action is ToOneAction.PLUCK:
            return rel.pluck(owner, spec)
        if ctx.action is ToManyAction.FETCH:
            return rel.fetch(owner, spec)

        targets = None
        if ctx.action in (ToOneAction.GRAFT, ToManyAction.MERGE, ToManyAction.REPLACE, ToManyAction.SUBTRACT):
            targets = resolve_targets(spec, ctx.data)

        with translate_errors():
            if ctx.action is ToOneAction.GRAFT:
                rel.graft(owner, spec, targets)
            elif ctx.action is ToOneAction.PRUNE:
                rel.prune(owner, spec)
            elif ctx.action is ToManyAction.MERGE:
                rel.raise_if_deferred(rel.merge(owner, spec, targets), owner, spec)
            elif ctx.action is ToManyAction.REPLACE:
                rel.replace(owner, spec, targets)
            elif ctx.action is ToManyAction.SUBTRACT:
                rel.subtract(owner, spec, targets)
            elif ctx.action is ToManyAction.CLEAR:
                rel.clear(owner, spec)
        nodeattr_server.log.info(f"{ctx.action.value} {owner}.{spec.name}")
        return None


def resolve_target(spec: RelationshipSpec, rio):
    """
    :param rio: resource identifier object {"type": ..., "id": ...}
    :return: the target instance
    """
    if not isinstance(rio, dict):
        raise BadRequestError(f"Invalid resource identifier {rio}")
    target_id = rio.get("id")
    target_type = rio.get("type")
    if not target_id or not target_type:
        raise BadRequestError(f"Invalid resource identifier {rio}")
    if target_type != spec.target:
        raise ConflictError(f"Invalid type {target_type} != {spec.target}")
    try:
        return RESOURCE_TYPES[spec.target].resolve(target_id)
    except NotFoundError as exc:
        raise ValidationError(
            f"{spec.name} target {target_id} does not exist",
            errors=[FieldError(spec.name, f"{target_type} {target_id} does not exist", True)],
        ) from exc


def resolve_targets(spec: RelationshipSpec, data) -> Optional[Any]:
    """
    Resolve every target of a relationship payload before anything is written
    :return: an instance or None for to-one relationships, a list for to-many relationships
    """
    if spec.is_to_one:
        if data is None:
            return None
        if isinstance(data, list):
            raise BadRequestError(f"The '{spec.name}' relationship can only hold a single item")
        return resolve_target(spec, data)
    if not isinstance(data, list):
        raise BadRequestError(f"Provide a list of resource identifiers for the '{spec.name}' relationship")
    return [resolve_target(spec, rio) for rio in data]


WRITABLE_CLUSTER = (ToOneAction.PLUCK, ToOneAction.GRAFT, ToOneAction.PRUNE)
WRITABLE_NODES = (
    ToManyAction.FETCH,
    ToManyAction.MERGE,
    ToManyAction.REPLACE,
    ToManyAction.SUBTRACT,
    ToManyAction.CLEAR,
)

CLUSTERS = ResourceType(
    name="clusters",
    model=Cluster,
    fields=CLUSTER_FIELDS,
    relationships={
        "nodes": to_many("nodes", "nodes"),
        "groups": to_many("groups", "groups"),
        "cascades": to_many("cascades", None, attr="cascade_models"),
    },
)

GROUPS = ResourceType(
    name="groups",
    model=Group,
    fields=GROUP_FIELDS,
    relationships={
        "cluster": to_one("cluster", "clusters", WRITABLE_CLUSTER, sideload=ToOneAction.GRAFT),
        "nodes": to_many("nodes", "nodes", WRITABLE_NODES, requires="cluster", sideload=ToManyAction.MERGE),
        "cascades": to_many("cascades", None, attr="cascade_models"),
    },
    required_relationships=("cluster",),
)

NODES = ResourceType(
    name="nodes",
    model=Node,
    fields=NODE_FIELDS,
    relationships={
        "cluster": to_one("cluster", "clusters", WRITABLE_CLUSTER, sideload=ToOneAction.GRAFT),
        "groups": to_many("groups", "groups"),
        "cascades": to_many("cascades", None, attr="cascade_models"),
    },
    required_relationships=("cluster",),
    index_filters={"nodeattr": "name"},
)

RESOURCE_TYPES: Dict[str, ResourceType] = {resource_type.name: resource_type for resource_type in (CLUSTERS, GROUPS, NODES)}


def resource_type_of(instance) -> ResourceType:
    return RESOURCE_TYPES[instance._s_type]
