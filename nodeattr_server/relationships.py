"""
Relationship declarations and the relationship verbs

to-one  : pluck (read), graft (assign), prune (clear)
to-many : fetch (read), merge (add), replace (set), subtract (remove), clear (empty)

The write verbs receive targets that have already been resolved, so a bad
identifier can never leave a relationship half updated. Each write saves the
owner once.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional
import nodeattr_server
from .errors import DeferredMergeError, MethodNotAllowedError
from .permissions import Action, ToManyAction, ToOneAction


class Cardinality(str, Enum):
    TO_ONE = "to-one"
    TO_MANY = "to-many"


class MergeResult(str, Enum):
    APPLIED = "applied"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class RelationshipSpec:
    """
    :param name: json:api relationship name
    :param target: name of the target resource type
    :param attr: model attribute holding the relationship
    :param requires: to-one relationship that must be set on the owner before `merge`
    :param sideload: the verb applied when the relationship is supplied with a create request
    """

    name: str
    cardinality: Cardinality
    target: str
    verbs: FrozenSet[Action]
    attr: Optional[str] = None
    requires: Optional[str] = None
    sideload: Optional[Action] = None

    @property
    def model_attr(self) -> str:
        return self.attr or self.name.replace("-", "_")

    @property
    def is_to_one(self) -> bool:
        return self.cardinality is Cardinality.TO_ONE

    def ensure(self, verb: Action) -> None:
        if verb not in self.verbs:
            raise MethodNotAllowedError(f'"{self.name}" does not support {verb.value}')


def to_one(name, target, verbs=(ToOneAction.PLUCK,), **kwargs) -> RelationshipSpec:
    return RelationshipSpec(name, Cardinality.TO_ONE, target, frozenset(verbs), **kwargs)


def to_many(name, target, verbs=(ToManyAction.FETCH,), **kwargs) -> RelationshipSpec:
    return RelationshipSpec(name, Cardinality.TO_MANY, target, frozenset(verbs), **kwargs)


#
# to-one verbs
#
def pluck(owner, spec: RelationshipSpec):
    return getattr(owner, spec.model_attr)


def graft(owner, spec: RelationshipSpec, target, save=True):
    setattr(owner, spec.model_attr, target)
    if save:
        owner.save()
    return owner


def prune(owner, spec: RelationshipSpec, save=True):
    setattr(owner, spec.model_attr, None)
    if save:
        owner.save()
    return owner


#
# to-many verbs
#
def fetch(owner, spec: RelationshipSpec) -> list:
    return list(getattr(owner, spec.model_attr))


def merge(owner, spec: RelationshipSpec, targets: Iterable, save=True) -> MergeResult:
    """
    Add `targets` to the relationship, members that are already present are skipped
    :return: MergeResult.DEFERRED without touching the relationship when the `requires` relationship is not set
    """
    if spec.requires and getattr(owner, spec.requires) is None:
        nodeattr_server.log.info("Deferring merge into %s.%s: no %s", owner, spec.name, spec.requires)
        return MergeResult.DEFERRED
    members = getattr(owner, spec.model_attr)
    for target in _unique(targets):
        if target not in members:
            members.append(target)
    if save:
        owner.save()
    return MergeResult.APPLIED


def replace(owner, spec: RelationshipSpec, targets: Iterable, save=True):
    setattr(owner, spec.model_attr, _unique(targets))
    if save:
        owner.save()
    return owner


def subtract(owner, spec: RelationshipSpec, targets: Iterable, save=True):
    """
    Remove `targets` from the relationship, targets that aren't members are ignored
    """
    removed = _unique(targets)
    remaining = [member for member in getattr(owner, spec.model_attr) if member not in removed]
    setattr(owner, spec.model_attr, remaining)
    if save:
        owner.save()
    return owner


def clear(owner, spec: RelationshipSpec, save=True):
    setattr(owner, spec.model_attr, [])
    if save:
        owner.save()
    return owner


def raise_if_deferred(result: MergeResult, owner, spec: RelationshipSpec) -> None:
    if result is MergeResult.DEFERRED:
        raise DeferredMergeError(f"{owner._s_type} must have a {spec.requires} before {spec.name} can be added")


def _unique(targets: Iterable) -> List:
    result = []
    for target in targets:
        if target not in result:
            result.append(target)
    return result
