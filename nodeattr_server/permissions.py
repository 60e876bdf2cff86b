"""
Per resource type and per action role tables

Three tables exist: primary actions, to-one relationship actions and to-many relationship actions.
The defaults below are merged with the overrides of each resource type once, when the api is created.
"""
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Union
import nodeattr_server
from .auth import Role
from .errors import ForbiddenError


class PrimaryAction(str, Enum):
    INDEX = "index"
    SHOW = "show"
    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"


class ToOneAction(str, Enum):
    PLUCK = "pluck"
    PRUNE = "prune"
    GRAFT = "graft"


class ToManyAction(str, Enum):
    FETCH = "fetch"
    CLEAR = "clear"
    REPLACE = "replace"
    MERGE = "merge"
    SUBTRACT = "subtract"


Action = Union[PrimaryAction, ToOneAction, ToManyAction]

READERS = frozenset({Role.USER, Role.ADMIN})
ADMINS = frozenset({Role.ADMIN})

# Resource roles
DEFAULT_ROLES = {
    PrimaryAction.INDEX: READERS,
    PrimaryAction.SHOW: READERS,
    PrimaryAction.CREATE: ADMINS,
    PrimaryAction.UPDATE: ADMINS,
    PrimaryAction.DESTROY: ADMINS,
}

# To-one relationship roles
DEFAULT_HAS_ONE_ROLES = {
    ToOneAction.PLUCK: READERS,
    ToOneAction.PRUNE: ADMINS,
    ToOneAction.GRAFT: ADMINS,
}

# To-many relationship roles
DEFAULT_HAS_MANY_ROLES = {
    ToManyAction.FETCH: READERS,
    ToManyAction.CLEAR: ADMINS,
    ToManyAction.REPLACE: ADMINS,
    ToManyAction.MERGE: ADMINS,
    ToManyAction.SUBTRACT: ADMINS,
}

# one table per action category
DEFAULT_TABLES = {
    PrimaryAction: DEFAULT_ROLES,
    ToOneAction: DEFAULT_HAS_ONE_ROLES,
    ToManyAction: DEFAULT_HAS_MANY_ROLES,
}


class PermissionTable:
    """
    Immutable (resource type, action category, action) -> authorized roles lookup
    """

    def __init__(self, resource_types: Iterable) -> None:
        """
        :param resource_types: objects with a `name` and a `role_overrides` mapping of action to roles
        """
        table = {}
        for resource_type in resource_types:
            tables = {category: dict(defaults) for category, defaults in DEFAULT_TABLES.items()}
            for action, allowed in resource_type.role_overrides.items():
                tables[type(action)][action] = frozenset(Role(role) for role in allowed)
            table[resource_type.name] = MappingProxyType({category: MappingProxyType(roles) for category, roles in tables.items()})
        self._table: Mapping[str, Mapping[type, Mapping[Action, frozenset]]] = MappingProxyType(table)

    def roles(self, resource_name: str, action: Action) -> frozenset:
        try:
            return self._table[resource_name][type(action)][action]
        except KeyError:
            return frozenset()

    def is_allowed(self, resource_name: str, action: Action, role: Role) -> bool:
        return role in self.roles(resource_name, action)

    def check(self, resource_name: str, action: Action, role: Role) -> None:
        """
        :raises ForbiddenError: `role` may not perform `action` on `resource_name`
        """
        if not self.is_allowed(resource_name, action, role):
            raise ForbiddenError(f'role "{role.value}" may not {action.value} {resource_name}')
        nodeattr_server.log.debug("%s granted %s on %s", role.value, action.value, resource_name)
