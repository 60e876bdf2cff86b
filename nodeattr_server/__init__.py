# flake8: noqa: F401
#
# Nodeattr Server: clusters, groups and nodes exposed as a json:api with role based access control
#
from .server_init import DB, log, NodeattrServer
from .errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    GenericError,
    NotFoundError,
    ValidationError,
)
from .models import Cluster, Group, Node
from .auth import Role, Token, derive_role
from .permissions import PermissionTable
from .resources import RESOURCE_TYPES, ResourceType
from .api import NodeattrAPI

__version__ = "1.0.0"
__description__ = "Nodeattr Server: json:api inventory of clusters, groups and nodes"

__all__ = (
    "__version__",
    "__description__",
    #
    "NodeattrAPI",
    "NodeattrServer",
    # db:
    "DB",
    "Cluster",
    "Group",
    "Node",
    # access control:
    "Role",
    "Token",
    "derive_role",
    "PermissionTable",
    # resources:
    "RESOURCE_TYPES",
    "ResourceType",
    # Errors:
    "BadRequestError",
    "ConflictError",
    "ForbiddenError",
    "GenericError",
    "NotFoundError",
    "ValidationError",
)
