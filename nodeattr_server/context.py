from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from .auth import Role


@dataclass
class RequestContext:
    """
    Per request values handed from the http layer to the resource types:
    the caller role, the action, the path identifier and the parsed payload.
    `instance` is filled in once the identifier has been resolved.
    """

    resource_type: Any
    action: Any
    role: Role
    permissions: Any = None
    identifier: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    relationships: Dict[str, Any] = field(default_factory=dict)
    relationship: Any = None
    data: Any = None
    filters: Dict[str, str] = field(default_factory=dict)
    instance: Any = None
