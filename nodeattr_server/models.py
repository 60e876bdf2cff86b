# -*- coding: utf-8 -*-
"""
    models.py: the Cluster, Group and Node documents and their validation rules

    The models only hold storage concerns: columns, associations, the derived
    `params` and `cascade_models` views and the `validate`/`save` cycle.
    Request handling (whitelisting, permissions, relationship verbs) lives elsewhere.
"""
# pylint: disable=no-member,too-few-public-methods
import re
from typing import Dict, List
from .server_init import DB


class DocumentInvalid(Exception):
    """
    Raised by `save` when a model fails validation,
    `errors` maps field names to a list of messages
    """

    def __init__(self, model, errors: Dict[str, List[str]]):
        self.model = model
        self.errors = errors
        summary = "; ".join(f"{field} {', '.join(messages)}" for field, messages in errors.items())
        super().__init__(f"{model.__class__.__name__} is invalid: {summary}")


group_nodes = DB.Table(
    "group_nodes",
    DB.Column("group_id", DB.Integer, DB.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    DB.Column("node_id", DB.Integer, DB.ForeignKey("nodes.id", ondelete="CASCADE"), primary_key=True),
)


class Document(DB.Model):
    """
    Attributes and behaviour shared by clusters, groups and nodes
    """

    __abstract__ = True

    _s_type = None
    # name of the to-one relationship that scopes the `name` column, used for compound ids
    _s_scope = None
    jsonapi_attrs = ("name", "level_params", "params")
    NAME_REGEX = re.compile(r"\A[A-Za-z0-9-]+\Z")

    id = DB.Column(DB.Integer, primary_key=True)
    level_params = DB.Column(DB.JSON, nullable=False, default=dict)

    def __init__(self, **kwargs):
        kwargs.setdefault("level_params", {})
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.jsonapi_id}>"

    @property
    def jsonapi_id(self) -> str:
        scope = getattr(self, self._s_scope) if self._s_scope else None
        if scope is None:
            return self.name
        return f"{scope.name}.{self.name}"

    @property
    def cascade_models(self) -> list:
        return [self]

    @property
    def params(self) -> dict:
        """
        The level_params of the cascade merged in order, later models win
        """
        params = {}
        for model in self.cascade_models:
            params.update(model.level_params or {})
        return params

    def validate(self) -> Dict[str, List[str]]:
        errors = {}
        if not self.name:
            errors.setdefault("name", []).append("can't be blank")
        elif not isinstance(self.name, str) or not self.NAME_REGEX.match(self.name):
            errors.setdefault("name", []).append("is invalid")
        if not isinstance(self.level_params, dict):
            errors.setdefault("level_params", []).append("must be an object")
        return errors

    def check(self):
        # reading relationships must not flush the pending changes before they are validated
        with DB.session.no_autoflush:
            errors = self.validate()
        if errors:
            raise DocumentInvalid(self, errors)

    def save(self):
        """
        Validate and flush the model, the session is committed at the request boundary
        """
        self.check()
        DB.session.add(self)
        DB.session.flush()
        return self

    def destroy(self):
        DB.session.delete(self)
        DB.session.flush()


class Cluster(Document):
    """
    description: top level grouping of nodes and groups
    """

    __tablename__ = "clusters"
    _s_type = "clusters"
    NAME_REGEX = re.compile(r"\A[A-Za-z0-9]+\Z")

    name = DB.Column(DB.String(255), nullable=False, unique=True)
    groups = DB.relationship("Group", back_populates="cluster", cascade="all", order_by="Group.name")
    nodes = DB.relationship("Node", back_populates="cluster", cascade="all", order_by="Node.name")


class Group(Document):
    """
    description: named set of nodes within a cluster
    """

    __tablename__ = "groups"
    __table_args__ = (DB.UniqueConstraint("cluster_id", "name"),)
    _s_type = "groups"
    _s_scope = "cluster"
    jsonapi_attrs = Document.jsonapi_attrs + ("priority",)

    name = DB.Column(DB.String(255), nullable=False)
    priority = DB.Column(DB.Integer, nullable=False, default=0)
    cluster_id = DB.Column(DB.Integer, DB.ForeignKey("clusters.id"))
    cluster = DB.relationship("Cluster", back_populates="groups")
    nodes = DB.relationship("Node", secondary=group_nodes, back_populates="groups", order_by="Node.name")

    def __init__(self, **kwargs):
        kwargs.setdefault("priority", 0)
        super().__init__(**kwargs)

    @property
    def cascade_models(self) -> list:
        return [model for model in (self.cluster, self) if model is not None]

    def validate(self) -> Dict[str, List[str]]:
        errors = super().validate()
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            errors.setdefault("priority", []).append("must be an integer")
        if self.cluster is None:
            errors.setdefault("cluster", []).append("must exist")
        else:
            foreign = sorted(node.name for node in self.nodes if node.cluster is not self.cluster)
            if foreign:
                errors.setdefault("nodes", []).append(f"must belong to cluster {self.cluster.name}: {', '.join(foreign)}")
        return errors


class Node(Document):
    """
    description: leaf entity of the inventory
    """

    __tablename__ = "nodes"
    __table_args__ = (DB.UniqueConstraint("cluster_id", "name"),)
    _s_type = "nodes"
    _s_scope = "cluster"

    name = DB.Column(DB.String(255), nullable=False)
    cluster_id = DB.Column(DB.Integer, DB.ForeignKey("clusters.id"))
    cluster = DB.relationship("Cluster", back_populates="nodes")
    groups = DB.relationship("Group", secondary=group_nodes, back_populates="nodes", order_by="Group.priority")

    @property
    def cascade_models(self) -> list:
        groups = sorted(self.groups, key=lambda group: (group.priority, group.name))
        return [model for model in (self.cluster, *groups, self) if model is not None]

    def validate(self) -> Dict[str, List[str]]:
        errors = super().validate()
        if self.cluster is None:
            errors.setdefault("cluster", []).append("must exist")
        return errors
