#  This file contains the jsonapi-related flask-restful "Resource" objects:
#  - CollectionAPI for the resource collections (index, create)
#  - InstanceAPI for the resource instances (show, update, destroy)
#  - RelationshipAPI for the relationship linkage (pluck, graft, prune, fetch, merge, replace, subtract, clear)
#  - RelatedAPI for the related resources (pluck, fetch)
#
#  The http_method_decorator (see api.py) wraps the http methods, commits the session
#  and formats the errors
#
# pylint: disable=redefined-builtin,invalid-name,protected-access
import re
from http import HTTPStatus
from flask import request
from flask_restful import Resource as FRResource
import nodeattr_server
from .attributes import undasherize
from .auth import derive_role
from .config import get_config
from .context import RequestContext
from .errors import BadRequestError, ConflictError, MethodNotAllowedError
from .permissions import PrimaryAction, ToManyAction, ToOneAction
from .resources import resource_type_of

FILTER_REGEX = re.compile(r"\Afilter\[(\w+)\]\Z")


#
# Formatting
#
def resource_url(instance) -> str:
    return f"{get_config('API_PREFIX')}/{instance._s_type}/{instance.jsonapi_id}"


def resource_identifier(instance):
    """
    :return: jsonapi resource identifier object, or None
    """
    if instance is None:
        return None
    return {"type": instance._s_type, "id": instance.jsonapi_id}


def resource_object(instance):
    """
    :return: jsonapi resource object, `params` is computed from the cascade
    """
    if instance is None:
        return None
    url = resource_url(instance)
    attributes = {name.replace("_", "-"): getattr(instance, name) for name in instance.jsonapi_attrs}
    relationships = {}
    for spec in resource_type_of(instance).relationships.values():
        relationship = {"links": {"self": f"{url}/relationships/{spec.name}", "related": f"{url}/{spec.name}"}}
        if spec.is_to_one:
            relationship["data"] = resource_identifier(getattr(instance, spec.model_attr))
        relationships[spec.name] = relationship
    return {
        "type": instance._s_type,
        "id": instance.jsonapi_id,
        "attributes": attributes,
        "relationships": relationships,
        "links": {"self": url},
    }


def jsonapi_format_response(data=None, links=None, meta=None):
    result = {"jsonapi": {"version": "1.0"}, "data": data}
    if links:
        result["links"] = links
    if meta:
        result["meta"] = meta
    return result


def get_jsonapi_payload() -> dict:
    """
    :return: jsonapi request payload, it must hold a "data" member
    """
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        raise BadRequestError(f"Invalid JSON Payload : {payload}")
    if "data" not in payload:
        raise BadRequestError("Request contains no data")
    return payload


class Resource(FRResource):
    """
    Superclass for the exposed endpoints
    * Collections : CollectionAPI
    * Instances : InstanceAPI
    * Relationships : RelationshipAPI, RelatedAPI

    resource_type and permissions are set on the classes generated by NodeattrAPI.expose_resource
    """

    resource_type = None
    permissions = None

    def context(self, action, **kwargs) -> RequestContext:
        """
        Derive the role of the caller and check it against the permission table
        :return: RequestContext for `action`
        """
        role = derive_role(request.headers.get("Authorization"))
        self.permissions.check(self.resource_type.name, action, role)
        return RequestContext(self.resource_type, action, role, permissions=self.permissions, **kwargs)

    def parse_resource_data(self, payload: dict):
        """
        :return: undasherized attributes and the relationships of the resource object
        """
        data = payload["data"]
        if not isinstance(data, dict):
            raise BadRequestError("Data is not a dict object")
        if data.get("type") != self.resource_type.name:
            raise ConflictError(f"Invalid type member: {data.get('type')} != {self.resource_type.name}")
        attributes = data.get("attributes") or {}
        relationships = data.get("relationships") or {}
        if not isinstance(attributes, dict) or not isinstance(relationships, dict):
            raise BadRequestError("Invalid attributes or relationships member")
        return undasherize(attributes), relationships


class CollectionAPI(Resource):
    """
    /<type>
    """

    def get(self, **kwargs):
        """
        summary : Retrieve the {type} collection
        ---
        filter[<attr>] query arguments are applied when the resource type supports them
        """
        filters = {}
        for arg, value in request.args.items():
            match = FILTER_REGEX.match(arg)
            if match:
                filters[match.group(1)] = value
        ctx = self.context(PrimaryAction.INDEX, filters=filters)
        instances = self.resource_type.index(ctx)
        data = [resource_object(instance) for instance in instances]
        links = {"self": f"{get_config('API_PREFIX')}/{self.resource_type.name}"}
        return jsonapi_format_response(data, links, {"count": len(data)}), HTTPStatus.OK

    def post(self, **kwargs):
        """
        summary : Create a {type} instance
        ---
        Client generated ids are not supported, to-one relationships in the
        request are grafted before to-many relationships are merged
        """
        ctx = self.context(PrimaryAction.CREATE)
        payload = get_jsonapi_payload()
        if isinstance(payload["data"], dict) and "id" in payload["data"]:
            nodeattr_server.log.warning(f"Client-generated ids are not allowed for {self.resource_type.name}")
        ctx.attributes, ctx.relationships = self.parse_resource_data(payload)
        instance = self.resource_type.create(ctx)
        return jsonapi_format_response(resource_object(instance)), HTTPStatus.CREATED, {"Location": resource_url(instance)}


class InstanceAPI(Resource):
    """
    /<type>/<id>
    """

    def get(self, id):
        ctx = self.context(PrimaryAction.SHOW, identifier=id)
        instance = self.resource_type.show(ctx)
        return jsonapi_format_response(resource_object(instance), {"self": resource_url(instance)}), HTTPStatus.OK

    def patch(self, id):
        ctx = self.context(PrimaryAction.UPDATE, identifier=id)
        ctx.attributes, ctx.relationships = self.parse_resource_data(get_jsonapi_payload())
        instance = self.resource_type.update(ctx)
        return jsonapi_format_response(resource_object(instance)), HTTPStatus.OK

    def delete(self, id):
        ctx = self.context(PrimaryAction.DESTROY, identifier=id)
        self.resource_type.destroy(ctx)
        return {}, HTTPStatus.NO_CONTENT


class RelationshipAPI(Resource):
    """
    /<type>/<id>/relationships/<relationship>

    http://jsonapi.org/format/#crud-updating-relationships
    The verb is derived from the http method and the payload:

        to-one  : GET => pluck, PATCH {..} => graft, PATCH null => prune
        to-many : GET => fetch, PATCH [] => clear, PATCH [..] => replace, POST => merge, DELETE => subtract
    """

    relationship = None

    def linkage(self, ctx):
        related = self.resource_type.relate(ctx)
        if self.relationship.is_to_one:
            data = resource_identifier(related)
        else:
            data = [resource_identifier(instance) for instance in related]
        return jsonapi_format_response(data, {"self": request.path}), HTTPStatus.OK

    def mutate(self, id, action):
        """
        Run the role gate for `action`, then parse the payload and apply the verb
        """
        ctx = self.context(action, identifier=id, relationship=self.relationship)
        ctx.data = get_jsonapi_payload()["data"]
        if self.relationship.is_to_one and not (ctx.data is None or isinstance(ctx.data, dict)):
            raise BadRequestError(f"The '{self.relationship.name}' relationship can only hold a single item")
        if not self.relationship.is_to_one and not isinstance(ctx.data, list):
            raise BadRequestError(f"Provide a list of resource identifiers for the '{self.relationship.name}' relationship")
        self.resource_type.relate(ctx)
        return {}, HTTPStatus.NO_CONTENT

    def get(self, id):
        action = ToOneAction.PLUCK if self.relationship.is_to_one else ToManyAction.FETCH
        return self.linkage(self.context(action, identifier=id, relationship=self.relationship))

    def patch(self, id):
        # the verb is picked from the raw payload, it is validated once the caller passed the gate
        payload = request.get_json(force=True, silent=True)
        data = payload.get("data") if isinstance(payload, dict) else None
        if self.relationship.is_to_one:
            action = ToOneAction.PRUNE if data is None else ToOneAction.GRAFT
        elif data == [] and ToManyAction.CLEAR in self.relationship.verbs:
            action = ToManyAction.CLEAR
        else:
            action = ToManyAction.REPLACE
        return self.mutate(id, action)

    def post(self, id):
        if self.relationship.is_to_one:
            raise MethodNotAllowedError(f"Use PATCH to update the '{self.relationship.name}' relationship")
        return self.mutate(id, ToManyAction.MERGE)

    def delete(self, id):
        if self.relationship.is_to_one:
            raise MethodNotAllowedError(f"Use PATCH to update the '{self.relationship.name}' relationship")
        return self.mutate(id, ToManyAction.SUBTRACT)


class RelatedAPI(Resource):
    """
    /<type>/<id>/<relationship>
    """

    relationship = None

    def get(self, id):
        action = ToOneAction.PLUCK if self.relationship.is_to_one else ToManyAction.FETCH
        ctx = self.context(action, identifier=id, relationship=self.relationship)
        related = self.resource_type.relate(ctx)
        if self.relationship.is_to_one:
            data = resource_object(related)
        else:
            data = [resource_object(instance) for instance in related]
        return jsonapi_format_response(data, {"self": request.path}), HTTPStatus.OK
