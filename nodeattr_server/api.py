# flask_restful API subclass
from collections import OrderedDict
from http import HTTPStatus
from functools import wraps
from typing import Callable, Iterable, Optional
import werkzeug
from flask import Flask
from flask_restful import Api as FRApiBase, abort
from flask_restful.representations.json import output_json
import nodeattr_server
from .errors import GenericError, JsonapiError
from .jsonapi import CollectionAPI, InstanceAPI, RelatedAPI, RelationshipAPI
from .permissions import PermissionTable
from .resources import RESOURCE_TYPES, ResourceType
from .server_init import DB, NodeattrServer
from .translator import translate_errors

HTTP_METHODS = ["GET", "POST", "PATCH", "DELETE"]
DEFAULT_REPRESENTATIONS = [("application/vnd.api+json", output_json)]


class NodeattrAPI(FRApiBase):
    """
    Subclass of the flask_restful API class where we add the expose_resource method
    this method creates the API endpoints for a resource type and its relationships
    """

    def __init__(
        self,
        app: Flask,
        prefix: str = "",
        resource_types: Optional[Iterable[ResourceType]] = None,
        **kwargs,
    ) -> None:
        """
        http://jsonapi.org/format/#content-negotiation-servers
        Servers MUST send all JSON:API data in response documents with
        the header Content-Type: application/vnd.api+json without any media type parameters.
        """
        kwargs["default_mediatype"] = "application/vnd.api+json"
        app_db = kwargs.pop("app_db", None)
        NodeattrServer(app, prefix=prefix, app_db=app_db)
        super().__init__(app, prefix=prefix, **kwargs)
        self.representations = OrderedDict(DEFAULT_REPRESENTATIONS)
        if resource_types is None:
            resource_types = RESOURCE_TYPES.values()
        self.resource_types = list(resource_types)
        # the role tables are resolved once, the resources only look them up
        self.permissions = PermissionTable(self.resource_types)
        for resource_type in self.resource_types:
            self.expose_resource(resource_type)

    def expose_resource(self, resource_type: ResourceType, **properties) -> None:
        """This method creates the API url endpoints for a resource type
        :param resource_type: ResourceType record, e.g. nodeattr_server.resources.NODES
        :param properties: additional class properties

        creates classes of the form

        @api_decorator
        class nodes_API(CollectionAPI):
            resource_type = NODES
            permissions = <PermissionTable>
        """
        properties["resource_type"] = resource_type
        properties["permissions"] = self.permissions
        name = resource_type.name

        url = f"/{name}"
        api_class = api_decorator(type(f"{name}_API", (CollectionAPI,), dict(properties)))
        nodeattr_server.log.info(f"Exposing {name} on {url}")
        self.add_resource(api_class, url, endpoint=f"api.{name}", methods=["GET", "POST"])

        url = f"/{name}/<string:id>"
        api_class = api_decorator(type(f"{name}_API_i", (InstanceAPI,), dict(properties)))
        nodeattr_server.log.info(f"Exposing {name} instances on {url}")
        self.add_resource(api_class, url, endpoint=f"api.{name}Id", methods=["GET", "PATCH", "DELETE"])

        for spec in resource_type.relationships.values():
            self.expose_relationship(resource_type, spec, dict(properties))

    def expose_relationship(self, resource_type: ResourceType, spec, properties: dict) -> None:
        """
        Expose the linkage endpoint /<type>/<id>/relationships/<name>
        and the related resource endpoint /<type>/<id>/<name>
        """
        name = resource_type.name
        properties["relationship"] = spec

        url = f"/{name}/<string:id>/relationships/{spec.name}"
        api_class = api_decorator(type(f"{name}_X_{spec.name}_API", (RelationshipAPI,), dict(properties)))
        nodeattr_server.log.info(f"Exposing relationship {spec.name} on {url}")
        self.add_resource(api_class, url, endpoint=f"api.{name}.{spec.name}", methods=HTTP_METHODS)

        url = f"/{name}/<string:id>/{spec.name}"
        api_class = api_decorator(type(f"{name}_X_{spec.name}_API_r", (RelatedAPI,), dict(properties)))
        self.add_resource(api_class, url, endpoint=f"api.{name}.{spec.name}.related", methods=["GET"])


def api_decorator(cls):
    """Decorator for the API views:
        - add generic exception handling and the request boundary commit

    :param cls: The class that will be decorated (e.g. CollectionAPI, RelationshipAPI)
    :return: decorated class
    """
    for method_name in ["get", "post", "patch", "delete"]:
        method = getattr(cls, method_name, None)
        if not method:
            continue
        setattr(cls, method_name, http_method_decorator(method))
    return cls


def format_errors(exc: JsonapiError, status_code: int, title: str) -> list:
    """
    :return: jsonapi error objects, one per field error for validation errors
    """
    field_errors = exc.field_errors if isinstance(exc, JsonapiError) else []
    if not field_errors:
        detail = getattr(exc, "detail", title)
        return [dict(title=title, detail=detail, code=str(status_code), status=str(status_code))]
    return [
        dict(
            title=title,
            detail=f"{error.field} {error.message}",
            code=str(status_code),
            status=str(status_code),
            source={"pointer": error.pointer},
        )
        for error in field_errors
    ]


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the supported jsonapi HTTP methods (get, post, patch, delete)
    - commit the database
    - convert all exceptions to jsonapi error objects

    This method will be called for all requests
    :param fun:
    :return: wrapped fun
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        """Wrap the method and perform error handling
        :param *args:
        :param **kwargs:
        :return: result of the wrapped method
        """
        exception = None
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        message = ""
        try:
            result = fun(*args, **kwargs)
            with translate_errors():
                DB.session.commit()
            return result

        except JsonapiError as exc:
            nodeattr_server.log.debug(exc, exc_info=True)
            exception = exc

        except werkzeug.exceptions.HTTPException as exc:
            status_code = exc.code
            message = exc.description
            nodeattr_server.log.error(message)

        except Exception as exc:
            nodeattr_server.log.exception(exc)
            exception = GenericError(str(exc))

        status_code = getattr(exception, "status_code", status_code)
        title = getattr(exception, "message", message)

        DB.session.rollback()
        abort(status_code, errors=format_errors(exception, status_code, title))

    return method_wrapper
