# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user.
# If set to debug, too much sensitive info might be shown !
#
# The exceptions will be caught in http_method_decorator and formatted, for example:
# {
#      "title": "Authorization Error: ",
#      "detail": "Authorization Error: ",
#      "code": "403"
# }
#
import traceback
from http import HTTPStatus
from typing import List, NamedTuple, Optional
from sqlalchemy.exc import DontWrapMixin
import nodeattr_server
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class FieldError(NamedTuple):
    """
    A single field complaint raised by model validation.
    `relationship` is set when `field` names a relationship of the model
    """

    field: str
    message: str
    relationship: bool = False

    @property
    def pointer(self) -> str:
        section = "relationships" if self.relationship else "attributes"
        return f"/data/{section}/{self.field.replace('_', '-')}"


class JsonapiError(Exception, DontWrapMixin):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""

    @property
    def field_errors(self) -> List[FieldError]:
        return []


class BadRequestError(JsonapiError):
    """
    This exception is raised when a malformed or disallowed payload has been received
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Bad Request: "

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        nodeattr_server.log.warning("BadRequestError: %s", message)
        self.message += message


class NotFoundError(JsonapiError):
    """
    This exception is raised when an item was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value
    message = "NotFoundError "

    def __init__(self, message="", status_code=HTTPStatus.NOT_FOUND.value):
        """
        :param message: Message to be returned in the (json) body
        :param status_code: HTTP Status code
        """
        Exception.__init__(self, message)
        self.status_code = status_code
        nodeattr_server.log.error("Not found: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class ForbiddenError(JsonapiError):
    """
    This exception is raised when the role of the caller does not permit the action
    we use FORBIDDEN(403) instead of UNAUTHORIZED(401) (old http status code descriptions were not clear)
    """

    status_code = HTTPStatus.FORBIDDEN.value
    message = "Authorization Error: "

    def __init__(self, message="", status_code=HTTPStatus.FORBIDDEN.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        nodeattr_server.log.error("ForbiddenError: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class MethodNotAllowedError(JsonapiError):
    """
    This exception is raised when a relationship does not implement the requested verb
    """

    status_code = HTTPStatus.METHOD_NOT_ALLOWED.value
    message = "Method Not Allowed: "

    def __init__(self, message=""):
        Exception.__init__(self, message)
        nodeattr_server.log.warning("MethodNotAllowedError: %s", message)
        self.message += message


class ConflictError(JsonapiError):
    """
    This exception is raised when a uniqueness or referential constraint would be violated
    """

    status_code = HTTPStatus.CONFLICT.value
    message = "Conflict: "

    def __init__(self, message="", status_code=HTTPStatus.CONFLICT.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        nodeattr_server.log.warning("ConflictError: %s", message)
        self.message += message


class AmbiguousIdentifierError(ConflictError):
    """
    More than one entity matches an identifier
    """


class DeferredMergeError(ConflictError):
    """
    Members were added to a to-many relationship before its owner met the merge precondition
    """


class ValidationError(JsonapiError):
    """
    This exception is raised when the storage layer rejects a model (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY.value
    message = "Validation Error: "

    def __init__(self, message="", errors: Optional[List[FieldError]] = None, status_code=HTTPStatus.UNPROCESSABLE_ENTITY.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        self._field_errors = list(errors or [])
        nodeattr_server.log.warning("ValidationError: %s", message)
        self.message += message

    @property
    def field_errors(self) -> List[FieldError]:
        return self._field_errors


class GenericError(JsonapiError):
    """
    This exception is raised when an error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value  # 500
    message = "Generic Error: "

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        nodeattr_server.log.error("Generic Error: %s", message)
        if is_debug():
            nodeattr_server.log.debug(traceback.format_exc(120))
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG
