"""
Translate storage failures into the jsonapi error taxonomy

    DocumentInvalid -> ValidationError (field errors tagged when the field is a relationship)
    IntegrityError  -> ConflictError
    NoResultFound   -> NotFoundError
"""
from contextlib import contextmanager
from typing import List
from sqlalchemy import inspect as sqla_inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import NoResultFound
import nodeattr_server
from .config import is_debug
from .errors import ConflictError, FieldError, NotFoundError, ValidationError
from .models import DocumentInvalid


def format_field_errors(exc: DocumentInvalid) -> List[FieldError]:
    relations = set(sqla_inspect(type(exc.model)).relationships.keys())
    return [FieldError(field, message, field in relations) for field, messages in exc.errors.items() for message in messages]


def validation_error(exc: DocumentInvalid) -> ValidationError:
    return ValidationError(str(exc), errors=format_field_errors(exc))


@contextmanager
def translate_errors():
    """
    Wrap storage calls, jsonapi errors raised inside pass through unchanged
    """
    try:
        yield
    except DocumentInvalid as exc:
        raise validation_error(exc) from exc
    except IntegrityError as exc:
        nodeattr_server.log.warning("Integrity error: %s", exc.orig)
        detail = str(exc.orig) if is_debug() else "the document conflicts with an existing document"
        raise ConflictError(detail) from exc
    except NoResultFound as exc:
        raise NotFoundError(str(exc)) from exc
