"""
Map domain errors onto HTTP responses
"""
from fastapi import HTTPException

from techmate.core.errors import (
    GenerationError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    PipelineBusyError,
    TechMateError,
    TranscriptionError,
    ValidationError,
    DeviceAccessError,
)


def error_detail(error: TechMateError) -> dict:
    detail = {
        "type": type(error).__name__,
        "title": error.title,
        "message": error.message,
    }
    if isinstance(error, ValidationError):
        detail["missing_fields"] = error.missing_fields
    return detail


def to_http_exception(error: TechMateError) -> HTTPException:
    if isinstance(error, NotFoundError):
        status_code = 404
    elif isinstance(error, ValidationError):
        status_code = 422
    elif isinstance(error, (PipelineBusyError, InvalidTransitionError, DeviceAccessError)):
        status_code = 409
    elif isinstance(error, GenerationError):
        status_code = error.status_code if error.status_code in (402, 429) else 502
    elif isinstance(error, TranscriptionError):
        status_code = 502
    elif isinstance(error, PersistenceError):
        status_code = 503
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=error_detail(error))
