"""Uniform response envelope and exception translation for the HTTP edge.

    success → {"success": true, "data": ...}
    failure → {"success": false, "error": {"code", "message", "details"?}}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from marketplace.config import is_production
from marketplace.errors import InternalError, NotFound, ServiceError, ValidationFailed

logger = structlog.get_logger(__name__)


def ok(data=None) -> dict:
    return {"success": True, "data": jsonable_encoder(data)}


def _failure(error: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=error.http_status, content={"success": False, "error": error.to_dict()})


async def _service_error(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info("Request rejected", path=request.url.path, code=exc.code, message=exc.message)
    return _failure(exc)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]} for err in exc.errors()
    ]
    return _failure(ValidationFailed("Invalid request", {"errors": errors}))


async def _domain_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _failure(ValidationFailed("Invalid data", {"errors": exc.messages}))


async def _invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _failure(ValidationFailed(str(exc)))


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _failure(NotFound(str(exc)))


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", path=request.url.path)
    message = "An unexpected error occurred" if is_production() else str(exc)
    return _failure(InternalError(message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ValidationError, _domain_validation_error)
    app.add_exception_handler(InvalidOperationError, _invalid_operation)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(Exception, _unexpected)
