import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from context import request_id_context

logger = logging.getLogger(__name__)


class BlogError(Exception):
    """Base class for errors that map onto an HTTP status"""
    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(BlogError):
    status_code = 400
    detail = "Invalid request"


class ConflictError(ValidationError):
    status_code = 409
    detail = "Resource already exists"


class AuthenticationError(BlogError):
    status_code = 401
    detail = "Please authenticate."


class InvalidTokenError(AuthenticationError):
    detail = "Invalid authentication token"


class InvalidCredentialsError(AuthenticationError):
    # login answers 400 for both unknown email and wrong password
    status_code = 400
    detail = "Invalid email or password"


class ForbiddenError(BlogError):
    status_code = 403
    detail = "Not allowed"


class NotFoundError(BlogError):
    status_code = 404
    detail = "Not found"


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": errors})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # the request id middleware has already reset its context when this runs
    id_token = request_id_context.set(getattr(request.state, "request_id", "-"))
    try:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    finally:
        request_id_context.reset(id_token)
    return JSONResponse(status_code=500, content={"detail": BlogError.detail})


def register_exception_handlers(app: FastAPI):
    """Translate error kinds to transport status in one place"""
    app.add_exception_handler(BlogError, blog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
