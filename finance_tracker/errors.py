from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = SERVER_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token."


class MalformedHeader(Unauthenticated):
    default_message = 'Invalid token format. Expected "Bearer <token>"'


class InvalidCredentials(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"


class InternalError(AppError):
    pass


def _error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("request_failed", method=request.method, path=request.url.path,
        error=type(exc).__name__, detail=exc.message)

    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc.status_code, exc.message, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        # drop the "body"/"query" prefix, keep the field path
        loc = [str(part) for part in err.get("loc", ())[1:]]
        field = ".".join(loc) or "request"
        problems.append(f"{field}: {err.get('msg')}")

    message = "Invalid request: " + "; ".join(problems)
    logger.warning("request_invalid", method=request.method, path=request.url.path, detail=message)
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database_error", method=request.method, path=request.url.path,
                 error=type(exc).__name__, exc_info=exc)
    return _error_response(InternalError.status_code, InternalError.default_message)


async def catch_unhandled_errors(request: Request, call_next):
    # runs inside ServerErrorMiddleware, so nothing is re-raised to the server
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error("unhandled_error", method=request.method, path=request.url.path,
                     error=type(exc).__name__, exc_info=exc)
        return _error_response(InternalError.status_code, InternalError.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.middleware("http")(catch_unhandled_errors)
