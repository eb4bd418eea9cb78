import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class SnapBoardError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.__class__.__name__


class ValidationFailure(SnapBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class PayloadTooLarge(ValidationFailure):
    status_code = 413
    default_message = "File too large."


class NotFound(SnapBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class Forbidden(SnapBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have access to this resource."


class Conflict(SnapBoardError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict."

    def __init__(self, message: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(message, {"reason": reason} if reason else None)
        self.reason = reason


class UpstreamFetchFailure(SnapBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Could not retrieve the image from the given URL."


class StorageFailure(SnapBoardError):
    default_message = "Failed to store the image."


def error_body(kind: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"kind": kind, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


async def snapboard_exception_handler(request: Request, exc: SnapBoardError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.kind, exc.message, exc.details),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=error_body("ValidationFailure", "Validation error.", {"errors": jsonable_errors(exc)}),
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("DatabaseError", "Database error occurred."),
    )


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SnapBoardError, snapboard_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
