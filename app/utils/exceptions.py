import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.config import settings

logger = logging.getLogger(__name__)


class ServiceError(HTTPException):
    """HTTP error carrying a machine-readable kind next to the message"""
    status_code = 500
    kind = "system_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(status_code=self.status_code, detail={"kind": self.kind, "message": message})


class NotFoundError(ServiceError):
    status_code = 404
    kind = "not_found"


class AlreadyExistsError(ServiceError):
    status_code = 409
    kind = "already_exists"


class InvalidError(ServiceError):
    status_code = 400
    kind = "invalid"


class ForbiddenError(ServiceError):
    status_code = 403
    kind = "forbidden"


class SystemFailureError(ServiceError):
    status_code = 500
    kind = "system_error"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Store failure on {request.method} {request.url.path}")
        message = str(exc) if settings.debug else "Internal server error"
        return JSONResponse(status_code=500, content={"detail": {"kind": "system_error", "message": message}})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": {
                "kind": "invalid",
                "message": "Request validation failed",
                "errors": jsonable_encoder(exc.errors()),
            }},
        )
