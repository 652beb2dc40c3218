"""Exception handlers producing the ``{"status": "error", ...}`` envelope."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from greedoc.core.config import settings

logger = logging.getLogger(__name__)

# Leading loc entries that say where a value came from, not which field it is
_LOCATIONS = ("body", "query", "path", "header", "cookie")


def _field_name(loc) -> str:
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in _LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)


def _clean_message(msg: str) -> str:
    # pydantic prefixes custom ValueError messages with "Value error, "
    return msg[len("Value error, "):] if msg.startswith("Value error, ") else msg


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": _field_name(err.get("loc", ())), "message": _clean_message(err.get("msg", ""))}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"status": "error", "message": "Validation failed", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Internal server error" if settings.is_production else str(exc)
        return JSONResponse(status_code=500, content={"status": "error", "message": message})
