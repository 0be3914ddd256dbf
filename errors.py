import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BadInput(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class StoreFailure(HTTPException):
    """The database call itself failed. The driver error is chained as __cause__."""

    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=detail)


def describe_validation_errors(errors) -> str:
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc)
        if err.get("type") == "json_invalid":
            parts.append("Invalid JSON")
        elif field:
            parts.append(f"{field}: {err.get('msg')}")
        else:
            parts.append(str(err.get("msg")))
    return "; ".join(parts) or "Invalid request body"


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = str(exc.detail)
    if exc.status_code >= 500:
        logger.error("%s %s -> %d %s: %r", request.method, request.url.path, exc.status_code, message, exc.__cause__)
    else:
        logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, message)
    return PlainTextResponse(message, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = describe_validation_errors(exc.errors())
    logger.warning("%s %s -> 400 %s", request.method, request.url.path, message)
    return PlainTextResponse(message, status_code=400)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
