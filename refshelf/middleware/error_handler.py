"""Error handlers: every failure is rendered in the API's status envelope."""

import traceback
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..auth.errors import AuthError
from ..utils.logging import get_logger

logger = get_logger("middleware.error_handler")


def _phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def error_response(
    request: Request,
    status_code: int,
    message: str,
    exc: Exception | None = None,
    debug: bool = False,
) -> JSONResponse:
    """Build the ``{"status": {"code", "message"}}`` body for a failed request.

    Unexpected 500s hide their message unless ``debug`` is on. Every 5xx is
    logged. Deliberate statuses such as 503 keep the message they were raised
    with.
    """
    request_id = getattr(request.state, "request_id", None)
    if status_code >= 500:
        logger.error(
            "request_failed",
            status_code=status_code,
            error=str(exc) if exc else message,
            request_id=request_id,
            path=str(request.url.path),
            exc_info=exc is not None,
        )

    public_message = _phrase(500) if (status_code == 500 and not debug) else message
    content = {"status": {"code": status_code, "message": public_message or _phrase(status_code)}}
    if debug and exc is not None:
        content["error_details"] = {
            "type": type(exc).__name__,
            "message": str(exc),
            "request_id": request_id,
            "trace": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        }
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI, debug: bool = False) -> None:
    """Register the envelope error handlers on the app."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        response = error_response(request, exc.status_code, exc.message, exc, debug)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else _phrase(exc.status_code)
        if exc.status_code == 404 and message == "Not Found":
            message = "API endpoint not found"
        return error_response(request, exc.status_code, message, exc, debug)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            message = "Invalid JSON provided."
        else:
            fields = sorted({str(err["loc"][-1]) for err in errors if err.get("loc")})
            message = f"Missing required fields: {', '.join(fields)}." if fields else "Bad Request"
        return error_response(request, 400, message, exc, debug)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        return error_response(request, 500, "Internal Server Error", exc, debug)
