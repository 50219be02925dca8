from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ApiError, InvalidInput, MethodNotAllowed


def _error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_content())


def install_error_handlers(app: FastAPI, body_errors: dict[str, str]) -> None:
    """
    Render every error as {"error": ..., "details"?: ...}.

    `body_errors` maps a route path to the fixed 400 message used when its
    request body is missing, not JSON, or fails validation.
    """

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = body_errors.get(request.url.path, "Invalid request body")
        return _error_response(InvalidInput(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return _error_response(MethodNotAllowed())
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})
