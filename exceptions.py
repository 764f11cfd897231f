import logging
from contextlib import contextmanager
from typing import Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error with a status code, rendered to clients as ``{key: message}``."""

    status_code = 500
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str, key: str = "error"):
        super().__init__(message)
        self.message = message
        self.key = key


class ValidationError(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class Unauthorized(ApiError):
    status_code = 401
    headers = {"WWW-Authenticate": "Bearer"}


class Conflict(ApiError):
    status_code = 400


class DuplicateEmail(Conflict):
    def __init__(self):
        super().__init__("Email already exists", key="message")


class InternalError(ApiError):
    status_code = 500


@contextmanager
def internal_error(message: str, key: str = "error"):
    """Turn any unexpected failure inside the block into an InternalError."""
    try:
        yield
    except ApiError:
        raise
    except Exception:
        logger.exception(message)
        raise InternalError(message, key=key)


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={exc.key: exc.message}, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = "Invalid request body"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    return JSONResponse(status_code=400, content={"error": message})
