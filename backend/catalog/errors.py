from typing import List, Optional

from flask import current_app, request
from werkzeug.exceptions import HTTPException

from .envelope import failure


class ConfigurationError(RuntimeError):
    """Raised when the process is started without required settings."""


class ApiError(Exception):
    status = 500
    error = 'Internal server error'

    def __init__(self, error: Optional[str] = None, status: Optional[int] = None,
                 details: Optional[List[dict]] = None):
        super().__init__(error or self.error)
        if error:
            self.error = error
        if status:
            self.status = status
        self.details = details or []


class ValidationFailed(ApiError):
    status = 400
    error = 'Validation failed'


class RateLimited(ApiError):
    status = 429
    error = 'Too many requests, please try again later'


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        return failure(exc.error, exc.status, details=exc.details)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if exc.code == 404:
            return failure('Endpoint not found', 404, path=request.path, method=request.method)
        if exc.code == 405:
            return failure('Method not allowed', 405, path=request.path, method=request.method)
        if exc.code == 413:
            current_app.logger.warning(f"[request] body too large for {request.path}")
            return failure('Request body too large', 413)
        if exc.code == 400:
            return failure('Malformed request', 400)
        return failure(exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        current_app.logger.exception(f"[unhandled] {request.method} {request.path}")
        return failure('Internal server error', 500)
