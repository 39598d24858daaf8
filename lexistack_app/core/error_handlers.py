"""
Error Handlers for LexiStack

Provides:
- Custom exception classes
- Consistent error response format
- Flask error handlers
"""

from typing import Any, Dict, Optional

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException


class LexiStackError(Exception):
    """Base exception class for LexiStack."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(LexiStackError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(LexiStackError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class AuthenticationError(LexiStackError):
    """No authenticated user."""

    def __init__(self, message: str = 'Authentication required'):
        super().__init__(
            message=message,
            code='UNAUTHENTICATED',
            status_code=401
        )


class AuthorizationError(LexiStackError):
    """Access denied."""

    def __init__(self, message: str = 'Access denied'):
        super().__init__(
            message=message,
            code='UNAUTHORIZED',
            status_code=403
        )


class ConfigurationError(LexiStackError):
    """A required setting (API key, endpoint) is missing."""

    def __init__(self, message: str = 'Service is not configured', setting: str = None):
        super().__init__(
            message=message,
            code='NOT_CONFIGURED',
            status_code=503,
            details={'setting': setting} if setting else None
        )


class ExternalServiceError(LexiStackError):
    """A third-party service call failed."""

    def __init__(self, message: str = 'External service failed', service: str = None, code: str = 'EXTERNAL_SERVICE_ERROR'):
        super().__init__(
            message=message,
            code=code,
            status_code=502,
            details={'service': service} if service else None
        )


class DictionaryLookupError(ExternalServiceError):
    """The dictionary service could not be queried."""

    def __init__(self, message: str = 'Dictionary lookup failed'):
        super().__init__(message=message, service='dictionary', code='LOOKUP_FAILED')


class ExtractionError(ExternalServiceError):
    """The generative service returned nothing usable."""

    def __init__(self, message: str = 'Vocabulary extraction failed'):
        super().__init__(message=message, service='gemini', code='EXTRACTION_FAILED')


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def register_error_handlers(app) -> None:
    """Render LexiStack and HTTP errors as JSON."""

    @app.errorhandler(LexiStackError)
    def handle_lexistack_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return error_response(
            error.description or error.name,
            code=error.name.upper().replace(' ', '_'),
            status_code=error.code or 500,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        current_app.logger.error(f"Unhandled error: {error}", exc_info=True)
        return error_response('An unexpected error occurred. Please try again later.', code='INTERNAL_ERROR', status_code=500)
