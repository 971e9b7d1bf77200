"""
Error Taxonomy

Every failure raised by a component is collapsed into one of these kinds at
the HTTP boundary. The JSON body always carries the kind (``error``) and a
short ``reason`` so callers can tell an unauthenticated request apart from a
forbidden one without relying on the status code alone.
"""

import logging

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    error = 'internal_error'
    default_message = 'Internal server error'

    def __init__(self, message=None, reason=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.reason = reason or self.error

    def to_dict(self):
        return {
            'success': False,
            'error': self.error,
            'reason': self.reason,
            'message': self.message,
        }


class ValidationError(AppError):
    """Missing or malformed request fields."""
    status_code = 400
    error = 'validation_error'
    default_message = 'Invalid request'

    def __init__(self, message=None, fields=None, reason=None):
        super().__init__(message, reason=reason or 'invalid_fields')
        self.fields = list(fields or [])

    def to_dict(self):
        data = super().to_dict()
        if self.fields:
            data['fields'] = self.fields
        return data


class AuthenticationError(AppError):
    """Missing or invalid bearer credential."""
    status_code = 401
    error = 'unauthenticated'
    default_message = 'Authentication required'

    MISSING_CREDENTIAL = 'missing_credential'
    INVALID_CREDENTIAL = 'invalid_credential'


class AuthorizationError(AppError):
    """Valid credential, insufficient role."""
    status_code = 403
    error = 'forbidden'
    default_message = 'Admin access required'


class NotFoundError(AppError):
    status_code = 404
    error = 'not_found'
    default_message = 'Record not found'


class ConflictError(AppError):
    """Stale ``version`` on an update."""
    status_code = 409
    error = 'conflict'
    default_message = 'Record was modified by someone else'


class StoreError(AppError):
    """The underlying store call failed."""
    status_code = 500
    error = 'store_error'
    default_message = 'Internal server error'

    def __init__(self, message=None, detail=None, reason=None):
        super().__init__(message, reason=reason)
        self.detail = detail

    def to_dict(self):
        data = super().to_dict()
        # Details only leave the process in development configuration
        if self.detail and current_app.config.get('EXPOSE_ERROR_DETAILS'):
            data['detail'] = self.detail
        return data


class AuditWriteError(AppError):
    """Audit append failed after a committed mutation. Never sent to clients."""
    error = 'audit_write_failed'


class ConfigurationError(RuntimeError):
    """Fatal misconfiguration detected while building the application."""


def register_error_handlers(app):
    """Render every error as JSON."""

    @app.errorhandler(AppError)
    def handle_app_error(exc):
        if isinstance(exc, AuthenticationError):
            logger.info('Rejected unauthenticated request: %s', exc.reason)
        elif isinstance(exc, AuthorizationError):
            logger.warning('Rejected forbidden request: %s', exc.reason)
        elif isinstance(exc, StoreError):
            logger.error('Store failure: %s', exc.detail or exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        body = {
            'success': False,
            'error': exc.name.lower().replace(' ', '_'),
            'reason': exc.name.lower().replace(' ', '_'),
            'message': exc.description,
        }
        return jsonify(body), exc.code
