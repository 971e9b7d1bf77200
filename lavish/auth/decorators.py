"""
Admin Decorators

Admin access is bearer-token based: every protected route reads the token
from the ``Authorization`` header, never from a cookie session.
"""

from functools import wraps

from flask import g, request

from lavish.auth.identity import ADMIN_ROLE
from lavish.auth.service import admin_auth
from lavish.errors import AuthenticationError, AuthorizationError


def get_bearer_token():
    """Token from ``Authorization: Bearer <token>``, or ``None``."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def current_identity():
    """Identity resolved by the gate for this request."""
    return g.get('admin_identity')


def authenticate_request():
    """Resolve the caller's identity once per request."""
    identity = current_identity()
    if identity is not None:
        return identity

    token = get_bearer_token()
    if token is None:
        raise AuthenticationError('No token provided',
                                  reason=AuthenticationError.MISSING_CREDENTIAL)
    identity = admin_auth.components.tokens.verify(token)
    g.admin_identity = identity
    return identity


def roles_required(*roles):
    """Decorator to ensure the request carries a valid token with one of ``roles``.

    - no token or an invalid token -> 401 ``unauthenticated``
    - valid token, role not allowed -> 403 ``forbidden``
    """
    allowed = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            identity = authenticate_request()
            if identity.role not in allowed:
                raise AuthorizationError(reason='forbidden')
            return f(*args, **kwargs)
        return wrapper
    return decorator


admin_required = roles_required(ADMIN_ROLE)
