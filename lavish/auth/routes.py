"""
Auth Routes

Admin login (credential -> bearer token), logout (session revocation) and
token verification.
"""

import logging

from flask import request, jsonify

from lavish.audit import AuditAction
from lavish.auth import auth_bp
from lavish.auth.decorators import get_bearer_token, authenticate_request
from lavish.auth.service import admin_auth
from lavish.errors import AuthenticationError, ValidationError
from lavish.utils import get_client_ip, json_body

logger = logging.getLogger(__name__)


def _first(data, *keys):
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


@auth_bp.route('/login', methods=['POST'])
def login():
    """Exchange an identifier + secret for a bearer token.

    Every attempt lands in ``security_logs``, whatever its outcome.
    """
    data = json_body(request)
    identifier = _first(data, 'identifier', 'username', 'email')
    secret = _first(data, 'secret', 'password')

    auth = admin_auth.components
    ip_address = get_client_ip(request)
    user_agent = request.headers.get('User-Agent', '')

    missing = [name for name, value in (('identifier', identifier), ('secret', secret)) if not value]
    if missing:
        auth.attempts.record(identifier, False, ip_address, user_agent, failure_reason='Missing credentials')
        raise ValidationError('Identifier and secret are required.', fields=missing)

    identifier = identifier.strip()
    identity, token = auth.login(identifier, secret, ip_address=ip_address)

    if identity is None:
        logger.warning('Failed admin login from %s', ip_address)
        auth.attempts.record(identifier, False, ip_address, user_agent, failure_reason='Invalid credentials')
        raise AuthenticationError('Invalid credentials', reason=AuthenticationError.INVALID_CREDENTIAL)

    auth.attempts.record(identifier, True, ip_address, user_agent)

    auth.audit.record(
        AuditAction.ADMIN_LOGIN,
        {'identityId': identity.id, 'tokenType': auth.issuer.kind},
        actor=identity.display_name,
        source='admin_panel',
        ip_address=ip_address,
    )
    logger.info('Admin %s logged in', identity.display_name)

    return jsonify({
        'success': True,
        'token': token,
        'tokenType': auth.issuer.kind,
        'identity': identity.to_dict(),
    }), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Revoke a session token. Revoking an unknown token is not an error."""
    data = json_body(request)
    token = _first(data, 'token', 'sessionToken') or get_bearer_token()
    if not token:
        raise ValidationError('Session token is required.', fields=['token'])

    auth = admin_auth.components
    try:
        identity = auth.tokens.verify(token)
    except AuthenticationError:
        identity = None

    auth.tokens.revoke(token)

    if identity is not None:
        auth.audit.record(
            AuditAction.ADMIN_LOGOUT,
            {'identityId': identity.id},
            actor=identity.display_name,
            source='admin_panel',
            ip_address=get_client_ip(request),
        )

    return jsonify({'success': True, 'message': 'Logout successful'}), 200


@auth_bp.route('/verify', methods=['GET'])
def verify():
    """Report who the bearer token belongs to."""
    identity = authenticate_request()
    return jsonify({'success': True, 'valid': True, 'identity': identity.to_dict()}), 200
