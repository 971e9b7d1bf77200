"""
Bearer tokens for the admin back-office.

Two kinds of token are supported:

- stateless: an HS256 JWT carrying the identity claims, verifiable without
  touching the store. Cannot be revoked before it expires.
- session: a random opaque value persisted in ``admin_sessions``. Verified by
  lookup and revoked by deleting the row.

Session tokens carry a fixed prefix, so :class:`TokenVerifier` can route any
inbound token to the right service whichever kind the login endpoint is
currently configured to issue.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy.exc import SQLAlchemyError

from lavish.auth.identity import Identity, KNOWN_ROLES
from lavish.errors import AuthenticationError, ConfigurationError, StoreError
from lavish.extensions import db
from lavish.models import AdminSession
from lavish.utils import utcnow

logger = logging.getLogger(__name__)

SESSION_TOKEN_PREFIX = 'lavish_'
JWT_ALGORITHM = 'HS256'

# JWT claim names
CLAIM_SUB = 'sub'
CLAIM_NAME = 'name'
CLAIM_ROLE = 'role'
CLAIM_IAT = 'iat'
CLAIM_EXP = 'exp'
CLAIM_ISS = 'iss'
CLAIM_JTI = 'jti'


def _invalid(message='Invalid or expired token'):
    return AuthenticationError(message, reason=AuthenticationError.INVALID_CREDENTIAL)


class StatelessTokenService:
    """Signed, self-contained admin tokens."""

    kind = 'stateless'

    def __init__(self, signing_key, ttl_hours=24, issuer='lavish-admin'):
        if not signing_key:
            raise ConfigurationError('TOKEN_SIGNING_KEY is not configured')
        self._signing_key = signing_key
        self.ttl = timedelta(hours=ttl_hours) if ttl_hours else None
        self.issuer = issuer

    def issue(self, identity):
        now = datetime.now(timezone.utc)
        claims = {
            CLAIM_SUB: identity.id,
            CLAIM_NAME: identity.display_name,
            CLAIM_ROLE: identity.role,
            CLAIM_IAT: int(now.timestamp()),
            CLAIM_ISS: self.issuer,
            CLAIM_JTI: secrets.token_urlsafe(16),
        }
        if self.ttl is not None:
            claims[CLAIM_EXP] = int((now + self.ttl).timestamp())
        return jwt.encode(claims, self._signing_key, algorithm=JWT_ALGORITHM)

    def verify(self, token):
        try:
            claims = jwt.decode(
                token,
                self._signing_key,
                algorithms=[JWT_ALGORITHM],
                issuer=self.issuer,
            )
        except JWTError as exc:
            logger.debug('JWT rejected: %s', exc)
            raise _invalid() from exc

        subject = claims.get(CLAIM_SUB)
        role = claims.get(CLAIM_ROLE)
        if not subject or role not in KNOWN_ROLES:
            raise _invalid('Token carries no valid role')
        return Identity(id=str(subject), display_name=claims.get(CLAIM_NAME) or str(subject), role=role)

    def revoke(self, token):
        # No denylist: a stateless token stays valid until it expires
        logger.debug('Revoke requested for a stateless token; nothing to delete')


class SessionTokenService:
    """Opaque tokens backed by a row in ``admin_sessions``."""

    kind = 'session'

    def __init__(self, resolver, ttl_hours=24):
        self.resolver = resolver
        self.ttl = timedelta(hours=ttl_hours) if ttl_hours else None

    @staticmethod
    def owns(token):
        return token.startswith(SESSION_TOKEN_PREFIX)

    def issue(self, identity):
        now = utcnow()
        token = SESSION_TOKEN_PREFIX + secrets.token_urlsafe(32)
        session = AdminSession(
            session_token=token,
            identity_id=identity.id,
            created_at=now,
            expires_at=now + self.ttl if self.ttl is not None else None,
        )
        db.session.add(session)
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(detail=str(exc), reason='session_create_failed') from exc
        return token

    def verify(self, token):
        try:
            session = AdminSession.query.filter_by(session_token=token).first()
        except SQLAlchemyError as exc:
            raise StoreError(detail=str(exc), reason='session_lookup_failed') from exc

        if session is None:
            raise _invalid()
        if session.expires_at is not None and session.expires_at <= utcnow():
            raise _invalid('Session expired')

        # Re-read the identity so role changes and disabled accounts apply at once
        identity = self.resolver.resolve(session.identity_id)
        if identity is None or identity.role not in KNOWN_ROLES:
            raise _invalid('User not found or inactive')
        return identity

    def revoke(self, token):
        """Delete the session row; unknown tokens are ignored."""
        try:
            AdminSession.query.filter_by(session_token=token).delete()
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(detail=str(exc), reason='session_delete_failed') from exc


class TokenVerifier:
    """Routes an inbound bearer token to the service that can check it."""

    def __init__(self, stateless, sessions):
        self.stateless = stateless
        self.sessions = sessions

    def service_for(self, token):
        return self.sessions if self.sessions.owns(token) else self.stateless

    def verify(self, token):
        if not token or not token.strip():
            raise AuthenticationError('No token provided',
                                      reason=AuthenticationError.MISSING_CREDENTIAL)
        token = token.strip()
        return self.service_for(token).verify(token)

    def revoke(self, token):
        token = token.strip()
        self.service_for(token).revoke(token)
