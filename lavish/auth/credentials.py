"""
Credential Verifier

Turns a submitted identifier + secret into an :class:`Identity`. Identity
sources are pluggable strategies tried in order; the first one that
recognises the pair wins. A rejection is always ``None`` and never says
which half of the pair was wrong.
"""

import hmac
import logging

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash, check_password_hash

from lavish.auth.identity import Identity, ADMIN_ROLE, KNOWN_ROLES
from lavish.errors import StoreError, ValidationError
from lavish.extensions import db
from lavish.models import AdminCredential
from lavish.utils import utcnow

logger = logging.getLogger(__name__)


class StaticCredentialStrategy:
    """Bootstrap admin configured in-process (works before any record exists)."""

    name = 'static'

    def __init__(self, username, password):
        self.username = username or ''
        self.password = password or ''

    def authenticate(self, identifier, secret, ip_address=None):
        if not self.username or not self.password:
            return None
        # Compare both halves so timing does not reveal which one failed
        user_ok = hmac.compare_digest(identifier.encode(), self.username.encode())
        secret_ok = hmac.compare_digest(secret.encode(), self.password.encode())
        if user_ok and secret_ok:
            return self._identity()
        return None

    def resolve(self, identity_id):
        if self.username and identity_id == self.username:
            return self._identity()
        return None

    def _identity(self):
        return Identity(id=self.username, display_name=self.username, role=ADMIN_ROLE)


class StoreCredentialStrategy:
    """Admin accounts persisted in ``admin_credentials``."""

    name = 'store'

    def authenticate(self, identifier, secret, ip_address=None):
        email = identifier.strip().lower()
        try:
            record = AdminCredential.query.filter_by(email=email).first()
        except SQLAlchemyError as exc:
            raise StoreError(detail=str(exc), reason='credential_lookup_failed') from exc

        if record is None or not record.is_active:
            return None
        if not check_password_hash(record.password_hash, secret):
            return None

        record.last_login = utcnow()
        record.last_login_ip = ip_address
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(detail=str(exc), reason='credential_update_failed') from exc

        return self._identity(record)

    def resolve(self, identity_id):
        if not str(identity_id).isdigit():
            return None
        try:
            record = db.session.get(AdminCredential, int(identity_id))
        except SQLAlchemyError as exc:
            raise StoreError(detail=str(exc), reason='credential_lookup_failed') from exc
        if record is None or not record.is_active:
            return None
        return self._identity(record)

    @staticmethod
    def _identity(record):
        return Identity(id=str(record.id), display_name=record.display_name, role=record.role)


class CredentialVerifier:
    """Ordered list of identity sources."""

    def __init__(self, strategies):
        self.strategies = list(strategies)

    def verify(self, identifier, secret, ip_address=None):
        """Return the matching :class:`Identity` or ``None``."""
        # Fail fast, no store lookups for incomplete input
        if not identifier or not secret:
            return None
        if not isinstance(identifier, str) or not isinstance(secret, str):
            return None

        for strategy in self.strategies:
            identity = strategy.authenticate(identifier, secret, ip_address=ip_address)
            if identity is not None:
                logger.debug('Credential accepted by %s strategy', strategy.name)
                return identity
        return None

    def resolve(self, identity_id):
        """Re-read an identity by id, e.g. for a persisted session."""
        for strategy in self.strategies:
            identity = strategy.resolve(identity_id)
            if identity is not None:
                return identity
        return None


def build_strategies(names, config):
    """Instantiate strategies from their configured names."""
    strategies = []
    for name in names:
        if name == StaticCredentialStrategy.name:
            strategies.append(StaticCredentialStrategy(config.get('ADMIN_USERNAME'),
                                                       config.get('ADMIN_PASSWORD')))
        elif name == StoreCredentialStrategy.name:
            strategies.append(StoreCredentialStrategy())
        else:
            raise ValueError(f'Unknown credential strategy: {name}')
    return strategies


def provision_admin(email, password, display_name=None, role=ADMIN_ROLE):
    """Create or update a persisted admin account. Returns ``(record, created)``."""
    email = (email or '').strip().lower()
    if not email or '@' not in email:
        raise ValidationError('A valid email address is required.', fields=['email'])
    if not password or len(password) < 8:
        raise ValidationError('Password must be at least 8 characters long.', fields=['password'])
    if role not in KNOWN_ROLES:
        raise ValidationError(f'Unknown role: {role}', fields=['role'])

    record = AdminCredential.query.filter_by(email=email).first()
    created = record is None
    if created:
        record = AdminCredential(email=email)
        db.session.add(record)

    record.password_hash = generate_password_hash(password)
    record.display_name = display_name or record.display_name or email.split('@')[0]
    record.role = role
    record.status = 'active'

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError(detail=str(exc), reason='provision_failed') from exc

    logger.info('%s admin account %s', 'Created' if created else 'Updated', email)
    return record, created
