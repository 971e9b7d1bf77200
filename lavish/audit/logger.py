"""
Audit Logger

Audit records are written after the mutation they describe has been
committed. A failed audit write therefore cannot undo the mutation: it is
rolled back, reported loudly to the operational log and swallowed, so the
caller still receives the successful response.
"""

import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from lavish.errors import AuditWriteError
from lavish.extensions import db
from lavish.models import AuditLog, LoginAttempt
from lavish.models.security import LOGIN_ATTEMPT
from lavish.utils import utcnow

logger = logging.getLogger(__name__)

# Keys whose values never belong in an audit record
REDACTED_KEYS = frozenset({'password', 'secret', 'token', 'sessionToken', 'password_hash'})


class AuditAction(str, Enum):
    """Known audit kinds. ``record`` accepts any string, so this list can grow freely."""
    ADMIN_LOGIN = 'ADMIN_LOGIN'
    ADMIN_LOGOUT = 'ADMIN_LOGOUT'
    UPDATE_PROJECT_REQUEST = 'UPDATE_PROJECT_REQUEST'
    UPDATE_CONTACT_SUBMISSION = 'UPDATE_CONTACT_SUBMISSION'
    NEW_PROJECT_REQUEST = 'NEW_PROJECT_REQUEST'
    NEW_CONTACT_SUBMISSION = 'NEW_CONTACT_SUBMISSION'
    NEW_FORM_SUBMISSION = 'NEW_FORM_SUBMISSION'


def _redact(details):
    return {
        key: ('[redacted]' if key in REDACTED_KEYS else value)
        for key, value in (details or {}).items()
    }


class AuditLogger:

    def record(self, action, details, actor, source, ip_address=None):
        """Append an audit record. Returns the row, or ``None`` if the write failed."""
        action = action.value if isinstance(action, AuditAction) else str(action)
        entry = AuditLog(
            action=action,
            details=_redact(details),
            actor=actor or 'unknown',
            source=source,
            ip_address=ip_address,
            timestamp=utcnow(),
        )
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            error = AuditWriteError(f'Audit write failed for {action}', reason=str(exc))
            logger.critical('AUDIT WRITE FAILED (record lost): action=%s actor=%s details=%s error=%s',
                            action, actor, entry.details, error.reason)
            return None
        return entry


class LoginAttemptLogger:
    """Writes one ``security_logs`` row per login attempt; never raises."""

    def record(self, identifier, success, ip_address=None, user_agent='', failure_reason=None):
        entry = LoginAttempt(
            type=LOGIN_ATTEMPT,
            email=(identifier or 'unknown')[:255],
            success=success,
            failure_reason=failure_reason,
            ip_address=ip_address,
            user_agent=(user_agent or '')[:255],
            timestamp=utcnow(),
        )
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error('Login attempt not recorded: identifier=%s success=%s error=%s',
                         identifier, success, exc)
            return None
        return entry
