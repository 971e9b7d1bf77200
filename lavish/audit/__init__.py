"""
Audit Package

Append-only record of privileged actions, plus the login attempt log.
"""

from lavish.audit.logger import AuditAction, AuditLogger, LoginAttemptLogger

__all__ = ['AuditAction', 'AuditLogger', 'LoginAttemptLogger']
