"""
Models Package

Exports all models for easy importing.
"""

from lavish.models.admin import AdminCredential, AdminSession
from lavish.models.audit import AuditLog
from lavish.models.security import LoginAttempt
from lavish.models.submissions import ProjectRequest, ContactSubmission, FormSubmission

__all__ = [
    'AdminCredential',
    'AdminSession',
    'AuditLog',
    'LoginAttempt',
    'ProjectRequest',
    'ContactSubmission',
    'FormSubmission',
]
