"""
Security Log Model

Every admin login attempt, successful or not, lands here. Kept apart from
``audit_logs`` so a rejected login never shows up as a privileged action.
"""

from lavish.extensions import db
from lavish.utils import utcnow, isoformat

LOGIN_ATTEMPT = 'login_attempt'


class LoginAttempt(db.Model):
    """One admin login attempt"""
    __tablename__ = 'security_logs'

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(32), nullable=False, default=LOGIN_ATTEMPT, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    success = db.Column(db.Boolean, nullable=False, default=False)
    failure_reason = db.Column(db.String(120))
    ip_address = db.Column(db.String(64), index=True)
    user_agent = db.Column(db.String(255), default='')
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'email': self.email,
            'success': self.success,
            'failureReason': self.failure_reason,
            'ip': self.ip_address,
            'userAgent': self.user_agent,
            'timestamp': isoformat(self.timestamp),
        }

    def __repr__(self):
        return f'<LoginAttempt {self.email} success={self.success}>'
