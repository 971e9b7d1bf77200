"""
Admin Credential and Session Models
"""

from lavish.extensions import db
from lavish.utils import utcnow, isoformat


class AdminCredential(db.Model):
    """Persisted back-office account. Secrets are stored hashed only."""
    __tablename__ = 'admin_credentials'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(32), nullable=False, default='admin')
    status = db.Column(db.String(32), nullable=False, default='active')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    last_login = db.Column(db.DateTime)
    last_login_ip = db.Column(db.String(64))

    @property
    def is_active(self):
        return self.status == 'active'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'displayName': self.display_name,
            'role': self.role,
            'status': self.status,
            'createdAt': isoformat(self.created_at),
            'lastLogin': isoformat(self.last_login),
        }

    def __repr__(self):
        return f'<AdminCredential {self.email}>'


class AdminSession(db.Model):
    """Server-side session backing a stateful bearer token."""
    __tablename__ = 'admin_sessions'

    id = db.Column(db.Integer, primary_key=True)
    session_token = db.Column(db.String(128), unique=True, nullable=False, index=True)
    identity_id = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime)

    def __repr__(self):
        return f'<AdminSession identity:{self.identity_id}>'
