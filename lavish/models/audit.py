"""
Audit Log Model
"""

from lavish.extensions import db
from lavish.utils import utcnow, isoformat


class AuditLog(db.Model):
    """Append-only record of a privileged action"""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(64), nullable=False, index=True)
    details = db.Column(db.JSON, nullable=False, default=dict)
    actor = db.Column(db.String(120), nullable=False, index=True)
    source = db.Column(db.String(64), nullable=False)
    ip_address = db.Column(db.String(64))
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'action': self.action,
            'details': self.details or {},
            'actor': self.actor,
            'source': self.source,
            'ipAddress': self.ip_address,
            'timestamp': isoformat(self.timestamp),
        }

    def __repr__(self):
        return f'<AuditLog {self.action} by {self.actor}>'
