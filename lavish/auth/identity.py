"""
Admin identity and roles.
"""

from dataclasses import dataclass

ADMIN_ROLE = 'admin'
VIEWER_ROLE = 'viewer'

# Any other role claim is treated as an invalid credential
KNOWN_ROLES = frozenset({ADMIN_ROLE, VIEWER_ROLE})


@dataclass(frozen=True)
class Identity:
    """Who a verified credential belongs to."""
    id: str
    display_name: str
    role: str

    @property
    def is_admin(self):
        return self.role == ADMIN_ROLE

    def to_dict(self):
        return {'id': self.id, 'displayName': self.display_name, 'role': self.role}
