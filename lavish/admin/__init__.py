"""
Admin Blueprints

Back-office API for project requests and contact submissions, plus the
security dashboard. Every route sits behind the bearer-token gate.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)
security_bp = Blueprint('security', __name__)

from lavish.admin import routes  # noqa: E402, F401
