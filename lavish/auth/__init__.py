"""
Auth Blueprint

Admin login, logout and token verification. Admin access is bearer-token
based and separate from anything the public site does.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from lavish.auth import routes  # noqa: E402, F401
