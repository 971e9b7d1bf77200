"""
Public Blueprint

Lead-generation forms posted from the public website. No authentication.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__)

from lavish.public import routes  # noqa: E402, F401
