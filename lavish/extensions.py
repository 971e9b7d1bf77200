"""
Flask Extensions

The admin auth extension lives in ``lavish.auth.service`` next to the
components it wires together.
"""

from flask_sqlalchemy import SQLAlchemy

# Database instance
db = SQLAlchemy()
