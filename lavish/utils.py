"""
Shared helpers used across blueprints.
"""

import re
from datetime import datetime, timezone

from lavish.errors import ValidationError

_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')


def utcnow():
    """Naive UTC timestamp, matching what the SQLite DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_client_ip(request):
    """Best-effort client address, honouring common proxy headers."""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    real_ip = request.headers.get('X-Real-IP') or request.headers.get('CF-Connecting-IP')
    if real_ip:
        return real_ip
    return request.remote_addr or 'unknown'


def json_body(request):
    """The request's JSON object; an absent or empty body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.', reason='invalid_body')
    return data


def mask_email(email):
    """jane.doe@example.com -> j***@example.com"""
    if not email or '@' not in email:
        return email
    local, _, domain = email.partition('@')
    return f'{local[:1]}***@{domain}'


def camel_to_snake(name):
    return _CAMEL_RE.sub('_', name).lower()


def isoformat(value):
    return value.isoformat() if value else None


def parse_positive_int(value, default, maximum=None):
    """Parse a query-string integer, falling back to ``default``."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


def parse_date(value):
    """Parse an ISO date/datetime query parameter; ``None`` when absent or invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
