"""
Configuration settings for the Lavish website back-office
"""
import os


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Flask application configuration"""

    # Flask secret key (not used for admin auth, which is token based)
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'

    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    INSTANCE_DIR = os.path.join(basedir, 'instance')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(INSTANCE_DIR, 'lavish.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Signing key for stateless admin tokens. No default: the factory
    # refuses to start without it.
    TOKEN_SIGNING_KEY = os.environ.get('TOKEN_SIGNING_KEY')
    TOKEN_ISSUER = 'lavish-admin'

    # 'stateless' (signed JWT) or 'session' (persisted random token)
    TOKEN_STRATEGY = os.environ.get('TOKEN_STRATEGY') or 'stateless'
    TOKEN_TTL_HOURS = int(os.environ.get('TOKEN_TTL_HOURS') or 24)
    SESSION_TTL_HOURS = int(os.environ.get('SESSION_TTL_HOURS') or 24)

    # Identity sources tried in order on login
    CREDENTIAL_STRATEGIES = ('static', 'store')

    # Bootstrap admin (static strategy)
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'lavish2025'

    # Show store error details to API callers (development only)
    EXPOSE_ERROR_DETAILS = _env_flag('EXPOSE_ERROR_DETAILS')

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    # Admin listings
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100


class DevelopmentConfig(Config):
    """Local development configuration"""
    DEBUG = True
    EXPOSE_ERROR_DETAILS = True
    LOG_LEVEL = 'DEBUG'
    TOKEN_SIGNING_KEY = os.environ.get('TOKEN_SIGNING_KEY') or 'dev-token-signing-key'


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    TOKEN_SIGNING_KEY = 'test-token-signing-key'
    TOKEN_STRATEGY = 'stateless'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'lavish2025'
    EXPOSE_ERROR_DETAILS = False
    LOG_LEVEL = 'DEBUG'
