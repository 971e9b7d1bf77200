"""
Admin auth extension

Builds the credential verifier, token services and audit logger once per
application from its config, and hands them to request handlers through
``admin_auth``. Component code receives its settings through constructors
and never reads the environment itself.
"""

import logging

from flask import current_app, g

from lavish.audit import AuditLogger, LoginAttemptLogger
from lavish.auth.credentials import CredentialVerifier, build_strategies
from lavish.auth.tokens import StatelessTokenService, SessionTokenService, TokenVerifier
from lavish.errors import ConfigurationError

logger = logging.getLogger(__name__)

TOKEN_STRATEGIES = ('stateless', 'session')


class AuthComponents:
    """Per-application bundle of auth collaborators."""

    def __init__(self, credentials, stateless, sessions, audit, token_strategy, attempts=None):
        self.credentials = credentials
        self.stateless = stateless
        self.sessions = sessions
        self.tokens = TokenVerifier(stateless, sessions)
        self.audit = audit
        self.attempts = attempts or LoginAttemptLogger()
        self.token_strategy = token_strategy

    @property
    def issuer(self):
        return self.sessions if self.token_strategy == 'session' else self.stateless

    def login(self, identifier, secret, ip_address=None):
        """Verify a credential pair and issue a token. ``None`` on rejection."""
        identity = self.credentials.verify(identifier, secret, ip_address=ip_address)
        if identity is None:
            return None, None
        return identity, self.issuer.issue(identity)


class AdminAuth:
    """Flask extension holding the :class:`AuthComponents`."""

    extension_name = 'lavish_admin_auth'

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        config = app.config
        strategy = config.get('TOKEN_STRATEGY', 'stateless')
        if strategy not in TOKEN_STRATEGIES:
            raise ConfigurationError(f'Unknown TOKEN_STRATEGY: {strategy}')

        try:
            strategies = build_strategies(config.get('CREDENTIAL_STRATEGIES', ('static', 'store')), config)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        credentials = CredentialVerifier(strategies)
        # Raises ConfigurationError when the signing key is missing
        stateless = StatelessTokenService(
            config.get('TOKEN_SIGNING_KEY'),
            ttl_hours=config.get('TOKEN_TTL_HOURS', 24),
            issuer=config.get('TOKEN_ISSUER', 'lavish-admin'),
        )
        sessions = SessionTokenService(credentials, ttl_hours=config.get('SESSION_TTL_HOURS', 24))

        app.extensions[self.extension_name] = AuthComponents(
            credentials=credentials,
            stateless=stateless,
            sessions=sessions,
            audit=AuditLogger(),
            attempts=LoginAttemptLogger(),
            token_strategy=strategy,
        )
        app.before_request(self._reset_identity)
        logger.debug('Admin auth configured: token strategy=%s, credential strategies=%s',
                     strategy, [s.name for s in strategies])

    @staticmethod
    def _reset_identity():
        # g outlives the request when an app context was already pushed
        g.pop('admin_identity', None)

    @property
    def components(self):
        return current_app.extensions[self.extension_name]


admin_auth = AdminAuth()
