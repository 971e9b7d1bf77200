"""
Provision a persisted back-office account.

    python scripts/make_admin.py admin@example.com 's3cret-pass' --name "Site Admin"

The default ``production`` config needs ``TOKEN_SIGNING_KEY`` in the
environment, like the server does. Pass ``--config development`` to use the
development signing key against the local database.
"""
import argparse
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lavish import create_app
from lavish.auth.credentials import provision_admin
from lavish.auth.identity import KNOWN_ROLES, ADMIN_ROLE
from lavish.config import Config, DevelopmentConfig
from lavish.errors import AppError, ConfigurationError

CONFIGS = {
    'production': Config,
    'development': DevelopmentConfig,
}


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create or update an admin account')
    parser.add_argument('email')
    parser.add_argument('password')
    parser.add_argument('--name', dest='display_name')
    parser.add_argument('--role', default=ADMIN_ROLE, choices=sorted(KNOWN_ROLES))
    parser.add_argument('--config', default='production', choices=sorted(CONFIGS))
    args = parser.parse_args(argv)

    try:
        app = create_app(CONFIGS[args.config])
    except ConfigurationError as exc:
        print(f'Error: {exc}. Set TOKEN_SIGNING_KEY or pass --config development.')
        return 1

    with app.app_context():
        try:
            record, created = provision_admin(args.email, args.password,
                                              display_name=args.display_name, role=args.role)
        except AppError as exc:
            print(f'Error: {exc.message}')
            return 1

        print('New admin account created' if created else 'Existing admin account updated')
        print(f'  email: {record.email}  role: {record.role}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
