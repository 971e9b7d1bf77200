from datetime import datetime

import pytest

from lavish import create_app
from lavish.config import TestConfig
from lavish.extensions import db
from lavish.auth.credentials import provision_admin
from lavish.models import ProjectRequest, ContactSubmission


class SessionTestConfig(TestConfig):
    TOKEN_STRATEGY = 'session'


def _make_app(config_class):
    app = create_app(config_class)
    ctx = app.app_context()
    ctx.push()
    return app, ctx


@pytest.fixture()
def app():
    app, ctx = _make_app(TestConfig)
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture()
def session_app():
    app, ctx = _make_app(SessionTestConfig)
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def session_client(session_app):
    return session_app.test_client()


def login(client, identifier='admin', secret='lavish2025'):
    return client.post('/api/auth/login', json={'identifier': identifier, 'secret': secret})


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture()
def admin_token(client):
    r = login(client)
    assert r.status_code == 200
    return r.get_json()['token']


@pytest.fixture()
def viewer_account(app):
    record, _ = provision_admin('viewer@example.com', 'viewer-pass-1', display_name='Viewer', role='viewer')
    return record


@pytest.fixture()
def viewer_token(client, viewer_account):
    r = login(client, 'viewer@example.com', 'viewer-pass-1')
    assert r.status_code == 200
    return r.get_json()['token']


@pytest.fixture()
def project_request(app):
    stamp = datetime(2024, 1, 15, 9, 30)
    record = ProjectRequest(
        full_name='Asha Rao',
        email='asha@example.com',
        project_type='Website',
        project_title='Bakery storefront',
        budget='₹1,00,000 - ₹2,50,000',
        timeline='2-4 months',
        status='new',
        priority='medium',
        submitted_at=stamp,
        updated_at=stamp,
    )
    db.session.add(record)
    db.session.commit()
    return record


@pytest.fixture()
def contact_submission(app):
    stamp = datetime(2024, 1, 15, 9, 30)
    record = ContactSubmission(
        full_name='Ravi Kumar',
        email='ravi@example.com',
        subject='Need an app',
        message='Please call me back.',
        status='new',
        priority='medium',
        submitted_at=stamp,
        updated_at=stamp,
    )
    db.session.add(record)
    db.session.commit()
    return record
