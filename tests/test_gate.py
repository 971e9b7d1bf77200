from flask import jsonify

from conftest import bearer, login
from lavish.auth.decorators import admin_required, current_identity
from lavish.auth.service import admin_auth
from lavish.extensions import db
from lavish.models import ProjectRequest


def test_missing_and_invalid_tokens_are_unauthenticated(client, project_request):
    url = f'/api/admin/project-requests/{project_request.id}'

    r = client.patch(url, json={'status': 'reviewed'})
    assert r.status_code == 401
    assert r.get_json()['reason'] == 'missing_credential'

    r = client.patch(url, json={'status': 'reviewed'}, headers={'Authorization': 'Basic abc'})
    assert r.status_code == 401
    assert r.get_json()['reason'] == 'missing_credential'

    r = client.patch(url, json={'status': 'reviewed'}, headers=bearer('forged.token.value'))
    assert r.status_code == 401
    assert r.get_json()['error'] == 'unauthenticated'
    assert r.get_json()['reason'] == 'invalid_credential'


def test_viewer_is_forbidden_from_mutations(client, viewer_token, project_request):
    r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                     json={'status': 'reviewed'}, headers=bearer(viewer_token))
    assert r.status_code == 403
    assert r.get_json()['error'] == 'forbidden'

    db.session.expire_all()
    assert db.session.get(ProjectRequest, project_request.id).status == 'new'


def test_viewer_can_list(client, viewer_token, project_request):
    r = client.get('/api/admin/project-requests', headers=bearer(viewer_token))
    assert r.status_code == 200
    assert r.get_json()['pagination']['total'] == 1


def test_gate_verifies_once_per_request(app, client, monkeypatch):
    @admin_required
    @admin_required
    def double_gated():
        return jsonify(current_identity().to_dict())

    # Routes must be added before the app serves its first request
    app.add_url_rule('/api/test/double-gated', 'double_gated', double_gated)
    admin_token = login(client).get_json()['token']

    calls = []
    verifier = admin_auth.components.tokens
    original = verifier.verify

    def counting_verify(token):
        calls.append(token)
        return original(token)

    monkeypatch.setattr(verifier, 'verify', counting_verify)
    r = client.get('/api/test/double-gated', headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.get_json()['role'] == 'admin'
    assert len(calls) == 1


def test_unknown_route_is_json_404(client):
    r = client.get('/api/nothing-here')
    assert r.status_code == 404
    assert r.get_json()['success'] is False
