import json
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from conftest import bearer
from lavish.extensions import db
from lavish.models import AuditLog, ProjectRequest, ContactSubmission


def _update_audits():
    return AuditLog.query.filter(AuditLog.action.like('UPDATE_%')).all()


def test_patch_without_token_leaves_record_unchanged(client, project_request):
    r = client.patch(f'/api/admin/project-requests/{project_request.id}', json={'status': 'reviewed'})
    assert r.status_code == 401
    assert r.get_json()['error'] == 'unauthenticated'
    assert r.get_json()['reason'] == 'missing_credential'

    db.session.expire_all()
    assert db.session.get(ProjectRequest, project_request.id).status == 'new'
    assert _update_audits() == []


def test_patch_with_admin_token_updates_and_audits(client, admin_token, project_request):
    before = project_request.updated_at
    r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                     json={'status': 'reviewed'}, headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.get_json()['updatedFields'] == ['status']

    db.session.expire_all()
    record = db.session.get(ProjectRequest, project_request.id)
    assert record.status == 'reviewed'
    assert record.updated_at > before
    assert record.last_updated_by == 'admin'
    assert record.version == 2

    audits = _update_audits()
    assert len(audits) == 1
    assert audits[0].action == 'UPDATE_PROJECT_REQUEST'
    assert audits[0].details['requestId'] == record.id
    assert audits[0].details['updatedFields'] == ['status']
    assert audits[0].details['oldStatus'] == 'new'
    assert audits[0].details['newStatus'] == 'reviewed'
    assert audits[0].actor == 'admin'


def test_immutable_fields_are_ignored(client, admin_token, project_request):
    r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                     json={'id': 999, 'submittedAt': '2020-01-01', 'priority': 'high'},
                     headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.get_json()['updatedFields'] == ['priority']

    db.session.expire_all()
    record = db.session.get(ProjectRequest, project_request.id)
    assert record.submitted_at == datetime(2024, 1, 15, 9, 30)
    assert _update_audits()[0].details['updatedFields'] == ['priority']


def test_unchanged_values_are_not_a_mutation(client, admin_token, project_request):
    r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                     json={'status': 'new'}, headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.get_json()['message'] == 'No changes made'
    assert _update_audits() == []

    db.session.expire_all()
    assert db.session.get(ProjectRequest, project_request.id).version == 1


def test_unknown_fields_and_bad_values_rejected(client, admin_token, project_request):
    url = f'/api/admin/project-requests/{project_request.id}'
    r = client.patch(url, json={'estimatedValue': 1}, headers=bearer(admin_token))
    assert r.status_code == 400
    assert r.get_json()['fields'] == ['estimatedValue']

    r = client.patch(url, json={'status': 'teleported'}, headers=bearer(admin_token))
    assert r.status_code == 400

    r = client.patch(url, json={}, headers=bearer(admin_token))
    assert r.status_code == 400

    r = client.patch(url, json={'fullName': '   '}, headers=bearer(admin_token))
    assert r.status_code == 400
    assert _update_audits() == []


def test_missing_record_is_404(client, admin_token):
    r = client.patch('/api/admin/project-requests/4242', json={'status': 'reviewed'},
                     headers=bearer(admin_token))
    assert r.status_code == 404
    assert r.get_json()['error'] == 'not_found'


def test_stale_version_is_rejected(client, admin_token, project_request):
    url = f'/api/admin/project-requests/{project_request.id}'
    r = client.patch(url, json={'status': 'reviewing', 'version': 1}, headers=bearer(admin_token))
    assert r.status_code == 200

    r = client.patch(url, json={'status': 'quoted', 'version': 1}, headers=bearer(admin_token))
    assert r.status_code == 409
    assert r.get_json()['error'] == 'conflict'

    db.session.expire_all()
    assert db.session.get(ProjectRequest, project_request.id).status == 'reviewing'


def test_contact_submission_update(client, admin_token, contact_submission):
    r = client.patch(f'/api/admin/contact-submissions/{contact_submission.id}',
                     json={'status': 'contacted', 'notes': ['Called on Monday'], 'createdAt': 'x'},
                     headers=bearer(admin_token))
    assert r.status_code == 200
    data = r.get_json()
    assert data['submissionId'] == contact_submission.id
    assert data['updatedFields'] == ['status', 'notes']

    db.session.expire_all()
    record = db.session.get(ContactSubmission, contact_submission.id)
    assert record.status == 'contacted'
    assert record.notes == ['Called on Monday']

    audits = _update_audits()
    assert len(audits) == 1
    assert audits[0].action == 'UPDATE_CONTACT_SUBMISSION'
    assert audits[0].details['requestId'] == contact_submission.id


def test_updated_fields_follow_field_order(client, admin_token, project_request):
    body = json.dumps({'priority': 'high', 'status': 'reviewed'})
    r = client.patch(f'/api/admin/project-requests/{project_request.id}', data=body,
                     content_type='application/json', headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.get_json()['updatedFields'] == ['status', 'priority']


def test_store_failure_is_generic_500(client, admin_token, project_request, monkeypatch):
    def boom():
        raise SQLAlchemyError('disk I/O error')

    monkeypatch.setattr(db.session, 'commit', boom)
    r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                     json={'status': 'reviewed'}, headers=bearer(admin_token))
    assert r.status_code == 500
    data = r.get_json()
    assert data['error'] == 'store_error'
    assert 'detail' not in data
    assert 'disk I/O error' not in r.get_data(as_text=True)


def test_store_failure_detail_in_development(app, client, admin_token, project_request, monkeypatch):
    def boom():
        raise SQLAlchemyError('disk I/O error')

    app.config['EXPOSE_ERROR_DETAILS'] = True
    monkeypatch.setattr(db.session, 'commit', boom)
    r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                     json={'status': 'reviewed'}, headers=bearer(admin_token))
    assert r.status_code == 500
    assert 'disk I/O error' in r.get_json()['detail']


def test_audit_failure_does_not_fail_mutation(client, admin_token, project_request, monkeypatch, caplog):
    def boom(instance):
        raise SQLAlchemyError('audit table locked')

    # The update path only commits; ``add`` is used by the audit write alone
    monkeypatch.setattr(db.session, 'add', boom)
    with caplog.at_level('CRITICAL', logger='lavish.audit.logger'):
        r = client.patch(f'/api/admin/project-requests/{project_request.id}',
                         json={'status': 'reviewed'}, headers=bearer(admin_token))
    assert r.status_code == 200
    monkeypatch.undo()

    db.session.expire_all()
    assert db.session.get(ProjectRequest, project_request.id).status == 'reviewed'
    assert _update_audits() == []
    assert any('AUDIT WRITE FAILED' in message for message in caplog.messages)
