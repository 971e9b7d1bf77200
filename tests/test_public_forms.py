from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from lavish.extensions import db
from lavish.models import AuditLog, ContactSubmission, FormSubmission, ProjectRequest
from lavish.public import services


def test_submit_form_creates_submission(client):
    r = client.post('/api/submit-form', json={
        'name': 'Meera', 'email': 'meera@example.com', 'message': 'Hello', 'type': 'enquiry',
    })
    assert r.status_code == 201
    data = r.get_json()
    submission = db.session.get(FormSubmission, data['id'])
    assert submission.type == 'enquiry'
    assert submission.status == 'new'
    assert submission.phone == ''


def test_submit_form_missing_email_inserts_nothing(client):
    r = client.post('/api/submit-form', json={'name': 'Meera', 'message': 'Hello'})
    assert r.status_code == 400
    data = r.get_json()
    assert data['error'] == 'validation_error'
    assert data['fields'] == ['email']
    assert FormSubmission.query.count() == 0


def test_submit_form_rejects_unknown_type(client):
    r = client.post('/api/submit-form', json={
        'name': 'Meera', 'email': 'meera@example.com', 'message': 'Hello', 'type': 'spam',
    })
    assert r.status_code == 400


def test_submit_form_store_failure(client, monkeypatch):
    def boom():
        raise SQLAlchemyError('connection reset')

    monkeypatch.setattr(db.session, 'commit', boom)
    r = client.post('/api/submit-form', json={'name': 'A', 'email': 'a@example.com', 'message': 'Hi'})
    assert r.status_code == 500
    assert 'connection reset' not in r.get_data(as_text=True)
    monkeypatch.undo()
    assert FormSubmission.query.count() == 0


def test_project_request_derives_fields(client):
    r = client.post('/api/project-requests', json={
        'fullName': 'Kiran',
        'email': 'kiran@example.com',
        'projectType': 'E-commerce',
        'projectTitle': 'Spice shop',
        'budget': '₹10,00,000+',
        'timeline': '2-4 weeks',
        'services': ['Design', 'Development'],
        'features': ['Payments', 'Search'],
    }, headers={'User-Agent': 'pytest'})
    assert r.status_code == 201
    request_id = r.get_json()['requestId']

    project = db.session.get(ProjectRequest, request_id)
    assert project.status == 'new'
    assert project.priority == 'urgent'
    assert project.estimated_value == 1500000
    assert project.complexity_level == 'moderate'
    assert project.follow_up_date - project.submitted_at == timedelta(days=1)
    assert project.version == 1

    audit = AuditLog.query.filter_by(action='NEW_PROJECT_REQUEST').one()
    assert audit.details['requestId'] == request_id
    assert audit.details['clientEmail'] == 'k***@example.com'


def test_project_request_requires_contact_fields(client):
    r = client.post('/api/project-requests', json={'fullName': 'Kiran', 'email': 'not-an-email',
                                                   'projectType': 'Website'})
    assert r.status_code == 400
    assert ProjectRequest.query.count() == 0


def test_contact_submission_scores_lead(client):
    r = client.post('/api/contact-submissions', json={
        'fullName': 'Neha',
        'email': 'neha@example.com',
        'message': 'We need a partner',
        'company': 'Acme',
        'jobTitle': 'Founder',
        'hasProject': True,
        'projectBudget': '₹10,00,000+',
        'projectTimeline': 'ASAP',
        'serviceInterest': ['E-commerce Solutions', 'Mobile App Development'],
        'inquiryType': 'Partnership Opportunity',
        'urgency': 'High - Within 2-3 days',
        'country': 'Singapore',
    })
    assert r.status_code == 201
    submission = db.session.get(ContactSubmission, r.get_json()['submissionId'])
    assert submission.lead_score == 100
    assert submission.priority == 'high'
    assert submission.tags == ['Has Project', 'Business Client', 'E-commerce', 'Mobile App',
                               'High Value', 'Partnership', 'International']
    assert submission.follow_up_date - submission.submitted_at == timedelta(hours=24)


def test_contact_submission_accepts_name_alias(client):
    r = client.post('/api/contact-submissions', json={'name': 'Om', 'email': 'om@example.com',
                                                      'message': 'Hi'})
    assert r.status_code == 201
    submission = db.session.get(ContactSubmission, r.get_json()['submissionId'])
    assert submission.full_name == 'Om'
    assert submission.priority == 'medium'
    assert submission.lead_score == 0


@pytest.mark.parametrize('budget, timeline, expected', [
    ('₹10,00,000+', '1-2 months', 'urgent'),
    ('₹10,00,000+', '6+ months', 'high'),
    ('₹1,00,000 - ₹2,50,000', '2-4 weeks', 'high'),
    ('₹1,00,000 - ₹2,50,000', '4-6 months', 'medium'),
    ('₹50,000 - ₹1,00,000', '4-6 months', 'low'),
])
def test_project_priority(budget, timeline, expected):
    assert services.project_priority(budget, timeline) == expected


def test_complexity_thresholds():
    assert services.complexity_level([], []) == 'simple'
    assert services.complexity_level(['a'] * 2, ['b'] * 4) == 'moderate'
    assert services.complexity_level(['a'] * 5, ['b'] * 5) == 'complex'
    assert services.complexity_level(['a'] * 6, ['b'] * 5) == 'enterprise'


def test_follow_up_defaults():
    now = datetime(2025, 1, 1)
    assert services.project_follow_up('unknown', now) == now + timedelta(days=3)
    assert services.contact_follow_up('unknown', now) == now + timedelta(hours=48)


@pytest.mark.parametrize('url', ['/api/submit-form', '/api/project-requests', '/api/contact-submissions'])
def test_non_object_body_is_rejected(client, url):
    r = client.post(url, json=[1, 2])
    assert r.status_code == 400
    data = r.get_json()
    assert data['error'] == 'validation_error'
    assert data['reason'] == 'invalid_body'


def test_contact_submission_ignores_malformed_optional_fields(client):
    r = client.post('/api/contact-submissions', json={
        'fullName': 'Ira',
        'email': 'ira@example.com',
        'message': 'Hello',
        'serviceInterest': 5,
        'projectBudget': ['₹10,00,000+'],
        'jobTitle': 42,
    })
    assert r.status_code == 201
    submission = db.session.get(ContactSubmission, r.get_json()['submissionId'])
    assert submission.service_interest == []
    assert submission.tags == []
    assert submission.lead_score == 0
