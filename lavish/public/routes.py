"""
Public Routes

Form endpoints for the contact and start-project pages.
"""

import logging

from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from lavish.audit import AuditAction
from lavish.auth.service import admin_auth
from lavish.errors import ValidationError, StoreError
from lavish.extensions import db
from lavish.models import FormSubmission, ProjectRequest, ContactSubmission
from lavish.public import public_bp
from lavish.public import services
from lavish.utils import get_client_ip, json_body, mask_email, utcnow

logger = logging.getLogger(__name__)


def _text(data, key, default=''):
    value = data.get(key)
    if value is None or isinstance(value, (list, dict)):
        return default
    return str(value).strip()


def _list(data, key):
    value = data.get(key)
    return value if isinstance(value, list) else []


def _require(data, fields):
    """Raise ValidationError naming every missing field."""
    missing = [field for field in fields if not _text(data, field)]
    if missing:
        raise ValidationError(', '.join(missing) + ' required', fields=missing,
                              reason='missing_fields')
    email = _text(data, 'email')
    if 'email' in fields and '@' not in email:
        raise ValidationError('Please provide a valid email address.', fields=['email'])


def _save(record):
    try:
        db.session.add(record)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Could not store %s', type(record).__name__)
        raise StoreError('Failed to submit form', detail=str(exc), reason='insert_failed') from exc


@public_bp.route('/submit-form', methods=['POST'])
def submit_form():
    """Generic contact / enquiry form."""
    data = json_body(request)
    _require(data, ('name', 'email', 'message'))

    form_type = _text(data, 'type', 'contact')
    if form_type not in FormSubmission.TYPES:
        raise ValidationError(f'Unknown form type: {form_type}', fields=['type'])

    now = utcnow()
    submission = FormSubmission(
        type=form_type,
        name=_text(data, 'name'),
        email=_text(data, 'email'),
        phone=_text(data, 'phone'),
        company=_text(data, 'company'),
        service=_text(data, 'service'),
        budget=_text(data, 'budget'),
        message=_text(data, 'message'),
        status='new',
        created_at=now,
        updated_at=now,
    )
    _save(submission)

    admin_auth.components.audit.record(
        AuditAction.NEW_FORM_SUBMISSION,
        {'requestId': submission.id, 'type': form_type, 'clientEmail': mask_email(submission.email)},
        actor='public',
        source='api',
        ip_address=get_client_ip(request),
    )
    return jsonify({'success': True, 'message': 'Form submitted successfully', 'id': submission.id}), 201


@public_bp.route('/project-requests', methods=['POST'])
def submit_project_request():
    """Start-project form."""
    data = json_body(request)
    _require(data, ('fullName', 'email', 'projectType'))

    budget = _text(data, 'budget')
    timeline = _text(data, 'timeline')
    services_wanted = _list(data, 'services')
    features = _list(data, 'features')
    now = utcnow()

    project = ProjectRequest(
        full_name=_text(data, 'fullName'),
        email=_text(data, 'email'),
        phone=_text(data, 'phone'),
        company=_text(data, 'company'),
        project_type=_text(data, 'projectType'),
        project_title=_text(data, 'projectTitle'),
        project_description=_text(data, 'projectDescription'),
        services=services_wanted,
        features=features,
        platforms=_list(data, 'platforms'),
        timeline=timeline,
        budget=budget,
        start_date=_text(data, 'startDate'),
        design_preferences=_text(data, 'designPreferences'),
        has_existing_website=bool(data.get('hasExistingWebsite')),
        current_website=_text(data, 'currentWebsite'),
        inspiration=_text(data, 'inspiration'),
        additional_requirements=_text(data, 'additionalRequirements'),
        status='new',
        priority=services.project_priority(budget, timeline),
        estimated_value=services.estimated_value(budget),
        complexity_level=services.complexity_level(services_wanted, features),
        follow_up_date=services.project_follow_up(timeline, now),
        notes=[],
        source='website',
        ip_address=get_client_ip(request),
        user_agent=request.headers.get('User-Agent', '')[:255],
        submitted_at=now,
        updated_at=now,
    )
    _save(project)

    admin_auth.components.audit.record(
        AuditAction.NEW_PROJECT_REQUEST,
        {
            'requestId': project.id,
            'projectType': project.project_type,
            'budget': project.budget,
            'clientEmail': mask_email(project.email),
            'estimatedValue': project.estimated_value,
        },
        actor='public',
        source='api',
        ip_address=project.ip_address,
    )
    return jsonify({
        'message': 'Project request submitted successfully',
        'requestId': project.id,
        'status': 'received',
    }), 201


@public_bp.route('/contact-submissions', methods=['POST'])
def submit_contact():
    """Detailed contact form."""
    data = json_body(request)
    if not _text(data, 'fullName') and _text(data, 'name'):
        data = dict(data, fullName=data.get('name'))
    _require(data, ('fullName', 'email', 'message'))

    urgency = _text(data, 'urgency', 'medium') or 'medium'
    inquiry_type = _text(data, 'inquiryType', 'general') or 'general'
    now = utcnow()

    submission = ContactSubmission(
        full_name=_text(data, 'fullName'),
        email=_text(data, 'email'),
        phone=_text(data, 'phone'),
        company=_text(data, 'company'),
        job_title=_text(data, 'jobTitle'),
        website=_text(data, 'website'),
        inquiry_type=inquiry_type,
        service_interest=_list(data, 'serviceInterest'),
        urgency=urgency,
        subject=_text(data, 'subject'),
        message=_text(data, 'message'),
        has_project=bool(data.get('hasProject')),
        project_budget=_text(data, 'projectBudget'),
        project_timeline=_text(data, 'projectTimeline'),
        country=_text(data, 'country'),
        city=_text(data, 'city'),
        status='new',
        priority=services.contact_priority(urgency, inquiry_type),
        follow_up_date=services.contact_follow_up(urgency, now),
        notes=[],
        source='website',
        ip_address=get_client_ip(request),
        user_agent=request.headers.get('User-Agent', '')[:255],
        submitted_at=now,
        updated_at=now,
    )
    submission.lead_score = services.lead_score(submission)
    submission.tags = services.contact_tags(submission)
    _save(submission)

    admin_auth.components.audit.record(
        AuditAction.NEW_CONTACT_SUBMISSION,
        {
            'requestId': submission.id,
            'inquiryType': inquiry_type,
            'urgency': urgency,
            'clientEmail': mask_email(submission.email),
            'leadScore': submission.lead_score,
            'hasProject': submission.has_project,
        },
        actor='public',
        source='api',
        ip_address=submission.ip_address,
    )
    return jsonify({
        'message': 'Contact form submitted successfully',
        'submissionId': submission.id,
        'status': 'received',
    }), 201
