"""
Admin Routes

Listing is open to any back-office role; every mutation requires ``admin``.
"""

from flask import current_app, jsonify, request

from lavish.admin import admin_bp, security_bp
from lavish.admin.services import (
    update_record, list_records, list_audit_logs, list_login_attempts, security_analytics,
    summarize_project_requests, summarize_contact_submissions,
)
from lavish.audit import AuditAction
from lavish.auth.decorators import admin_required, roles_required, current_identity
from lavish.auth.identity import ADMIN_ROLE, VIEWER_ROLE
from lavish.auth.service import admin_auth
from lavish.models import ProjectRequest, ContactSubmission
from lavish.utils import get_client_ip, parse_positive_int

staff_required = roles_required(ADMIN_ROLE, VIEWER_ROLE)


def _page_limits():
    return current_app.config['DEFAULT_PAGE_SIZE'], current_app.config['MAX_PAGE_SIZE']


# -----------------------------------------------------------------------------
# Project requests
# -----------------------------------------------------------------------------

@admin_bp.route('/project-requests', methods=['GET'])
@staff_required
def list_project_requests():
    default_limit, max_limit = _page_limits()
    result = list_records(ProjectRequest, request.args, default_limit, max_limit)
    return jsonify({
        'projectRequests': result['items'],
        'pagination': result['pagination'],
        'summary': summarize_project_requests(),
    })


@admin_bp.route('/project-requests/<int:record_id>', methods=['PATCH'])
@admin_required
def update_project_request(record_id):
    record, updated_fields = update_record(
        ProjectRequest,
        record_id,
        request.get_json(silent=True),
        current_identity(),
        admin_auth.components.audit,
        AuditAction.UPDATE_PROJECT_REQUEST,
        ip_address=get_client_ip(request),
    )
    message = 'Project request updated successfully' if updated_fields else 'No changes made'
    return jsonify({
        'success': True,
        'message': message,
        'updatedFields': updated_fields,
        'projectRequest': record.to_dict(),
    })


# -----------------------------------------------------------------------------
# Contact submissions
# -----------------------------------------------------------------------------

@admin_bp.route('/contact-submissions', methods=['GET'])
@staff_required
def list_contact_submissions():
    default_limit, max_limit = _page_limits()
    result = list_records(ContactSubmission, request.args, default_limit, max_limit)
    return jsonify({
        'submissions': result['items'],
        'pagination': result['pagination'],
        'summary': summarize_contact_submissions(),
    })


@admin_bp.route('/contact-submissions/<int:record_id>', methods=['PATCH'])
@admin_required
def update_contact_submission(record_id):
    record, updated_fields = update_record(
        ContactSubmission,
        record_id,
        request.get_json(silent=True),
        current_identity(),
        admin_auth.components.audit,
        AuditAction.UPDATE_CONTACT_SUBMISSION,
        ip_address=get_client_ip(request),
    )
    message = 'Contact submission updated successfully' if updated_fields else 'No changes made'
    return jsonify({
        'success': True,
        'message': message,
        'submissionId': record.id,
        'updatedFields': updated_fields,
        'submission': record.to_dict(),
    })


# -----------------------------------------------------------------------------
# Security dashboard
# -----------------------------------------------------------------------------

@security_bp.route('/audit-logs', methods=['GET'])
@staff_required
def audit_logs():
    return jsonify({'success': True, 'data': list_audit_logs(request.args)})


@security_bp.route('/login-attempts', methods=['GET'])
@staff_required
def login_attempts():
    return jsonify({'success': True, 'data': list_login_attempts(request.args)})


@security_bp.route('/analytics', methods=['GET'])
@staff_required
def analytics():
    days = parse_positive_int(request.args.get('days'), 7)
    return jsonify({
        'success': True,
        'data': security_analytics(days),
        'period': f'{days} days',
    })
