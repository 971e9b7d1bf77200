"""
Admin Services

Listing and mutation logic for the back-office records.
"""

import logging
from datetime import timedelta

from sqlalchemy import case, func, or_
from sqlalchemy.exc import SQLAlchemyError

from lavish.errors import ValidationError, NotFoundError, ConflictError, StoreError
from lavish.extensions import db
from lavish.models import AuditLog, LoginAttempt, ProjectRequest, ContactSubmission
from lavish.models.security import LOGIN_ATTEMPT
from lavish.models.submissions import PRIORITIES
from lavish.utils import utcnow, isoformat, parse_date, parse_positive_int, camel_to_snake

logger = logging.getLogger(__name__)

# Keys callers may echo back that must never be written
IMMUTABLE_KEYS = frozenset({'id', '_id', 'createdAt', 'submittedAt', 'updatedAt', 'lastUpdatedBy'})
VERSION_KEY = 'version'

LIST_FIELDS = frozenset({'notes', 'tags'})
REQUIRED_TEXT_FIELDS = frozenset({'fullName', 'email'})

SORTABLE = {
    ProjectRequest: ('submitted_at', 'updated_at', 'priority', 'status', 'estimated_value', 'full_name'),
    ContactSubmission: ('submitted_at', 'updated_at', 'priority', 'status', 'lead_score', 'full_name'),
}


def _clean_value(model, key, value):
    """Validate a single requested field; returns the value to store."""
    if key == 'status':
        if value not in model.STATUSES:
            raise ValidationError(f'Invalid status: {value}', fields=['status'])
        return value
    if key == 'priority':
        if value not in PRIORITIES:
            raise ValidationError(f'Invalid priority: {value}', fields=['priority'])
        return value
    if key == 'followUpDate':
        if value is None:
            return None
        parsed = parse_date(value) if isinstance(value, str) else None
        if parsed is None:
            raise ValidationError('followUpDate must be an ISO date', fields=['followUpDate'])
        return parsed
    if key in LIST_FIELDS:
        if not isinstance(value, list):
            raise ValidationError(f'{key} must be a list', fields=[key])
        return value
    if value is not None and not isinstance(value, str):
        raise ValidationError(f'{key} must be a string', fields=[key])
    if key in REQUIRED_TEXT_FIELDS and not (value or '').strip():
        raise ValidationError(f'{key} cannot be empty', fields=[key])
    return value.strip() if isinstance(value, str) else value


def prepare_update(model, payload):
    """Split a PATCH body into ``(changes, expected_version)``.

    Immutable keys are dropped silently; unknown keys are rejected.
    """
    if not isinstance(payload, dict) or not payload:
        raise ValidationError('Request body must be a non-empty JSON object.')

    unknown = [key for key in payload
               if key not in model.UPDATABLE_FIELDS and key not in IMMUTABLE_KEYS and key != VERSION_KEY]
    if unknown:
        raise ValidationError('Unknown or read-only fields: ' + ', '.join(unknown), fields=unknown)

    changes = {}
    for key, value in payload.items():
        if key in model.UPDATABLE_FIELDS:
            changes[key] = _clean_value(model, key, value)
    if not changes:
        raise ValidationError('No updatable fields supplied.')

    expected_version = payload.get(VERSION_KEY)
    if expected_version is not None and (isinstance(expected_version, bool)
                                         or not isinstance(expected_version, int)):
        raise ValidationError('version must be an integer', fields=[VERSION_KEY])
    return changes, expected_version


def update_record(model, record_id, payload, identity, audit, action, ip_address=None):
    """Apply a partial update on behalf of an authorised admin.

    Only fields whose value actually changes are written and reported; a
    request that changes nothing leaves the record (and the audit log)
    untouched. Returns ``(record, updated_fields)``.
    """
    changes, expected_version = prepare_update(model, payload)

    try:
        record = db.session.get(model, record_id)
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='record_lookup_failed') from exc
    if record is None:
        raise NotFoundError(f'{model.__name__} {record_id} not found')

    if expected_version is not None and expected_version != record.version:
        raise ConflictError(
            f'{model.__name__} {record_id} is at version {record.version}, not {expected_version}'
        )

    # Reported in UPDATABLE_FIELDS order, whatever order the body used
    updated_fields = [key for key, attr in model.UPDATABLE_FIELDS.items()
                      if key in changes and getattr(record, attr) != changes[key]]

    if not updated_fields:
        return record, []

    old_status = record.status
    for key in updated_fields:
        setattr(record, model.UPDATABLE_FIELDS[key], changes[key])
    record.updated_at = utcnow()
    record.last_updated_by = identity.display_name
    record.version = (record.version or 0) + 1

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError(detail=str(exc), reason='record_update_failed') from exc

    logger.info('%s %s updated by %s: %s', model.__name__, record_id,
                identity.display_name, ', '.join(updated_fields))

    audit.record(
        action,
        {
            'requestId': record.id,
            'updatedFields': updated_fields,
            'updatedBy': identity.display_name,
            'adminId': identity.id,
            'oldStatus': old_status,
            'newStatus': record.status,
            'version': record.version,
        },
        actor=identity.display_name,
        source='admin_panel',
        ip_address=ip_address,
    )
    return record, updated_fields


def _apply_filters(model, query, args):
    status = args.get('status')
    if status:
        query = query.filter(model.status == status)
    priority = args.get('priority')
    if priority:
        query = query.filter(model.priority == priority)

    if model is ProjectRequest and args.get('projectType'):
        query = query.filter(ProjectRequest.project_type == args.get('projectType'))
    if model is ContactSubmission:
        if args.get('inquiryType'):
            query = query.filter(ContactSubmission.inquiry_type == args.get('inquiryType'))
        min_score = args.get('minLeadScore', type=int)
        if min_score is not None:
            query = query.filter(ContactSubmission.lead_score >= min_score)

    date_from = parse_date(args.get('dateFrom'))
    if date_from is not None:
        query = query.filter(model.submitted_at >= date_from)
    date_to = parse_date(args.get('dateTo'))
    if date_to is not None:
        query = query.filter(model.submitted_at <= date_to)

    search = (args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        columns = [model.full_name, model.email, model.company]
        columns.append(model.project_title if model is ProjectRequest else model.subject)
        query = query.filter(or_(*[column.ilike(pattern) for column in columns]))
    return query


def list_records(model, args, default_limit=20, max_limit=100):
    """Filtered, sorted, paginated listing for the admin tables."""
    page = parse_positive_int(args.get('page'), 1)
    limit = parse_positive_int(args.get('limit'), default_limit, maximum=max_limit)

    sort_by = camel_to_snake(args.get('sortBy') or 'submittedAt')
    if sort_by not in SORTABLE[model]:
        sort_by = 'submitted_at'
    column = getattr(model, sort_by)
    order = column.asc() if args.get('sortOrder') == 'asc' else column.desc()

    query = _apply_filters(model, model.query, args)
    try:
        total = query.count()
        records = query.order_by(order, model.id.desc()).offset((page - 1) * limit).limit(limit).all()
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='record_list_failed') from exc

    return {
        'items': [record.to_dict() for record in records],
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'pages': (total + limit - 1) // limit,
        },
    }


def summarize_project_requests():
    """Totals for the project requests dashboard cards."""
    def count_status(status):
        return func.sum(case((ProjectRequest.status == status, 1), else_=0))

    try:
        row = db.session.query(
            func.count(ProjectRequest.id),
            func.sum(ProjectRequest.estimated_value),
            func.avg(ProjectRequest.estimated_value),
            count_status('new'),
            count_status('in-progress'),
            count_status('completed'),
        ).one()
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='summary_failed') from exc

    total, total_value, avg_value, new, in_progress, completed = row
    return {
        'totalRequests': total or 0,
        'totalValue': int(total_value or 0),
        'avgValue': round(float(avg_value or 0), 2),
        'newRequests': int(new or 0),
        'inProgress': int(in_progress or 0),
        'completed': int(completed or 0),
    }


def summarize_contact_submissions():
    """Counts per status plus the average lead score."""
    try:
        by_status = dict(
            db.session.query(ContactSubmission.status, func.count(ContactSubmission.id))
            .group_by(ContactSubmission.status).all()
        )
        avg_score = db.session.query(func.avg(ContactSubmission.lead_score)).scalar()
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='summary_failed') from exc

    return {
        'total': sum(by_status.values()),
        'byStatus': by_status,
        'avgLeadScore': round(float(avg_score or 0), 2),
    }


def list_audit_logs(args, default_limit=50, max_limit=200):
    """Audit log page for the security dashboard, newest first."""
    page = parse_positive_int(args.get('page'), 1)
    limit = parse_positive_int(args.get('limit'), default_limit, maximum=max_limit)
    days = parse_positive_int(args.get('days'), 7)

    query = AuditLog.query.filter(AuditLog.timestamp >= utcnow() - timedelta(days=days))
    if args.get('action'):
        query = query.filter(AuditLog.action == args.get('action'))
    if args.get('actor'):
        query = query.filter(AuditLog.actor.ilike(f"%{args.get('actor')}%"))

    try:
        total = query.count()
        logs = query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()) \
            .offset((page - 1) * limit).limit(limit).all()
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='audit_list_failed') from exc

    return {
        'logs': [log.to_dict() for log in logs],
        'pagination': {
            'currentPage': page,
            'totalPages': (total + limit - 1) // limit,
            'totalCount': total,
            'hasNext': page * limit < total,
            'hasPrev': page > 1,
        },
        'filters': {'action': args.get('action'), 'actor': args.get('actor'), 'days': days},
    }


def list_login_attempts(args, default_limit=50, max_limit=200):
    """Security log page: login attempts newest first, with a per-type breakdown."""
    page = parse_positive_int(args.get('page'), 1)
    limit = parse_positive_int(args.get('limit'), default_limit, maximum=max_limit)
    days = parse_positive_int(args.get('days'), 7)

    query = LoginAttempt.query.filter(LoginAttempt.timestamp >= utcnow() - timedelta(days=days))
    if args.get('type'):
        query = query.filter(LoginAttempt.type == args.get('type'))
    if args.get('email'):
        query = query.filter(LoginAttempt.email.ilike(f"%{args.get('email')}%"))
    if args.get('ip'):
        query = query.filter(LoginAttempt.ip_address == args.get('ip'))

    try:
        total = query.count()
        logs = query.order_by(LoginAttempt.timestamp.desc(), LoginAttempt.id.desc()) \
            .offset((page - 1) * limit).limit(limit).all()
        breakdown = (query.with_entities(
                         LoginAttempt.type,
                         func.count(LoginAttempt.id),
                         func.sum(case((LoginAttempt.success.is_(True), 1), else_=0)))
                     .group_by(LoginAttempt.type).all())
        unique_ips = query.with_entities(func.count(func.distinct(LoginAttempt.ip_address))).scalar()
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='security_log_list_failed') from exc

    return {
        'logs': [log.to_dict() for log in logs],
        'pagination': {
            'currentPage': page,
            'totalPages': (total + limit - 1) // limit,
            'totalCount': total,
            'hasNext': page * limit < total,
            'hasPrev': page > 1,
        },
        'summary': {
            'totalLogs': total,
            'uniqueIPs': unique_ips or 0,
            'typeBreakdown': [
                {'type': kind, 'count': count, 'successCount': int(successes or 0)}
                for kind, count, successes in breakdown
            ],
        },
        'filters': {'type': args.get('type'), 'email': args.get('email'), 'ip': args.get('ip'), 'days': days},
    }


def login_attempt_stats(since, top_ips=10):
    """Login attempt counts since ``since`` and the IPs with most failures."""
    attempts = LoginAttempt.query.filter(LoginAttempt.type == LOGIN_ATTEMPT,
                                         LoginAttempt.timestamp >= since)
    try:
        total, successful = attempts.with_entities(
            func.count(LoginAttempt.id),
            func.sum(case((LoginAttempt.success.is_(True), 1), else_=0)),
        ).one()
        failed_ips = (attempts.filter(LoginAttempt.success.is_(False))
                      .with_entities(LoginAttempt.ip_address,
                                     func.count(LoginAttempt.id),
                                     func.max(LoginAttempt.timestamp))
                      .group_by(LoginAttempt.ip_address)
                      .order_by(func.count(LoginAttempt.id).desc(), LoginAttempt.ip_address)
                      .limit(top_ips).all())
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='analytics_failed') from exc

    total = total or 0
    successful = int(successful or 0)
    return {
        'totalAttempts': total,
        'successfulLogins': successful,
        'failedLogins': total - successful,
        'successRate': round(successful / total * 100, 2) if total else 0,
        'topFailedIPs': [
            {'ip': ip, 'count': count, 'lastAttempt': isoformat(last)}
            for ip, count, last in failed_ips
        ],
    }


def security_analytics(days=7):
    """Audit activity per action and per actor, plus login attempt stats, over the last ``days`` days."""
    since = utcnow() - timedelta(days=days)
    try:
        by_action = (db.session.query(AuditLog.action, func.count(AuditLog.id))
                     .filter(AuditLog.timestamp >= since)
                     .group_by(AuditLog.action).all())
        by_actor = (db.session.query(AuditLog.actor, func.count(AuditLog.id))
                    .filter(AuditLog.timestamp >= since)
                    .group_by(AuditLog.actor).all())
        unique_ips = (db.session.query(func.count(func.distinct(AuditLog.ip_address)))
                      .filter(AuditLog.timestamp >= since).scalar())
    except SQLAlchemyError as exc:
        raise StoreError(detail=str(exc), reason='analytics_failed') from exc

    actions = {action: count for action, count in by_action}
    return {
        'totalEvents': sum(actions.values()),
        'byAction': actions,
        'byActor': {actor: count for actor, count in by_actor},
        'logins': actions.get('ADMIN_LOGIN', 0),
        'uniqueIPs': unique_ips or 0,
        **login_attempt_stats(since),
    }
