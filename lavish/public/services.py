"""
Public Form Services

Derived fields computed when a lead arrives: priority, estimated value,
complexity, lead score, tags and follow-up date.
"""

from datetime import timedelta

from lavish.utils import utcnow

HIGH_VALUE_BUDGETS = ('₹5,00,000 - ₹10,00,000', '₹10,00,000+')
URGENT_TIMELINES = ('2-4 weeks', '1-2 months')
ENTRY_BUDGET = '₹50,000 - ₹1,00,000'

BUDGET_VALUES = {
    '₹50,000 - ₹1,00,000': 75000,
    '₹1,00,000 - ₹2,50,000': 175000,
    '₹2,50,000 - ₹5,00,000': 375000,
    '₹5,00,000 - ₹10,00,000': 750000,
    '₹10,00,000+': 1500000,
    'Custom Quote Required': 500000,
}
DEFAULT_ESTIMATED_VALUE = 100000

PROJECT_FOLLOW_UP_DAYS = {
    '2-4 weeks': 1,
    '1-2 months': 2,
    '2-4 months': 3,
    '4-6 months': 5,
    '6+ months': 7,
    'Flexible timeline': 3,
}

URGENCY_PRIORITY = {
    'Urgent - Same day response needed': 'urgent',
    'High - Within 2-3 days': 'high',
    'Medium - Within a week': 'medium',
    'Low - General inquiry': 'low',
}
URGENCY_FOLLOW_UP_HOURS = {
    'Urgent - Same day response needed': 2,
    'High - Within 2-3 days': 24,
    'Medium - Within a week': 48,
    'Low - General inquiry': 72,
}
HIGH_PRIORITY_INQUIRIES = ('Service Quote Request', 'Project Consultation', 'Technical Support')
HIGH_VALUE_INQUIRIES = ('Service Quote Request', 'Project Consultation', 'Partnership Opportunity')
DECISION_MAKER_TITLES = ('ceo', 'founder', 'director', 'manager')

LEAD_BUDGET_SCORES = {
    '₹25,000 - ₹50,000': 5,
    '₹50,000 - ₹1,00,000': 10,
    '₹1,00,000 - ₹2,50,000': 15,
    '₹2,50,000 - ₹5,00,000': 20,
    '₹5,00,000 - ₹10,00,000': 25,
    '₹10,00,000+': 30,
}
LEAD_TIMELINE_SCORES = {
    'ASAP': 20,
    'Within 1 month': 15,
    '1-3 months': 10,
    '3-6 months': 5,
}


# -----------------------------------------------------------------------------
# Project requests
# -----------------------------------------------------------------------------

def project_priority(budget, timeline):
    high_budget = budget in HIGH_VALUE_BUDGETS
    urgent = timeline in URGENT_TIMELINES
    if high_budget and urgent:
        return 'urgent'
    if high_budget or urgent:
        return 'high'
    if budget != ENTRY_BUDGET:
        return 'medium'
    return 'low'


def estimated_value(budget):
    return BUDGET_VALUES.get(budget, DEFAULT_ESTIMATED_VALUE)


def complexity_level(services, features):
    total = len(services or []) + len(features or [])
    if total <= 3:
        return 'simple'
    if total <= 6:
        return 'moderate'
    if total <= 10:
        return 'complex'
    return 'enterprise'


def project_follow_up(timeline, now=None):
    now = now or utcnow()
    return now + timedelta(days=PROJECT_FOLLOW_UP_DAYS.get(timeline, 3))


# -----------------------------------------------------------------------------
# Contact submissions
# -----------------------------------------------------------------------------

def contact_priority(urgency, inquiry_type):
    if urgency in URGENCY_PRIORITY:
        return URGENCY_PRIORITY[urgency]
    if inquiry_type in HIGH_PRIORITY_INQUIRIES:
        return 'high'
    return 'medium'


def lead_score(submission):
    """Score a contact lead from 0 to 100."""
    score = 0
    if submission.company:
        score += 20

    job_title = (submission.job_title or '').lower()
    if any(title in job_title for title in DECISION_MAKER_TITLES):
        score += 15

    if submission.has_project:
        score += 25

    score += LEAD_BUDGET_SCORES.get(submission.project_budget, 0)
    score += LEAD_TIMELINE_SCORES.get(submission.project_timeline, 0)
    score += min(len(submission.service_interest or []) * 2, 10)

    if submission.inquiry_type in HIGH_VALUE_INQUIRIES:
        score += 10
    if submission.website:
        score += 5

    return min(score, 100)


def contact_tags(submission):
    tags = []
    interests = submission.service_interest or []
    if submission.has_project:
        tags.append('Has Project')
    if submission.company:
        tags.append('Business Client')
    if 'Urgent' in (submission.urgency or ''):
        tags.append('Urgent')
    if 'E-commerce Solutions' in interests:
        tags.append('E-commerce')
    if 'Mobile App Development' in interests:
        tags.append('Mobile App')
    if '₹10,00,000+' in (submission.project_budget or ''):
        tags.append('High Value')
    if submission.inquiry_type == 'Partnership Opportunity':
        tags.append('Partnership')
    if submission.country and submission.country != 'India':
        tags.append('International')
    return tags


def contact_follow_up(urgency, now=None):
    now = now or utcnow()
    return now + timedelta(hours=URGENCY_FOLLOW_UP_HOURS.get(urgency, 48))
