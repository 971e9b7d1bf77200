"""
Lead-generation Models

Project requests and contact submissions are the mutable domain records of
the back-office; form submissions are the simple public form.
"""

from lavish.extensions import db
from lavish.utils import utcnow, isoformat

PRIORITIES = ('low', 'medium', 'high', 'urgent')


class TrackedRecordMixin:
    """Bookkeeping shared by records that admins edit.

    Subclasses declare ``UPDATABLE_FIELDS`` (JSON key -> column attribute) and
    ``STATUSES``. ``id`` and the creation timestamp are never updatable.
    """

    UPDATABLE_FIELDS = {}
    STATUSES = ()

    status = db.Column(db.String(32), nullable=False, default='new', index=True)
    priority = db.Column(db.String(16), nullable=False, default='medium', index=True)
    assigned_to = db.Column(db.String(120))
    notes = db.Column(db.JSON, default=list)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    last_updated_by = db.Column(db.String(120))
    version = db.Column(db.Integer, nullable=False, default=1)

    def _tracking_dict(self):
        return {
            'status': self.status,
            'priority': self.priority,
            'assignedTo': self.assigned_to,
            'notes': self.notes or [],
            'updatedAt': isoformat(self.updated_at),
            'lastUpdatedBy': self.last_updated_by,
            'version': self.version,
        }


class ProjectRequest(TrackedRecordMixin, db.Model):
    """Start-project request submitted from the public site"""
    __tablename__ = 'project_requests'

    STATUSES = ('new', 'reviewing', 'reviewed', 'in-progress', 'quoted', 'completed', 'rejected')
    UPDATABLE_FIELDS = {
        'fullName': 'full_name',
        'email': 'email',
        'phone': 'phone',
        'company': 'company',
        'projectTitle': 'project_title',
        'projectType': 'project_type',
        'projectDescription': 'project_description',
        'budget': 'budget',
        'timeline': 'timeline',
        'status': 'status',
        'priority': 'priority',
        'assignedTo': 'assigned_to',
        'notes': 'notes',
        'followUpDate': 'follow_up_date',
    }

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(40))
    company = db.Column(db.String(120))
    project_type = db.Column(db.String(80))
    project_title = db.Column(db.String(200))
    project_description = db.Column(db.Text)
    services = db.Column(db.JSON, default=list)
    features = db.Column(db.JSON, default=list)
    platforms = db.Column(db.JSON, default=list)
    timeline = db.Column(db.String(80))
    budget = db.Column(db.String(80))
    start_date = db.Column(db.String(40))
    design_preferences = db.Column(db.Text)
    has_existing_website = db.Column(db.Boolean, default=False)
    current_website = db.Column(db.String(255))
    inspiration = db.Column(db.Text)
    additional_requirements = db.Column(db.Text)

    estimated_value = db.Column(db.Integer)
    complexity_level = db.Column(db.String(16))
    follow_up_date = db.Column(db.DateTime)
    source = db.Column(db.String(32), default='website')
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(255))
    submitted_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        data = {
            'id': self.id,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'projectType': self.project_type,
            'projectTitle': self.project_title,
            'projectDescription': self.project_description,
            'services': self.services or [],
            'features': self.features or [],
            'platforms': self.platforms or [],
            'timeline': self.timeline,
            'budget': self.budget,
            'startDate': self.start_date,
            'designPreferences': self.design_preferences,
            'hasExistingWebsite': bool(self.has_existing_website),
            'currentWebsite': self.current_website,
            'inspiration': self.inspiration,
            'additionalRequirements': self.additional_requirements,
            'estimatedValue': self.estimated_value,
            'complexityLevel': self.complexity_level,
            'followUpDate': isoformat(self.follow_up_date),
            'source': self.source,
            'submittedAt': isoformat(self.submitted_at),
        }
        data.update(self._tracking_dict())
        return data

    def __repr__(self):
        return f'<ProjectRequest {self.id} {self.status}>'


class ContactSubmission(TrackedRecordMixin, db.Model):
    """Contact form inquiry"""
    __tablename__ = 'contact_submissions'

    STATUSES = ('new', 'reviewed', 'contacted', 'in-progress', 'resolved', 'closed')
    UPDATABLE_FIELDS = {
        'fullName': 'full_name',
        'email': 'email',
        'phone': 'phone',
        'company': 'company',
        'subject': 'subject',
        'status': 'status',
        'priority': 'priority',
        'assignedTo': 'assigned_to',
        'notes': 'notes',
        'tags': 'tags',
        'followUpDate': 'follow_up_date',
    }

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(40))
    company = db.Column(db.String(120))
    job_title = db.Column(db.String(120))
    website = db.Column(db.String(255))
    inquiry_type = db.Column(db.String(80), default='general')
    service_interest = db.Column(db.JSON, default=list)
    urgency = db.Column(db.String(80))
    subject = db.Column(db.String(200))
    message = db.Column(db.Text, nullable=False)
    has_project = db.Column(db.Boolean, default=False)
    project_budget = db.Column(db.String(80))
    project_timeline = db.Column(db.String(80))
    country = db.Column(db.String(80))
    city = db.Column(db.String(80))

    lead_score = db.Column(db.Integer, default=0, index=True)
    tags = db.Column(db.JSON, default=list)
    follow_up_date = db.Column(db.DateTime)
    source = db.Column(db.String(32), default='website')
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(255))
    submitted_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        data = {
            'id': self.id,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'jobTitle': self.job_title,
            'website': self.website,
            'inquiryType': self.inquiry_type,
            'serviceInterest': self.service_interest or [],
            'urgency': self.urgency,
            'subject': self.subject,
            'message': self.message,
            'hasProject': bool(self.has_project),
            'projectBudget': self.project_budget,
            'projectTimeline': self.project_timeline,
            'country': self.country,
            'city': self.city,
            'leadScore': self.lead_score,
            'tags': self.tags or [],
            'followUpDate': isoformat(self.follow_up_date),
            'source': self.source,
            'submittedAt': isoformat(self.submitted_at),
        }
        data.update(self._tracking_dict())
        return data

    def __repr__(self):
        return f'<ContactSubmission {self.id} {self.status}>'


class FormSubmission(db.Model):
    """Generic contact/enquiry form"""
    __tablename__ = 'form_submissions'

    TYPES = ('contact', 'enquiry')

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(16), nullable=False, default='contact')
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(40), default='')
    company = db.Column(db.String(120), default='')
    service = db.Column(db.String(120), default='')
    budget = db.Column(db.String(80), default='')
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(32), nullable=False, default='new')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<FormSubmission {self.id} {self.type}>'
