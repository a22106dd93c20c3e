# backend/murshid/models/report.py
"""
Content report model (CommunityReport).

A user's report against a post, answer or comment. Status moves
pending -> dismissed | actioned. A reporter may hold only one pending report
per target; the partial unique index is the storage backstop for the check
the report service performs before inserting.
"""
from murshid import db
from datetime import datetime
from .mixins import isoformat

REPORT_REASONS = ('spam', 'harassment', 'inappropriate', 'misinformation', 'other')
REPORT_CONTENT_TYPES = ('post', 'answer', 'comment')
REPORT_STATUS_PENDING = 'pending'
REPORT_STATUS_DISMISSED = 'dismissed'
REPORT_STATUS_ACTIONED = 'actioned'
REPORT_STATUSES = (REPORT_STATUS_PENDING, REPORT_STATUS_DISMISSED, REPORT_STATUS_ACTIONED)


class CommunityReport(db.Model):
    __tablename__ = 'community_reports'

    id = db.Column(db.Integer, primary_key=True)
    reporter_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    reporter_name = db.Column(db.String(120), nullable=True)
    reported_content_type = db.Column(db.String(20), nullable=False, index=True)
    reported_content_id = db.Column(db.Integer, nullable=False, index=True)
    reason = db.Column(db.String(30), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=REPORT_STATUS_PENDING, index=True)
    reviewed_by = db.Column(db.Integer, nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    resolution_notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.Index(
            'uq_community_reports_one_pending',
            'reporter_id', 'reported_content_type', 'reported_content_id',
            unique=True,
            sqlite_where=db.text("status = 'pending'"),
            postgresql_where=db.text("status = 'pending'"),
        ),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'reporter_id': self.reporter_id,
            'reporter_name': self.reporter_name,
            'reported_content_type': self.reported_content_type,
            'reported_content_id': self.reported_content_id,
            'reason': self.reason,
            'description': self.description,
            'status': self.status,
            'reviewed_by': self.reviewed_by,
            'reviewed_at': isoformat(self.reviewed_at),
            'resolution_notes': self.resolution_notes,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return (f'<CommunityReport {self.id} {self.reported_content_type}:{self.reported_content_id} '
                f'by User {self.reporter_id} [{self.status}]>')
