"""
Edit history model (ContentVersion).

One row per edit of a post or answer: the snapshot before the edit and the
structural diff to the snapshot after it. version_number is strictly
increasing per (content_type, content_id), starting at 1.
"""
from murshid import db
from datetime import datetime
from sqlalchemy import UniqueConstraint
from .mixins import isoformat

VERSION_CONTENT_TYPES = ('post', 'answer')


class ContentVersion(db.Model):
    __tablename__ = 'content_versions'

    id = db.Column(db.Integer, primary_key=True)
    content_type = db.Column(db.String(20), nullable=False, index=True)
    content_id = db.Column(db.Integer, nullable=False, index=True)
    version_number = db.Column(db.Integer, nullable=False)
    previous_data = db.Column(db.JSON, nullable=False, default=dict)
    diff = db.Column(db.JSON, nullable=True)
    edited_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    editor_name = db.Column(db.String(120), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('content_type', 'content_id', 'version_number', name='uq_content_version_number'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'content_type': self.content_type,
            'content_id': self.content_id,
            'version_number': self.version_number,
            'previous_data': self.previous_data,
            'diff': self.diff,
            'edited_by': self.edited_by,
            'editor_name': self.editor_name,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<ContentVersion {self.content_type}:{self.content_id} v{self.version_number}>'
