# backend/murshid/models/comment.py
"""
Comment model (CommunityComment).

Comments hang off an answer. parent_comment_id allows one shallow level of
replies; replies stay under the same answer as their parent.
"""
from murshid import db
from datetime import datetime
from .mixins import AuthorSnapshotMixin, SoftDeleteMixin, isoformat


class CommunityComment(AuthorSnapshotMixin, SoftDeleteMixin, db.Model):
    __tablename__ = 'community_comments'

    id = db.Column(db.Integer, primary_key=True)
    answer_id = db.Column(db.Integer, db.ForeignKey('community_answers.id'), nullable=False, index=True)
    parent_comment_id = db.Column(db.Integer, db.ForeignKey('community_comments.id'), nullable=True, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    replies = db.relationship(
        'CommunityComment',
        backref=db.backref('parent', remote_side=[id]),
        lazy='dynamic'
    )

    def to_dict(self):
        data = {
            'id': self.id,
            'answer_id': self.answer_id,
            'parent_comment_id': self.parent_comment_id,
            'content': self.content,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
        data.update(self.author_dict())
        data.update(self.deletion_dict())
        return data

    def __repr__(self):
        parent_info = f" (Reply to {self.parent_comment_id})" if self.parent_comment_id else ""
        return f'<CommunityComment {self.id} on Answer {self.answer_id}{parent_info}>'
