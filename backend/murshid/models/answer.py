# backend/murshid/models/answer.py
"""
Answer model (CommunityAnswer).

An answer to a community post. At most one answer per post may be accepted;
the partial unique index below makes that a storage rule rather than a
convention of the accept call.
"""
from murshid import db
from datetime import datetime
from .mixins import AuthorSnapshotMixin, SoftDeleteMixin, isoformat


class CommunityAnswer(AuthorSnapshotMixin, SoftDeleteMixin, db.Model):
    __tablename__ = 'community_answers'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('community_posts.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    is_accepted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    comments = db.relationship('CommunityComment', backref='answer', lazy='dynamic')

    __table_args__ = (
        db.Index(
            'uq_community_answers_one_accepted',
            'post_id',
            unique=True,
            sqlite_where=db.text('is_accepted = true'),
            postgresql_where=db.text('is_accepted = true'),
        ),
    )

    def to_dict(self):
        data = {
            'id': self.id,
            'post_id': self.post_id,
            'content': self.content,
            'is_accepted': bool(self.is_accepted),
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
        data.update(self.author_dict())
        data.update(self.deletion_dict())
        return data

    def __repr__(self):
        return f'<CommunityAnswer {self.id} for Post {self.post_id} by User {self.author_id}>'
