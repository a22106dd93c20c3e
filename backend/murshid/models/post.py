"""
Community post model (CommunityPost).

A question, discussion or announcement. Free-form tags plus curated major and
university tags. Like and answer counters are not stored: they are derived
from live rows when a post is read.
"""
from datetime import datetime
from murshid import db
from .mixins import AuthorSnapshotMixin, SoftDeleteMixin, isoformat

POST_TYPES = ('question', 'discussion', 'announcement')


class CommunityPost(AuthorSnapshotMixin, SoftDeleteMixin, db.Model):
    __tablename__ = 'community_posts'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    post_type = db.Column(db.String(20), nullable=False, default='question', index=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    major_tags = db.Column(db.JSON, nullable=False, default=list)
    university_tags = db.Column(db.JSON, nullable=False, default=list)
    # Views are disabled; the column is kept so the schema matches deployed data
    views_count = db.Column(db.Integer, nullable=False, default=0)
    is_solved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    answers = db.relationship('CommunityAnswer', backref='post', lazy='dynamic')

    def to_dict(self):
        data = {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'post_type': self.post_type,
            'tags': self.tags or [],
            'major_tags': self.major_tags or [],
            'university_tags': self.university_tags or [],
            'views_count': 0,
            'is_solved': bool(self.is_solved),
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
        data.update(self.author_dict())
        data.update(self.deletion_dict())
        return data

    def __repr__(self):
        return f'<CommunityPost {self.id} - {self.title[:30]} by User {self.author_id}>'
