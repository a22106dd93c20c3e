"""
Like models for posts, answers and comments.

One row per (user, content item); the unique constraints turn a repeated like
into a duplicate insert that the like service treats as already liked.
"""
from murshid import db
from datetime import datetime
from sqlalchemy import UniqueConstraint
from .mixins import isoformat


class CommunityPostLike(db.Model):
    __tablename__ = 'community_post_likes'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('community_posts.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('post_id', 'user_id', name='uq_community_post_like'),
    )

    def to_dict(self):
        return {'id': self.id, 'post_id': self.post_id, 'user_id': self.user_id,
                'created_at': isoformat(self.created_at)}


class CommunityAnswerLike(db.Model):
    __tablename__ = 'community_answer_likes'

    id = db.Column(db.Integer, primary_key=True)
    answer_id = db.Column(db.Integer, db.ForeignKey('community_answers.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('answer_id', 'user_id', name='uq_community_answer_like'),
    )

    def to_dict(self):
        return {'id': self.id, 'answer_id': self.answer_id, 'user_id': self.user_id,
                'created_at': isoformat(self.created_at)}


class CommunityCommentLike(db.Model):
    __tablename__ = 'community_comment_likes'

    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('community_comments.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('comment_id', 'user_id', name='uq_community_comment_like'),
    )

    def to_dict(self):
        return {'id': self.id, 'comment_id': self.comment_id, 'user_id': self.user_id,
                'created_at': isoformat(self.created_at)}
