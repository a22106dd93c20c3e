"""
Column groups shared by posts, answers and comments.

- AuthorSnapshotMixin: author fields copied from the actor at creation time
  (not joined live, so later profile edits do not rewrite history)
- SoftDeleteMixin: logical deletion flags and audit fields
"""
from murshid import db


def isoformat(value):
    """UTC timestamp as ISO 8601 with a Z suffix (None stays None)"""
    return value.isoformat() + 'Z' if value else None


class AuthorSnapshotMixin:
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    author_name = db.Column(db.String(120), nullable=False, default='Anonymous')
    author_avatar = db.Column(db.String(255), nullable=True)
    author_role = db.Column(db.String(20), nullable=False, default='student')
    author_university = db.Column(db.String(200), nullable=True)
    author_major = db.Column(db.String(200), nullable=True)
    author_academic_level = db.Column(db.String(100), nullable=True)

    def author_dict(self):
        return {
            'author_id': self.author_id,
            'author_name': self.author_name or 'Anonymous',
            'author_avatar': self.author_avatar,
            'author_role': self.author_role or 'student',
            'author_university': self.author_university,
            'author_major': self.author_major,
            'author_academic_level': self.author_academic_level,
        }


class SoftDeleteMixin:
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, index=True,
                           server_default=db.text('false'))
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(db.Integer, nullable=True)
    deletion_reason = db.Column(db.String(500), nullable=True)

    def deletion_dict(self):
        return {
            'is_deleted': bool(self.is_deleted),
            'deleted_at': isoformat(self.deleted_at),
            'deleted_by': self.deleted_by,
            'deletion_reason': self.deletion_reason,
        }
