# backend/murshid/models/user.py
"""
Community user profile (User).

Mirror of the identity provider's profile rows: the JWT identity is a users.id.
Holds only what the community core reads: display name, role flags and the
academic details copied into author snapshots.
"""
from murshid import db
from datetime import datetime


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=True)
    role = db.Column(db.String(20), nullable=False, default='student')  # student / specialist
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    establishment_name = db.Column(db.String(200), nullable=True)
    university_id = db.Column(db.Integer, db.ForeignKey('universities.id'), nullable=True)
    track = db.Column(db.String(200), nullable=True)   # major / track
    level = db.Column(db.String(100), nullable=True)   # academic level
    avatar_url = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'is_admin': bool(self.is_admin),
            'establishment_name': self.establishment_name,
            'university_id': self.university_id,
            'track': self.track,
            'level': self.level,
            'avatar_url': self.avatar_url,
            'created_at': self.created_at.isoformat() + 'Z' if self.created_at else None,
        }

    def __repr__(self):
        return f'<User {self.id} {self.email}>'
