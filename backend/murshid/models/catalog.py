"""
Universities and majors, as far as the community needs them: the English and
Arabic names used to translate curated post tags.
"""
from murshid import db


class University(db.Model):
    __tablename__ = 'universities'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    name_ar = db.Column(db.String(200), nullable=True)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'name_ar': self.name_ar}


class Major(db.Model):
    __tablename__ = 'majors'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    name_ar = db.Column(db.String(200), nullable=True)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'name_ar': self.name_ar}
