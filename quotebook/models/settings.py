"""Application settings model."""
import uuid
from datetime import datetime

from quotebook import db


class Setting(db.Model):
    __tablename__ = 'settings'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True)
    updated_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def get(key, default=None):
        s = Setting.query.filter_by(key=key).first()
        return s.value if s and s.value not in (None, '') else default

    @staticmethod
    def get_int(key, default):
        try:
            return int(Setting.get(key, default))
        except (TypeError, ValueError):
            return default

    @staticmethod
    def set(key, value, category=None, updated_by_id=None, commit=True):
        s = Setting.query.filter_by(key=key).first()
        if s:
            s.value = str(value) if value is not None else None
            s.category = category or s.category
            s.updated_by_id = updated_by_id
        else:
            s = Setting(
                key=key,
                value=str(value) if value is not None else None,
                category=category,
                updated_by_id=updated_by_id,
            )
            db.session.add(s)
        if commit:
            db.session.commit()
        return s

    @staticmethod
    def as_dict():
        return {s.key: s.value for s in Setting.query.order_by(Setting.key).all()}

    def __repr__(self):
        return f'<Setting {self.key}>'
