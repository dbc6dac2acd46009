"""Client model."""
import uuid
from datetime import datetime

from quotebook import db


class Client(db.Model):
    __tablename__ = 'clients'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False, index=True)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    billing_address = db.Column(db.Text, nullable=True)
    shipping_address = db.Column(db.Text, nullable=True)
    gstin = db.Column(db.String(20), nullable=True)
    contact_person = db.Column(db.String(120), nullable=True)
    created_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    quotes = db.relationship('Quote', backref='client', lazy='dynamic', foreign_keys='Quote.client_id')

    def __repr__(self):
        return f'<Client {self.name}>'
