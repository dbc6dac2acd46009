"""Quote and QuoteItem models."""
import enum
import json
import uuid
from datetime import datetime, timedelta

from quotebook import db


class QuoteStatus(str, enum.Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    INVOICED = 'invoiced'


class Quote(db.Model):
    __tablename__ = 'quotes'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quote_number = db.Column(db.String(30), unique=True, nullable=False, index=True)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default=QuoteStatus.DRAFT.value, nullable=False, index=True)
    validity_days = db.Column(db.Integer, default=30, nullable=False)
    quote_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    reference_number = db.Column(db.String(100), nullable=True)
    attention_to = db.Column(db.String(200), nullable=True)

    # Rate inputs as entered; null on rows created before rates were stored.
    discount_percent = db.Column(db.Numeric(9, 4), nullable=True)
    cgst_percent = db.Column(db.Numeric(9, 4), nullable=True)
    sgst_percent = db.Column(db.Numeric(9, 4), nullable=True)
    igst_percent = db.Column(db.Numeric(9, 4), nullable=True)

    subtotal = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    discount = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    cgst = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    sgst = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    igst = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    shipping_charges = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    total = db.Column(db.Numeric(12, 2), default=0, nullable=False)

    notes = db.Column(db.Text, nullable=True)
    terms_and_conditions = db.Column(db.Text, nullable=True)
    bom_section = db.Column(db.Text, nullable=True)
    sla_section = db.Column(db.Text, nullable=True)
    timeline_section = db.Column(db.Text, nullable=True)

    created_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship(
        'QuoteItem', backref='quote', lazy='dynamic',
        cascade='all, delete-orphan', order_by='QuoteItem.sort_order',
    )
    invoice = db.relationship('Invoice', backref='quote', uselist=False)
    created_by_user = db.relationship('User', foreign_keys=[created_by_id])

    @property
    def status_enum(self):
        return QuoteStatus(self.status)

    @property
    def valid_until(self):
        if self.quote_date is None:
            return None
        return (self.quote_date + timedelta(days=self.validity_days or 0)).date()

    def section(self, name):
        """Decoded BOM / SLA / timeline section, or None."""
        raw = getattr(self, f'{name}_section')
        if not raw:
            return None
        return json.loads(raw)

    def __repr__(self):
        return f'<Quote {self.quote_number}>'


class QuoteItem(db.Model):
    __tablename__ = 'quote_items'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quote_id = db.Column(db.String(36), db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    description = db.Column(db.Text, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<QuoteItem {self.description} x {self.quantity}>'
