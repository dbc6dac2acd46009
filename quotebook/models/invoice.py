"""Invoice and InvoiceItem models."""
import enum
import uuid
from datetime import datetime, date

from quotebook import db


class PaymentStatus(str, enum.Enum):
    PENDING = 'pending'
    PARTIAL = 'partial'
    PAID = 'paid'
    OVERDUE = 'overdue'


class Invoice(db.Model):
    __tablename__ = 'invoices'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    invoice_number = db.Column(db.String(30), unique=True, nullable=False, index=True)
    quote_id = db.Column(db.String(36), db.ForeignKey('quotes.id'), unique=True, nullable=False)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=False, index=True)
    invoice_date = db.Column(db.Date, nullable=False, default=date.today)
    due_date = db.Column(db.Date, nullable=False, index=True)

    # Snapshot of the quote at conversion time
    subtotal = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    discount = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    cgst = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    sgst = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    igst = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    shipping_charges = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    total = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    terms_and_conditions = db.Column(db.Text, nullable=True)

    payment_status = db.Column(db.String(20), default=PaymentStatus.PENDING.value, nullable=False)
    # Cached sum of payment history; only PaymentService writes it.
    paid_amount = db.Column(db.Numeric(12, 2), default=0, nullable=False)

    created_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship(
        'InvoiceItem', backref='invoice', lazy='dynamic',
        cascade='all, delete-orphan', order_by='InvoiceItem.sort_order',
    )
    payments = db.relationship(
        'PaymentHistory', backref='invoice', lazy='dynamic',
        cascade='all, delete-orphan', order_by='PaymentHistory.payment_date.desc()',
    )
    client = db.relationship('Client', foreign_keys=[client_id])

    @property
    def outstanding(self):
        return (self.total or 0) - (self.paid_amount or 0)

    def is_overdue(self, today=None):
        today = today or date.today()
        return self.payment_status != PaymentStatus.PAID.value and today > self.due_date

    def effective_status(self, today=None):
        if self.is_overdue(today):
            return PaymentStatus.OVERDUE.value
        return self.payment_status

    def __repr__(self):
        return f'<Invoice {self.invoice_number}>'


class InvoiceItem(db.Model):
    __tablename__ = 'invoice_items'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    invoice_id = db.Column(db.String(36), db.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    description = db.Column(db.Text, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<InvoiceItem {self.description} x {self.quantity}>'
