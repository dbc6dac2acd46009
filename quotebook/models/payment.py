"""Payment history model."""
import enum
import uuid
from datetime import datetime, date

from quotebook import db


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = 'bank_transfer'
    CREDIT_CARD = 'credit_card'
    DEBIT_CARD = 'debit_card'
    CHECK = 'check'
    CASH = 'cash'
    UPI = 'upi'
    OTHER = 'other'


class PaymentHistory(db.Model):
    __tablename__ = 'payment_history'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    invoice_id = db.Column(db.String(36), db.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(20), nullable=False)
    transaction_id = db.Column(db.String(120), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    payment_date = db.Column(db.Date, nullable=False, default=date.today)
    recorded_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    recorded_by = db.relationship('User', foreign_keys=[recorded_by_id])

    METHOD_LABELS = {
        'bank_transfer': 'Bank Transfer',
        'credit_card': 'Credit Card',
        'debit_card': 'Debit Card',
        'check': 'Check',
        'cash': 'Cash',
        'upi': 'UPI',
        'other': 'Other',
    }

    def __repr__(self):
        return f'<PaymentHistory {self.amount} on {self.payment_date}>'
