"""Database models."""
from quotebook.models.user import User
from quotebook.models.client import Client
from quotebook.models.quote import Quote, QuoteItem, QuoteStatus
from quotebook.models.invoice import Invoice, InvoiceItem, PaymentStatus
from quotebook.models.payment import PaymentHistory, PaymentMethod
from quotebook.models.tax_rate import TaxRate
from quotebook.models.audit import AuditLog
from quotebook.models.settings import Setting

__all__ = [
    'User',
    'Client',
    'Quote',
    'QuoteItem',
    'QuoteStatus',
    'Invoice',
    'InvoiceItem',
    'PaymentStatus',
    'PaymentHistory',
    'PaymentMethod',
    'TaxRate',
    'AuditLog',
    'Setting',
]
