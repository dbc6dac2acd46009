"""Flask-WTF forms."""
from quotebook.forms.base import DecimalBounds, bind_json, json_body, validate_json
from quotebook.forms.auth import LoginForm
from quotebook.forms.client import ClientForm
from quotebook.forms.quote import QuoteForm, QuoteItemForm, QuoteStatusForm, PricingForm
from quotebook.forms.invoice import PaymentForm, PaymentStatusForm, SendDocumentForm
from quotebook.forms.settings import TaxRateForm

__all__ = [
    'bind_json',
    'json_body',
    'validate_json',
    'DecimalBounds',
    'LoginForm',
    'ClientForm',
    'QuoteForm',
    'QuoteItemForm',
    'QuoteStatusForm',
    'PricingForm',
    'PaymentForm',
    'PaymentStatusForm',
    'SendDocumentForm',
    'TaxRateForm',
]
