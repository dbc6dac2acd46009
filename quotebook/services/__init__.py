"""Business logic services."""
from quotebook.services.pricing_service import PricingService, PriceBreakdown
from quotebook.services.quote_service import QuoteService
from quotebook.services.payment_service import PaymentService, PaymentOutcome
from quotebook.services.numbering_service import NumberingService
from quotebook.services.audit_service import AuditService
from quotebook.services.pdf_service import PdfService
from quotebook.services.email_service import EmailService
from quotebook.services.analytics_service import AnalyticsService

__all__ = [
    'PricingService',
    'PriceBreakdown',
    'QuoteService',
    'PaymentService',
    'PaymentOutcome',
    'NumberingService',
    'AuditService',
    'PdfService',
    'EmailService',
    'AnalyticsService',
]
