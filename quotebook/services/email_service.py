"""Outbound email for quotes, invoices and payment reminders (Flask-Mail)."""
import logging
from datetime import date
from smtplib import SMTPException

from flask_mail import Message
from markupsafe import escape

from quotebook import mail
from quotebook.exceptions import DeliveryError
from quotebook.services.pdf_service import PdfService

logger = logging.getLogger(__name__)


def _send(msg, kind, number):
    """Hand a message to the mail transport; transport failures become DeliveryError."""
    try:
        mail.send(msg)
    except (SMTPException, OSError) as exc:
        logger.exception('Failed to send %s %s to %s', kind, number, ', '.join(msg.recipients))
        raise DeliveryError(f'Could not send {kind} email: {exc}') from exc
    logger.info('Sent %s %s to %s', kind, number, ', '.join(msg.recipients))


class EmailService:
    @staticmethod
    def send_quote(quote, recipient, message=None):
        # Render first; nothing is sent if the document cannot be built.
        pdf_bytes = PdfService.render_quote(quote)
        body = message or 'Please find your quote attached below.'
        msg = Message(
            subject=f'Quote {quote.quote_number}',
            recipients=[recipient],
            html=(
                f'<h2>Quote: {escape(quote.quote_number)}</h2>'
                f'<p>Dear {escape(quote.client.name)},</p>'
                f'<p>{escape(body)}</p>'
                '<p>Thank you for your business!</p>'
            ),
        )
        msg.attach(PdfService.safe_filename('Quote', quote.quote_number), 'application/pdf', pdf_bytes)
        _send(msg, 'quote', quote.quote_number)

    @staticmethod
    def send_invoice(invoice, recipient, message=None):
        pdf_bytes = PdfService.render_invoice(invoice)
        due = invoice.due_date.strftime('%d/%m/%Y')
        body = message or f'Please find your invoice attached. Payment is due by {due}.'
        msg = Message(
            subject=f'Invoice {invoice.invoice_number}',
            recipients=[recipient],
            html=(
                f'<h2>Invoice: {escape(invoice.invoice_number)}</h2>'
                f'<p>Dear {escape(invoice.client.name)},</p>'
                f'<p>{escape(body)}</p>'
                '<p>Thank you for your business!</p>'
            ),
        )
        msg.attach(PdfService.safe_filename('Invoice', invoice.invoice_number), 'application/pdf', pdf_bytes)
        _send(msg, 'invoice', invoice.invoice_number)

    @staticmethod
    def send_payment_reminder(invoice, recipient, currency, today=None):
        """Remind the client of the outstanding amount. Returns True when the invoice is overdue."""
        today = today or date.today()
        overdue = invoice.is_overdue(today)
        amount_due = '{:,.2f}'.format(invoice.outstanding)
        html = (
            '<h2>Payment Reminder</h2>'
            f'<p>Dear {escape(invoice.client.name)},</p>'
            f'<p>This is a reminder that payment of <strong>{escape(currency)} {amount_due}</strong> '
            f'for invoice <strong>{escape(invoice.invoice_number)}</strong> is due on '
            f"{invoice.due_date.strftime('%d/%m/%Y')}.</p>"
        )
        if overdue:
            html += "<p style='color: red;'><strong>This invoice is now overdue.</strong></p>"
        html += '<p>Please arrange payment at your earliest convenience.</p><p>Thank you!</p>'
        msg = Message(
            subject=f'Payment Reminder - Invoice {invoice.invoice_number}',
            recipients=[recipient],
            html=html,
        )
        _send(msg, 'payment reminder', invoice.invoice_number)
        return overdue
