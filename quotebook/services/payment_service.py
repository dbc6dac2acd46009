"""Invoice payment ledger.

``Invoice.paid_amount`` is a cached sum of the invoice's payment history. It is
re-derived with an aggregate query after every insert or delete and is never
adjusted incrementally.
"""
import logging
from collections import namedtuple
from datetime import date

from sqlalchemy import func

from quotebook import db
from quotebook.exceptions import ValidationError
from quotebook.models import Invoice, PaymentHistory, PaymentMethod, PaymentStatus
from quotebook.services.audit_service import AuditService
from quotebook.services.pricing_service import ZERO, money, to_decimal

logger = logging.getLogger(__name__)

PaymentOutcome = namedtuple(
    'PaymentOutcome', 'invoice paid_amount outstanding recommended_status warning',
)


class PaymentService:
    @staticmethod
    def ledger_total(invoice_id):
        total = (
            db.session.query(func.coalesce(func.sum(PaymentHistory.amount), 0))
            .filter(PaymentHistory.invoice_id == invoice_id)
            .scalar()
        )
        return money(total)

    @staticmethod
    def recompute_paid_amount(invoice):
        """Re-read the ledger and store its sum on the invoice. Does not commit."""
        db.session.flush()
        invoice.paid_amount = PaymentService.ledger_total(invoice.id)
        return invoice.paid_amount

    @staticmethod
    def recommend_status(total, paid_amount):
        total = to_decimal(total)
        paid_amount = to_decimal(paid_amount)
        if paid_amount >= total and paid_amount > ZERO:
            return PaymentStatus.PAID.value
        if paid_amount > ZERO:
            return PaymentStatus.PARTIAL.value
        return PaymentStatus.PENDING.value

    @staticmethod
    def _outcome(invoice, warning=None):
        paid = to_decimal(invoice.paid_amount)
        return PaymentOutcome(
            invoice=invoice,
            paid_amount=paid,
            outstanding=to_decimal(invoice.total) - paid,
            recommended_status=PaymentService.recommend_status(invoice.total, paid),
            warning=warning,
        )

    @staticmethod
    def validate_payment(amount, payment_method):
        errors = {}
        try:
            amount = money(amount)
            if amount <= ZERO:
                errors['amount'] = ['Payment amount must be greater than zero.']
        except ArithmeticError:
            errors['amount'] = ['Enter a valid payment amount.']
        if payment_method not in {m.value for m in PaymentMethod}:
            errors['payment_method'] = ['Select a valid payment method.']
        if errors:
            raise ValidationError('Invalid payment.', fields=errors)
        return amount

    @staticmethod
    def record_payment(invoice_id, amount, payment_method, payment_date=None,
                       transaction_id=None, notes=None, recorded_by_id=None,
                       apply_status=False):
        """Append a payment and refresh the invoice's paid amount.

        Overpayment is accepted; the outcome then carries a warning. The recommended
        payment status is written to the invoice only when ``apply_status`` is set.
        """
        amount = PaymentService.validate_payment(amount, payment_method)
        invoice = db.get_or_404(Invoice, invoice_id)

        entry = PaymentHistory(
            invoice_id=invoice.id,
            amount=amount,
            payment_method=payment_method,
            transaction_id=transaction_id or None,
            notes=notes or None,
            payment_date=payment_date or date.today(),
            recorded_by_id=recorded_by_id,
        )
        db.session.add(entry)
        paid = PaymentService.recompute_paid_amount(invoice)

        warning = None
        if paid > to_decimal(invoice.total):
            warning = (
                f'Payment exceeds the outstanding balance; invoice is overpaid by '
                f'{paid - to_decimal(invoice.total)}.'
            )
            logger.warning('Invoice %s overpaid: paid=%s total=%s',
                           invoice.invoice_number, paid, invoice.total)
        if apply_status:
            invoice.payment_status = PaymentService.recommend_status(invoice.total, paid)
        db.session.commit()

        logger.info('Recorded payment %s on invoice %s (paid %s of %s)',
                    amount, invoice.invoice_number, paid, invoice.total)
        AuditService.log(
            'payment.record', 'Invoice', invoice.id, f'{amount} via {payment_method}', recorded_by_id,
        )
        return entry, PaymentService._outcome(invoice, warning)

    @staticmethod
    def delete_payment(payment_id, user_id=None, apply_status=False):
        entry = db.get_or_404(PaymentHistory, payment_id)
        invoice = entry.invoice
        amount = entry.amount
        db.session.delete(entry)
        paid = PaymentService.recompute_paid_amount(invoice)
        if apply_status:
            invoice.payment_status = PaymentService.recommend_status(invoice.total, paid)
        db.session.commit()

        logger.info('Deleted payment %s from invoice %s (paid now %s)',
                    payment_id, invoice.invoice_number, paid)
        AuditService.log('payment.delete', 'Invoice', invoice.id, str(amount), user_id)
        return PaymentService._outcome(invoice)

    @staticmethod
    def update_payment_status(invoice_id, payment_status, user_id=None):
        try:
            status = PaymentStatus(payment_status)
        except ValueError:
            allowed = ', '.join(s.value for s in PaymentStatus)
            raise ValidationError(
                'Invalid payment status.',
                fields={'payment_status': [f'Must be one of: {allowed}.']},
            )
        invoice = db.get_or_404(Invoice, invoice_id)
        previous = invoice.payment_status
        invoice.payment_status = status.value
        db.session.commit()
        AuditService.log(
            'invoice.payment_status', 'Invoice', invoice.id, f'{previous} -> {status.value}', user_id,
        )
        return PaymentService._outcome(invoice)

    @staticmethod
    def history(invoice_id):
        return (
            PaymentHistory.query.filter_by(invoice_id=invoice_id)
            .order_by(PaymentHistory.payment_date.desc(), PaymentHistory.created_at.desc())
            .all()
        )

    @staticmethod
    def mark_overdue(today=None):
        """Store ``overdue`` on unpaid invoices past their due date. Returns the count."""
        today = today or date.today()
        invoices = Invoice.query.filter(
            Invoice.due_date < today,
            Invoice.payment_status.in_([PaymentStatus.PENDING.value, PaymentStatus.PARTIAL.value]),
        ).all()
        for invoice in invoices:
            invoice.payment_status = PaymentStatus.OVERDUE.value
        db.session.commit()
        if invoices:
            logger.info('Marked %d invoices overdue', len(invoices))
        return len(invoices)
