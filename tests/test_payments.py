"""Payment ledger: cached paid amount, status recommendation, overdue."""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from quotebook import db
from quotebook.exceptions import ValidationError
from quotebook.models import Invoice, PaymentHistory
from quotebook.services import PaymentService, QuoteService


@pytest.fixture
def invoice(make_quote):
    """Pending invoice for 1112.00."""
    quote = make_quote(status='approved')
    return QuoteService.convert_to_invoice(quote.id)


def test_full_payment_recommends_paid(invoice):
    _, outcome = PaymentService.record_payment(invoice.id, '1112', 'bank_transfer')
    assert outcome.recommended_status == 'paid'
    assert outcome.outstanding == 0
    assert outcome.warning is None
    # Recommendation only; stored status is untouched
    assert db.session.get(Invoice, invoice.id).payment_status == 'pending'


def test_apply_status_writes_recommendation(invoice):
    _, outcome = PaymentService.record_payment(invoice.id, '500', 'upi', apply_status=True)
    assert outcome.recommended_status == 'partial'
    assert db.session.get(Invoice, invoice.id).payment_status == 'partial'


def test_overpayment_warns_but_succeeds(invoice):
    entry, outcome = PaymentService.record_payment(invoice.id, '1200', 'cash')
    assert entry.id is not None
    assert outcome.paid_amount == Decimal('1200.00')
    assert outcome.outstanding == Decimal('-88.00')
    assert outcome.recommended_status == 'paid'
    assert 'overpaid' in outcome.warning


@pytest.mark.parametrize('amount', ['0', '-5', '0.001', 'abc'])
def test_non_positive_or_malformed_amount_rejected(invoice, amount):
    with pytest.raises(ValidationError) as exc:
        PaymentService.record_payment(invoice.id, amount, 'cash')
    assert 'amount' in exc.value.fields
    assert PaymentHistory.query.count() == 0


def test_unknown_method_rejected(invoice):
    with pytest.raises(ValidationError) as exc:
        PaymentService.record_payment(invoice.id, '10', 'barter')
    assert 'payment_method' in exc.value.fields


def test_delete_recomputes_from_remaining_entries(invoice):
    amounts = ['100.10', '200.20', '300.30', '45.67']
    entries = [PaymentService.record_payment(invoice.id, a, 'cash')[0] for a in amounts]
    assert db.session.get(Invoice, invoice.id).paid_amount == Decimal('646.27')

    outcome = PaymentService.delete_payment(entries[1].id)

    expected = sum(Decimal(a) for i, a in enumerate(amounts) if i != 1)
    assert outcome.paid_amount == expected == Decimal('446.07')
    assert db.session.get(Invoice, invoice.id).paid_amount == expected
    assert PaymentService.ledger_total(invoice.id) == expected


def test_recompute_ignores_stale_cached_value(invoice):
    PaymentService.record_payment(invoice.id, '100', 'cash')
    inv = db.session.get(Invoice, invoice.id)
    inv.paid_amount = Decimal('999')
    db.session.commit()
    assert PaymentService.recompute_paid_amount(inv) == Decimal('100.00')


def test_deleting_last_payment_returns_to_pending(invoice):
    entry, _ = PaymentService.record_payment(invoice.id, '1112', 'cash', apply_status=True)
    outcome = PaymentService.delete_payment(entry.id, apply_status=True)
    assert outcome.paid_amount == 0
    assert outcome.recommended_status == 'pending'
    assert db.session.get(Invoice, invoice.id).payment_status == 'pending'


@pytest.mark.parametrize('total,paid,expected', [
    ('1112', '0', 'pending'),
    ('1112', '1', 'partial'),
    ('1112', '1112', 'paid'),
    ('1112', '2000', 'paid'),
    ('0', '0', 'pending'),
])
def test_recommend_status(total, paid, expected):
    assert PaymentService.recommend_status(total, paid) == expected


def test_manual_status_override(invoice):
    outcome = PaymentService.update_payment_status(invoice.id, 'paid')
    assert outcome.invoice.payment_status == 'paid'
    # Cached amount is not touched by a status change
    assert outcome.paid_amount == 0
    with pytest.raises(ValidationError):
        PaymentService.update_payment_status(invoice.id, 'settled')


def test_overdue_is_derived_from_due_date(invoice):
    after_due = invoice.due_date + timedelta(days=1)
    assert not invoice.is_overdue(invoice.due_date)
    assert invoice.is_overdue(after_due)
    assert invoice.effective_status(after_due) == 'overdue'
    PaymentService.update_payment_status(invoice.id, 'paid')
    assert not invoice.is_overdue(after_due)


def test_mark_overdue_stores_status(invoice, make_quote):
    settled = QuoteService.convert_to_invoice(make_quote(status='approved').id)
    PaymentService.record_payment(settled.id, '1112', 'cash', apply_status=True)
    later = invoice.due_date + timedelta(days=5)

    assert PaymentService.mark_overdue(date.today()) == 0
    assert PaymentService.mark_overdue(later) == 1
    assert db.session.get(Invoice, invoice.id).payment_status == 'overdue'
    assert db.session.get(Invoice, settled.id).payment_status == 'paid'
    # Already overdue: nothing more to do
    assert PaymentService.mark_overdue(later) == 0
