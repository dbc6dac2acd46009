"""Quote status transitions and conversion to invoice."""
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from quotebook import db
from quotebook.exceptions import StateError, ValidationError
from quotebook.models import AuditLog, Invoice, Quote, QuoteStatus, Setting
from quotebook.services import QuoteService
from quotebook.services import lifecycle

LEGAL = {
    ('draft', 'sent'),
    ('sent', 'approved'),
    ('sent', 'rejected'),
    ('approved', 'invoiced'),
}

@pytest.mark.parametrize('current', [s.value for s in QuoteStatus])
@pytest.mark.parametrize('target', [s.value for s in QuoteStatus])
def test_transition_table(current, target):
    assert lifecycle.can_transition(current, target) == ((current, target) in LEGAL)

def test_invoiced_only_via_conversion():
    with pytest.raises(StateError):
        lifecycle.ensure_transition('approved', 'invoiced')
    assert lifecycle.ensure_transition('approved', 'invoiced', via_conversion=True) is QuoteStatus.INVOICED

def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationError) as exc:
        lifecycle.parse_status('accepted')
    assert 'status' in exc.value.fields

def test_terminal_statuses():
    assert lifecycle.TERMINAL_STATUSES == {QuoteStatus.REJECTED, QuoteStatus.INVOICED}

def test_create_quote_persists_rounded_totals(make_quote):
    quote = make_quote()
    assert quote.status == 'draft'
    assert quote.quote_number.startswith('QT-')
    assert quote.quote_number.endswith('-0001')
    assert quote.subtotal == Decimal('1000.00')
    assert quote.discount == Decimal('100.00')
    assert quote.cgst == Decimal('81.00')
    assert quote.total == Decimal('1112.00')
    assert quote.items.count() == 1

def test_numbers_increment_and_follow_prefix_setting(make_quote):
    first = make_quote()
    second = make_quote()
    assert second.quote_number.endswith('-0002')
    assert first.quote_number[:-4] == second.quote_number[:-4]
    Setting.set('quote_prefix', 'est')
    assert make_quote().quote_number.startswith('EST-')

def test_update_replaces_items(make_quote):
    quote = make_quote(status='sent')
    QuoteService.update_quote(
        quote.id, quote.client_id,
        [{'description': 'A', 'quantity': 1, 'unit_price': '10'},
         {'description': 'B', 'quantity': 4, 'unit_price': '2.50'}],
        {'cgst_percent': '9', 'sgst_percent': '9'},
    )
    db.session.refresh(quote)
    assert [i.description for i in quote.items] == ['A', 'B']
    assert quote.subtotal == Decimal('20.00')
    assert quote.total == Decimal('23.60')

@pytest.mark.parametrize('status', ['approved', 'rejected'])
def test_edit_outside_draft_or_sent_fails(make_quote, status):
    quote = make_quote(status=status)
    with pytest.raises(StateError):
        QuoteService.update_quote(quote.id, quote.client_id, [{'description': 'x', 'quantity': 1, 'unit_price': 1}], {})

def test_skipping_a_step_fails(make_quote):
    quote = make_quote()
    with pytest.raises(StateError):
        QuoteService.change_status(quote.id, 'approved')
    assert db.session.get(Quote, quote.id).status == 'draft'

def test_unapproved_quote_cannot_be_converted(make_quote):
    quote = make_quote(status='sent')
    with pytest.raises(StateError):
        QuoteService.convert_to_invoice(quote.id)
    assert Invoice.query.count() == 0

def test_sent_approve_convert_scenario(make_quote):
    quote = make_quote(status='sent')
    QuoteService.change_status(quote.id, 'approved')
    total_at_conversion = db.session.get(Quote, quote.id).total
    invoice = QuoteService.convert_to_invoice(quote.id)
    assert invoice.total == total_at_conversion == Decimal('1112.00')
    assert invoice.payment_status == 'pending'
    assert invoice.paid_amount == 0
    assert invoice.invoice_number.startswith('INV-')
    assert (invoice.due_date - invoice.invoice_date).days == 30
    assert [(i.description, i.quantity, i.subtotal) for i in invoice.items] == [
        ('Widget', 2, Decimal('1000.00')),
    ]
    assert db.session.get(Quote, quote.id).status == 'invoiced'
    assert AuditLog.query.filter_by(action='quote.convert_to_invoice').count() == 1

def test_payment_terms_setting_sets_due_date(make_quote):
    Setting.set('payment_terms_days', '45')
    invoice = QuoteService.convert_to_invoice(make_quote(status='approved').id)
    assert (invoice.due_date - invoice.invoice_date).days == 45

def test_double_conversion_fails(make_quote):
    quote = make_quote(status='approved')
    QuoteService.convert_to_invoice(quote.id)
    with pytest.raises(StateError):
        QuoteService.convert_to_invoice(quote.id)
    assert Invoice.query.filter_by(quote_id=quote.id).count() == 1

def test_conversion_rejects_existing_invoice_even_if_status_lags(make_quote):
    # An invoice row already exists while the quote still reads approved
    quote = make_quote(status='approved')
    QuoteService.convert_to_invoice(quote.id)
    quote = db.session.get(Quote, quote.id)
    quote.status = 'approved'
    db.session.commit()
    with pytest.raises(StateError):
        QuoteService.convert_to_invoice(quote.id)
    assert Invoice.query.count() == 1

def test_invoiced_quote_is_frozen(make_quote):
    quote = make_quote(status='approved')
    QuoteService.convert_to_invoice(quote.id)
    with pytest.raises(StateError):
        QuoteService.update_quote(quote.id, quote.client_id, [{'description': 'x', 'quantity': 1, 'unit_price': 1}], {})
    with pytest.raises(StateError):
        QuoteService.delete_quote(quote.id)
    with pytest.raises(StateError):
        QuoteService.change_status(quote.id, 'sent')

def test_pricing_inputs_prefer_stored_rates(make_quote):
    quote = make_quote()
    rates = QuoteService.pricing_inputs(quote)
    assert rates['discount_percent'] == Decimal('10')
    assert rates['cgst_percent'] == Decimal('9')
    assert rates['shipping_charges'] == Decimal('50')

def test_pricing_inputs_derive_rates_when_missing(make_quote):
    quote = make_quote()
    quote.discount_percent = quote.cgst_percent = quote.sgst_percent = quote.igst_percent = None
    db.session.commit()
    rates = QuoteService.pricing_inputs(quote)
    assert rates['discount_percent'] == Decimal('10')
    assert rates['cgst_percent'] == Decimal('9')
    assert rates['igst_percent'] == 0

def test_tax_rate_preset_fills_rates(make_client):
    from quotebook.models import TaxRate
    rate = TaxRate(region='Karnataka', cgst_rate=Decimal('9'), sgst_rate=Decimal('9'), igst_rate=0)
    db.session.add(rate)
    db.session.commit()
    client = make_client()
    quote = QuoteService.create_quote(
        client.id, [{'description': 'x', 'quantity': 1, 'unit_price': '100'}],
        {'tax_rate_id': rate.id, 'cgst_percent': '1'},
    )
    assert quote.cgst == Decimal('9.00')
    assert quote.sgst == Decimal('9.00')
    assert quote.total == Decimal('118.00')

def test_unknown_client_is_rejected(db_ctx):
    with pytest.raises(ValidationError) as exc:
        QuoteService.create_quote('missing', [{'description': 'x', 'quantity': 1, 'unit_price': 1}], {})
    assert 'client_id' in exc.value.fields


def test_failed_conversion_leaves_quote_approved_and_retryable(make_quote, monkeypatch):
    quote_id = make_quote(status='approved').id

    def failing_commit(self):
        raise OperationalError('INSERT INTO invoices', {}, Exception('database is locked'))

    monkeypatch.setattr(Session, 'commit', failing_commit)
    with pytest.raises(OperationalError):
        QuoteService.convert_to_invoice(quote_id)
    monkeypatch.undo()

    assert db.session.get(Quote, quote_id).status == 'approved'
    assert Invoice.query.count() == 0

    invoice = QuoteService.convert_to_invoice(quote_id)
    assert invoice.quote_id == quote_id
    assert db.session.get(Quote, quote_id).status == 'invoiced'
    assert Invoice.query.count() == 1


def test_unit_prices_are_rounded_before_totalling(make_quote):
    quote = make_quote(
        items=[{'description': 'Bolt', 'quantity': 3, 'unit_price': '0.335'}],
        pricing={'cgst_percent': '0'},
    )
    items = list(quote.items)
    assert items[0].unit_price == Decimal('0.34')
    assert items[0].subtotal == Decimal('1.02')
    assert quote.subtotal == sum(i.subtotal for i in items) == Decimal('1.02')
    assert quote.total == Decimal('1.02')


def test_preview_rounds_unit_prices_like_save(db_ctx):
    breakdown = QuoteService.preview([{'description': 'Bolt', 'quantity': 3, 'unit_price': '0.335'}], {})
    assert breakdown.subtotal == Decimal('1.02')


def test_sequence_keeps_counting_past_four_digits(make_quote):
    first = make_quote()
    prefix, month, _ = first.quote_number.split('-')
    first.quote_number = f'{prefix}-{month}-9999'
    db.session.commit()
    assert make_quote().quote_number == f'{prefix}-{month}-10000'
    assert make_quote().quote_number == f'{prefix}-{month}-10001'


def test_prefix_wildcards_match_literally(make_quote):
    other = make_quote()
    month = other.quote_number.split('-')[1]
    other.quote_number = f'QXT-{month}-0007'
    db.session.commit()
    Setting.set('quote_prefix', 'Q_T')
    assert make_quote().quote_number == f'Q_T-{month}-0001'
