"""Quote business logic and conversion to invoice."""
import json
import logging
from datetime import date, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quotebook import db
from quotebook.exceptions import StateError, ValidationError
from quotebook.models import (
    Client, Invoice, InvoiceItem, Quote, QuoteItem, QuoteStatus, Setting, TaxRate,
)
from quotebook.services import lifecycle
from quotebook.services.audit_service import AuditService
from quotebook.services.numbering_service import NumberingService
from quotebook.services.pricing_service import MAX_AMOUNT, PricingService, money, to_decimal

logger = logging.getLogger(__name__)

PRICING_FIELDS = ('discount_percent', 'cgst_percent', 'sgst_percent', 'igst_percent', 'shipping_charges')
DETAIL_FIELDS = ('reference_number', 'attention_to', 'notes', 'terms_and_conditions')
SECTION_FIELDS = ('bom', 'sla', 'timeline')


def _dump_section(value):
    if value in (None, '', [], {}):
        return None
    return json.dumps(value)


def _priced_items(items_data):
    """Line items with unit prices rounded to cents, as they are stored."""
    return [dict(item, unit_price=money(item['unit_price'])) for item in items_data]


def _checked(breakdown):
    if any(abs(value) > MAX_AMOUNT for value in breakdown):
        raise ValidationError(
            'Quote total is too large.',
            fields={'items': [f'Amounts must not exceed {MAX_AMOUNT}.']},
        )
    return breakdown


class QuoteService:
    @staticmethod
    def resolve_rates(pricing):
        """Fill CGST/SGST/IGST from a tax-rate preset when ``tax_rate_id`` is given."""
        pricing = dict(pricing)
        tax_rate_id = pricing.pop('tax_rate_id', None)
        if tax_rate_id:
            rate = db.session.get(TaxRate, tax_rate_id)
            if rate is None or not rate.is_active:
                raise ValidationError(
                    'Unknown tax rate.', fields={'tax_rate_id': ['Select an active tax rate.']}
                )
            pricing['cgst_percent'] = rate.cgst_rate
            pricing['sgst_percent'] = rate.sgst_rate
            pricing['igst_percent'] = rate.igst_rate
        return {field: to_decimal(pricing.get(field)) for field in PRICING_FIELDS}

    @staticmethod
    def preview(items_data, pricing):
        """Totals for unsaved input, computed exactly as they would be persisted."""
        pricing = QuoteService.resolve_rates(pricing)
        return _checked(PricingService.calculate(_priced_items(items_data), **pricing).rounded())

    @staticmethod
    def apply_pricing(quote, items_data, pricing):
        """Replace quote line items and recompute totals. Does not commit."""
        items_data = _priced_items(items_data)
        breakdown = _checked(PricingService.calculate(items_data, **pricing).rounded())
        for qi in list(quote.items):
            db.session.delete(qi)
        for position, item in enumerate(items_data):
            qty = int(item['quantity'])
            unit_price = item['unit_price']
            qi = QuoteItem(
                quote_id=quote.id,
                description=item['description'],
                quantity=qty,
                unit_price=unit_price,
                subtotal=money(PricingService.line_subtotal(qty, unit_price)),
                sort_order=position,
            )
            db.session.add(qi)

        quote.discount_percent = pricing['discount_percent']
        quote.cgst_percent = pricing['cgst_percent']
        quote.sgst_percent = pricing['sgst_percent']
        quote.igst_percent = pricing['igst_percent']
        quote.subtotal = breakdown.subtotal
        quote.discount = breakdown.discount
        quote.cgst = breakdown.cgst
        quote.sgst = breakdown.sgst
        quote.igst = breakdown.igst
        quote.shipping_charges = breakdown.shipping_charges
        quote.total = breakdown.total
        return breakdown

    @staticmethod
    def _apply_details(quote, details):
        for field in DETAIL_FIELDS:
            if field in details:
                setattr(quote, field, details[field] or None)
        for name in SECTION_FIELDS:
            if name in details:
                setattr(quote, f'{name}_section', _dump_section(details[name]))

    @staticmethod
    def _require_client(client_id):
        if not client_id or db.session.get(Client, client_id) is None:
            raise ValidationError('Unknown client.', fields={'client_id': ['Select an existing client.']})

    @staticmethod
    def create_quote(client_id, items_data, pricing, details=None, validity_days=None,
                     created_by_id=None):
        QuoteService._require_client(client_id)
        pricing = QuoteService.resolve_rates(pricing)
        quote_number = NumberingService.next_quote_number()
        quote = Quote(
            quote_number=quote_number,
            client_id=client_id,
            status=QuoteStatus.DRAFT.value,
            validity_days=validity_days or current_app.config['DEFAULT_VALIDITY_DAYS'],
            created_by_id=created_by_id,
        )
        db.session.add(quote)
        db.session.flush()
        QuoteService._apply_details(quote, details or {})
        QuoteService.apply_pricing(quote, items_data, pricing)
        db.session.commit()
        logger.info('Created quote %s total=%s', quote_number, quote.total)
        AuditService.log('quote.create', 'Quote', quote.id, quote_number, created_by_id)
        return quote

    @staticmethod
    def update_quote(quote_id, client_id, items_data, pricing, details=None, validity_days=None,
                     updated_by_id=None):
        quote = db.get_or_404(Quote, quote_id)
        lifecycle.ensure_editable(quote.status)
        QuoteService._require_client(client_id)
        pricing = QuoteService.resolve_rates(pricing)
        quote.client_id = client_id
        if validity_days:
            quote.validity_days = validity_days
        QuoteService._apply_details(quote, details or {})
        QuoteService.apply_pricing(quote, items_data, pricing)
        db.session.commit()
        logger.info('Updated quote %s total=%s', quote.quote_number, quote.total)
        AuditService.log('quote.update', 'Quote', quote.id, quote.quote_number, updated_by_id)
        return quote

    @staticmethod
    def change_status(quote_id, status, user_id=None):
        quote = db.get_or_404(Quote, quote_id)
        previous = quote.status
        target = lifecycle.ensure_transition(quote.status, status)
        quote.status = target.value
        db.session.commit()
        logger.info('Quote %s status %s -> %s', quote.quote_number, previous, target.value)
        AuditService.log(
            'quote.status', 'Quote', quote.id, f'{previous} -> {target.value}', user_id,
        )
        return quote

    @staticmethod
    def delete_quote(quote_id, user_id=None):
        quote = db.get_or_404(Quote, quote_id)
        if quote.status == QuoteStatus.INVOICED.value or quote.invoice is not None:
            raise StateError('Invoiced quotes cannot be deleted.')
        number = quote.quote_number
        db.session.delete(quote)
        db.session.commit()
        AuditService.log('quote.delete', 'Quote', quote_id, number, user_id)

    @staticmethod
    def pricing_inputs(quote):
        """Percentages to pre-fill the edit form."""
        if quote.cgst_percent is not None:
            rates = {
                'discount_percent': to_decimal(quote.discount_percent),
                'cgst_percent': to_decimal(quote.cgst_percent),
                'sgst_percent': to_decimal(quote.sgst_percent),
                'igst_percent': to_decimal(quote.igst_percent),
            }
        else:
            rates = PricingService.rates_from_amounts(
                quote.subtotal, quote.discount, quote.cgst, quote.sgst, quote.igst,
            )
        rates['shipping_charges'] = to_decimal(quote.shipping_charges)
        return rates

    @staticmethod
    def convert_to_invoice(quote_id, created_by_id=None):
        """Create the invoice and mark the quote invoiced in a single commit.

        Any failure rolls both back, leaving the quote approved for a retry.
        """
        quote = Quote.query.filter_by(id=quote_id).with_for_update().first_or_404()
        if Invoice.query.filter_by(quote_id=quote.id).first() is not None:
            raise StateError('Quote has already been converted to an invoice.')
        lifecycle.ensure_convertible(quote.status)

        terms_days = Setting.get_int('payment_terms_days', current_app.config['PAYMENT_TERMS_DAYS'])
        invoice_date = date.today()
        invoice_number = NumberingService.next_invoice_number()
        invoice = Invoice(
            invoice_number=invoice_number,
            quote_id=quote.id,
            client_id=quote.client_id,
            invoice_date=invoice_date,
            due_date=invoice_date + timedelta(days=terms_days),
            subtotal=quote.subtotal,
            discount=quote.discount,
            cgst=quote.cgst,
            sgst=quote.sgst,
            igst=quote.igst,
            shipping_charges=quote.shipping_charges,
            total=quote.total,
            notes=quote.notes,
            terms_and_conditions=quote.terms_and_conditions,
            payment_status='pending',
            paid_amount=0,
            created_by_id=created_by_id,
        )
        try:
            db.session.add(invoice)
            db.session.flush()
            for qi in quote.items:
                db.session.add(InvoiceItem(
                    invoice_id=invoice.id,
                    description=qi.description,
                    quantity=qi.quantity,
                    unit_price=qi.unit_price,
                    subtotal=qi.subtotal,
                    sort_order=qi.sort_order,
                ))
            quote.status = lifecycle.ensure_transition(
                quote.status, QuoteStatus.INVOICED, via_conversion=True,
            ).value
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.warning('Duplicate conversion of quote %s rejected', quote_id)
            raise StateError('Quote has already been converted to an invoice.')
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception('Converting quote %s to invoice failed', quote_id)
            raise

        logger.info('Converted quote %s to invoice %s', quote.quote_number, invoice_number)
        AuditService.log(
            'quote.convert_to_invoice', 'Quote', quote.id, invoice_number, created_by_id,
        )
        return invoice
