"""JSON representations of models for the API.

Money is rendered as a two-decimal string so clients never see float rounding.
"""
from datetime import date

from quotebook.services.pricing_service import money

MONEY_FIELDS = ('subtotal', 'discount', 'cgst', 'sgst', 'igst', 'shipping_charges', 'total')


def _money(value):
    return str(money(value))


def _percent(value):
    return None if value is None else format(value.normalize(), 'f')


def _iso(value):
    return value.isoformat() if value else None


def serialize_user(u):
    return {
        'id': u.id,
        'email': u.email,
        'name': u.name,
        'role': u.role,
        'status': u.status,
    }


def serialize_client(c):
    return {
        'id': c.id,
        'name': c.name,
        'email': c.email,
        'phone': c.phone,
        'billing_address': c.billing_address,
        'shipping_address': c.shipping_address,
        'gstin': c.gstin,
        'contact_person': c.contact_person,
        'created_at': _iso(c.created_at),
    }


def serialize_item(item):
    return {
        'id': item.id,
        'description': item.description,
        'quantity': item.quantity,
        'unit_price': _money(item.unit_price),
        'subtotal': _money(item.subtotal),
    }


def serialize_quote(q, detail=False):
    data = {
        'id': q.id,
        'quote_number': q.quote_number,
        'status': q.status,
        'client_id': q.client_id,
        'client_name': q.client.name if q.client else None,
        'quote_date': _iso(q.quote_date),
        'validity_days': q.validity_days,
        'valid_until': _iso(q.valid_until),
        'invoice_id': q.invoice.id if q.invoice else None,
        'created_at': _iso(q.created_at),
    }
    data.update({f: _money(getattr(q, f)) for f in MONEY_FIELDS})
    if detail:
        data.update({
            'reference_number': q.reference_number,
            'attention_to': q.attention_to,
            'discount_percent': _percent(q.discount_percent),
            'cgst_percent': _percent(q.cgst_percent),
            'sgst_percent': _percent(q.sgst_percent),
            'igst_percent': _percent(q.igst_percent),
            'notes': q.notes,
            'terms_and_conditions': q.terms_and_conditions,
            'bom': q.section('bom'),
            'sla': q.section('sla'),
            'timeline': q.section('timeline'),
            'items': [serialize_item(i) for i in q.items],
            'client': serialize_client(q.client) if q.client else None,
        })
    return data


def serialize_payment(p):
    return {
        'id': p.id,
        'invoice_id': p.invoice_id,
        'amount': _money(p.amount),
        'payment_method': p.payment_method,
        'payment_method_label': p.METHOD_LABELS.get(p.payment_method, p.payment_method),
        'transaction_id': p.transaction_id,
        'notes': p.notes,
        'payment_date': _iso(p.payment_date),
        'recorded_by': p.recorded_by.name if p.recorded_by else None,
        'created_at': _iso(p.created_at),
    }


def serialize_invoice(inv, detail=False, today=None):
    today = today or date.today()
    data = {
        'id': inv.id,
        'invoice_number': inv.invoice_number,
        'quote_id': inv.quote_id,
        'quote_number': inv.quote.quote_number if inv.quote else None,
        'client_id': inv.client_id,
        'client_name': inv.client.name if inv.client else None,
        'invoice_date': _iso(inv.invoice_date),
        'due_date': _iso(inv.due_date),
        'payment_status': inv.payment_status,
        'effective_status': inv.effective_status(today),
        'is_overdue': inv.is_overdue(today),
        'paid_amount': _money(inv.paid_amount),
        'outstanding': _money(inv.outstanding),
    }
    data.update({f: _money(getattr(inv, f)) for f in MONEY_FIELDS})
    if detail:
        data.update({
            'notes': inv.notes,
            'terms_and_conditions': inv.terms_and_conditions,
            'items': [serialize_item(i) for i in inv.items],
            'payments': [serialize_payment(p) for p in inv.payments],
            'client': serialize_client(inv.client) if inv.client else None,
        })
    return data


def serialize_outcome(outcome):
    """Ledger state after a payment mutation."""
    return {
        'paid_amount': _money(outcome.paid_amount),
        'outstanding': _money(outcome.outstanding),
        'recommended_status': outcome.recommended_status,
        'payment_status': outcome.invoice.payment_status,
        'warning': outcome.warning,
    }


def serialize_tax_rate(r):
    return {
        'id': r.id,
        'region': r.region,
        'tax_type': r.tax_type,
        'cgst_rate': _percent(r.cgst_rate),
        'sgst_rate': _percent(r.sgst_rate),
        'igst_rate': _percent(r.igst_rate),
        'is_active': r.is_active,
    }


def serialize_audit(entry):
    return {
        'id': entry.id,
        'user_id': entry.user_id,
        'action': entry.action,
        'entity_type': entry.entity_type,
        'entity_id': entry.entity_id,
        'details': entry.details,
        'ip_address': entry.ip_address,
        'created_at': _iso(entry.created_at),
    }
