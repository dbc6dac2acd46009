"""Quote routes."""
from io import BytesIO

from flask import current_app, jsonify, request, send_file
from flask_login import login_required, current_user

from quotebook import db
from quotebook.blueprints.quotes import quotes_bp
from quotebook.decorators import editor_required
from quotebook.exceptions import ValidationError
from quotebook.forms import (
    PricingForm, QuoteForm, QuoteItemForm, QuoteStatusForm, SendDocumentForm, json_body, validate_json,
)
from quotebook.models import Quote, QuoteStatus
from quotebook.serializers import serialize_invoice, serialize_quote
from quotebook.services import EmailService, PdfService, PricingService, QuoteService
from quotebook.services.quote_service import DETAIL_FIELDS

MILESTONE_STATUSES = ('planned', 'in-progress', 'completed', 'delayed')


def _items_from(data, required=True):
    """Validated line items plus any per-item field errors keyed ``items.N.field``."""
    raw_items = data.get('items')
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        return [], {'items': ['Items must be a list.']}
    if required and not raw_items:
        return [], {'items': ['Add at least one line item.']}
    items, errors = [], {}
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            errors[f'items.{idx}'] = ['Invalid line item.']
            continue
        try:
            form = validate_json(QuoteItemForm, raw, prefix=f'items.{idx}')
        except ValidationError as e:
            errors.update(e.fields)
            continue
        items.append({
            'description': form.description.data.strip(),
            'quantity': form.quantity.data,
            'unit_price': form.unit_price.data,
        })
    return items, errors


def _sections_from(data):
    sections, errors = {}, {}
    if 'bom' in data:
        bom = data['bom'] or []
        if not isinstance(bom, list) or not all(isinstance(row, dict) for row in bom):
            errors['bom'] = ['Bill of materials must be a list of rows.']
        else:
            sections['bom'] = bom
    for name in ('sla', 'timeline'):
        if name in data:
            value = data[name] or {}
            if not isinstance(value, dict):
                errors[name] = ['Must be an object.']
            else:
                sections[name] = value
    for idx, milestone in enumerate((sections.get('timeline') or {}).get('milestones') or []):
        status = milestone.get('status') if isinstance(milestone, dict) else None
        if status and status not in MILESTONE_STATUSES:
            errors[f'timeline.milestones.{idx}.status'] = [
                f"Must be one of: {', '.join(MILESTONE_STATUSES)}."
            ]
    return sections, errors


def _parse_quote(data):
    """Bind a create/update payload. Raises ValidationError with every field problem at once."""
    errors = {}
    form = None
    try:
        form = validate_json(QuoteForm, data)
    except ValidationError as e:
        errors.update(e.fields)
    items, item_errors = _items_from(data)
    sections, section_errors = _sections_from(data)
    errors.update(item_errors)
    errors.update(section_errors)
    if errors:
        raise ValidationError('Please correct the highlighted fields.', fields=errors)
    details = {field: getattr(form, field).data for field in DETAIL_FIELDS}
    details.update(sections)
    return form, items, details


@quotes_bp.route('', methods=['GET'])
@login_required
def index():
    page = request.args.get('page', 1, type=int)
    status = request.args.get('status', '').strip()
    client_id = request.args.get('client_id', '').strip()
    search = request.args.get('q', '').strip()
    query = Quote.query
    if status:
        query = query.filter(Quote.status == status)
    if client_id:
        query = query.filter(Quote.client_id == client_id)
    if search:
        query = query.filter(
            db.or_(
                Quote.quote_number.ilike(f'%{search}%'),
                Quote.reference_number.ilike(f'%{search}%'),
            )
        )
    quotes = query.order_by(Quote.created_at.desc()).paginate(
        page=page, per_page=current_app.config['ITEMS_PER_PAGE'], error_out=False,
    )
    return jsonify({
        'items': [serialize_quote(q) for q in quotes.items],
        'total': quotes.total,
        'page': quotes.page,
        'pages': quotes.pages,
    })


@quotes_bp.route('', methods=['POST'])
@login_required
@editor_required
def create():
    form, items, details = _parse_quote(json_body())
    quote = QuoteService.create_quote(
        client_id=form.client_id.data,
        items_data=items,
        pricing=form.pricing_data(),
        details=details,
        validity_days=form.validity_days.data,
        created_by_id=current_user.id,
    )
    return jsonify(serialize_quote(quote, detail=True)), 201


@quotes_bp.route('/preview', methods=['POST'])
@login_required
def preview():
    """Live totals for the quote editor, computed the same way as on save."""
    data = json_body()
    errors = {}
    form = None
    try:
        form = validate_json(PricingForm, data)
    except ValidationError as e:
        errors.update(e.fields)
    items, item_errors = _items_from(data, required=False)
    errors.update(item_errors)
    if errors:
        raise ValidationError('Please correct the highlighted fields.', fields=errors)
    breakdown = QuoteService.preview(items, form.pricing_data())
    return jsonify(breakdown.as_strings())


@quotes_bp.route('/<quote_id>', methods=['GET'])
@login_required
def detail(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    return jsonify(serialize_quote(quote, detail=True))


@quotes_bp.route('/<quote_id>', methods=['PUT'])
@login_required
@editor_required
def update(quote_id):
    form, items, details = _parse_quote(json_body())
    quote = QuoteService.update_quote(
        quote_id,
        client_id=form.client_id.data,
        items_data=items,
        pricing=form.pricing_data(),
        details=details,
        validity_days=form.validity_days.data,
        updated_by_id=current_user.id,
    )
    return jsonify(serialize_quote(quote, detail=True))


@quotes_bp.route('/<quote_id>', methods=['PATCH'])
@login_required
@editor_required
def change_status(quote_id):
    form = validate_json(QuoteStatusForm, json_body())
    quote = QuoteService.change_status(quote_id, form.status.data, user_id=current_user.id)
    return jsonify(serialize_quote(quote, detail=True))


@quotes_bp.route('/<quote_id>', methods=['DELETE'])
@login_required
@editor_required
def delete(quote_id):
    QuoteService.delete_quote(quote_id, user_id=current_user.id)
    return jsonify({'success': True})


@quotes_bp.route('/<quote_id>/pricing', methods=['GET'])
@login_required
def pricing(quote_id):
    """Rate inputs for re-opening a saved quote in the editor."""
    quote = db.get_or_404(Quote, quote_id)
    rates = QuoteService.pricing_inputs(quote)
    items = [
        {'description': i.description, 'quantity': i.quantity, 'unit_price': str(i.unit_price)}
        for i in quote.items
    ]
    breakdown = PricingService.calculate(items, **rates).rounded()
    return jsonify({
        'discount_percent': format(rates['discount_percent'], 'f'),
        'cgst_percent': format(rates['cgst_percent'], 'f'),
        'sgst_percent': format(rates['sgst_percent'], 'f'),
        'igst_percent': format(rates['igst_percent'], 'f'),
        'shipping_charges': str(rates['shipping_charges']),
        'items': items,
        'totals': breakdown.as_strings(),
    })


@quotes_bp.route('/<quote_id>/convert-to-invoice', methods=['POST'])
@login_required
@editor_required
def convert_to_invoice(quote_id):
    invoice = QuoteService.convert_to_invoice(quote_id, created_by_id=current_user.id)
    return jsonify(serialize_invoice(invoice, detail=True)), 201


@quotes_bp.route('/<quote_id>/pdf')
@login_required
def pdf(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    pdf_bytes = PdfService.render_quote(quote)
    return send_file(
        BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=PdfService.safe_filename('Quote', quote.quote_number),
    )


@quotes_bp.route('/<quote_id>/email', methods=['POST'])
@login_required
@editor_required
def email(quote_id):
    quote = db.get_or_404(Quote, quote_id)
    form = validate_json(SendDocumentForm, json_body())
    recipient = form.email.data or quote.client.email
    EmailService.send_quote(quote, recipient, form.message.data)
    if quote.status == QuoteStatus.DRAFT.value:
        quote = QuoteService.change_status(quote.id, QuoteStatus.SENT, user_id=current_user.id)
    return jsonify({'success': True, 'recipient': recipient, 'status': quote.status})
