"""Invoice routes: listing, documents and the payment ledger."""
from datetime import date
from io import BytesIO

from flask import current_app, jsonify, request, send_file
from flask_login import login_required, current_user

from quotebook import db
from quotebook.blueprints.invoices import invoices_bp
from quotebook.decorators import editor_required
from quotebook.exceptions import StateError, ValidationError
from quotebook.forms import PaymentForm, PaymentStatusForm, SendDocumentForm, json_body, validate_json
from quotebook.models import Invoice, PaymentStatus, Setting
from quotebook.serializers import serialize_invoice, serialize_outcome, serialize_payment
from quotebook.services import EmailService, PaymentService, PdfService


@invoices_bp.route('', methods=['GET'])
@login_required
def index():
    page = request.args.get('page', 1, type=int)
    status = request.args.get('payment_status', '').strip()
    client_id = request.args.get('client_id', '').strip()
    search = request.args.get('q', '').strip()
    today = date.today()
    query = Invoice.query
    if status == PaymentStatus.OVERDUE.value:
        # Stored or derived: anything unpaid past its due date
        query = query.filter(
            Invoice.payment_status != PaymentStatus.PAID.value,
            Invoice.due_date < today,
        )
    elif status:
        query = query.filter(Invoice.payment_status == status)
    if client_id:
        query = query.filter(Invoice.client_id == client_id)
    if search:
        query = query.filter(Invoice.invoice_number.ilike(f'%{search}%'))
    invoices = query.order_by(Invoice.created_at.desc()).paginate(
        page=page, per_page=current_app.config['ITEMS_PER_PAGE'], error_out=False,
    )
    return jsonify({
        'items': [serialize_invoice(i, today=today) for i in invoices.items],
        'total': invoices.total,
        'page': invoices.page,
        'pages': invoices.pages,
    })


@invoices_bp.route('/<invoice_id>', methods=['GET'])
@login_required
def detail(invoice_id):
    invoice = db.get_or_404(Invoice, invoice_id)
    return jsonify(serialize_invoice(invoice, detail=True))


@invoices_bp.route('/<invoice_id>/payment', methods=['POST'])
@login_required
@editor_required
def record_payment(invoice_id):
    form = validate_json(PaymentForm, json_body())
    entry, outcome = PaymentService.record_payment(
        invoice_id,
        amount=form.amount.data,
        payment_method=form.payment_method.data,
        payment_date=form.payment_date.data,
        transaction_id=form.transaction_id.data,
        notes=form.notes.data,
        recorded_by_id=current_user.id,
        apply_status=form.apply_status.data,
    )
    return jsonify({'payment': serialize_payment(entry), **serialize_outcome(outcome)}), 201


@invoices_bp.route('/<invoice_id>/payment-history', methods=['GET'])
@login_required
def payment_history(invoice_id):
    invoice = db.get_or_404(Invoice, invoice_id)
    return jsonify([serialize_payment(p) for p in PaymentService.history(invoice.id)])


@invoices_bp.route('/<invoice_id>/payment-status', methods=['PUT'])
@login_required
@editor_required
def payment_status(invoice_id):
    data = json_body()
    if 'paid_amount' in data:
        raise ValidationError(
            'Paid amount is derived from payment history.',
            fields={'paid_amount': ['Record or delete payments instead.']},
        )
    form = validate_json(PaymentStatusForm, data)
    outcome = PaymentService.update_payment_status(
        invoice_id, form.payment_status.data, user_id=current_user.id,
    )
    return jsonify(serialize_outcome(outcome))


@invoices_bp.route('/<invoice_id>/pdf')
@login_required
def pdf(invoice_id):
    invoice = db.get_or_404(Invoice, invoice_id)
    pdf_bytes = PdfService.render_invoice(invoice)
    return send_file(
        BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=PdfService.safe_filename('Invoice', invoice.invoice_number),
    )


@invoices_bp.route('/<invoice_id>/email', methods=['POST'])
@login_required
@editor_required
def email(invoice_id):
    invoice = db.get_or_404(Invoice, invoice_id)
    form = validate_json(SendDocumentForm, json_body())
    recipient = form.email.data or invoice.client.email
    EmailService.send_invoice(invoice, recipient, form.message.data)
    return jsonify({'success': True, 'recipient': recipient})


@invoices_bp.route('/<invoice_id>/reminder', methods=['POST'])
@login_required
@editor_required
def reminder(invoice_id):
    invoice = db.get_or_404(Invoice, invoice_id)
    if invoice.payment_status == PaymentStatus.PAID.value:
        raise StateError('Invoice is already paid.')
    form = validate_json(SendDocumentForm, json_body())
    recipient = form.email.data or invoice.client.email
    currency = Setting.get('currency', current_app.config['DEFAULT_CURRENCY'])
    overdue = EmailService.send_payment_reminder(invoice, recipient, currency)
    return jsonify({'success': True, 'recipient': recipient, 'overdue': overdue})
