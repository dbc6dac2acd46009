"""Payment history routes."""
from flask import jsonify, request
from flask_login import login_required, current_user

from quotebook.blueprints.payments import payments_bp
from quotebook.decorators import editor_required
from quotebook.serializers import serialize_invoice, serialize_outcome
from quotebook.services import PaymentService


@payments_bp.route('/<payment_id>', methods=['DELETE'])
@login_required
@editor_required
def delete(payment_id):
    """Remove a ledger entry; the invoice's paid amount is re-derived from what remains."""
    apply_status = request.args.get('apply_status', '').lower() in ('1', 'true', 'yes')
    outcome = PaymentService.delete_payment(payment_id, user_id=current_user.id, apply_status=apply_status)
    return jsonify({'invoice': serialize_invoice(outcome.invoice), **serialize_outcome(outcome)})
